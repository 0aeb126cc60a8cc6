"""Access/refresh token persistence.

The token pair is the only state shared between the HTTP client and the rest
of the application. Stores are injected into `ApiClient` rather than read
from a global, so tests and embedders choose where credentials live.
"""

import json
from pathlib import Path
from typing import Protocol

import redis.asyncio as redis
import structlog

from docquery.schemas.auth_schema import TokenPair

logger = structlog.get_logger()

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class TokenStore(Protocol):
    """Storage for the current token pair."""

    async def get_access_token(self) -> str | None: ...

    async def get_refresh_token(self) -> str | None: ...

    async def set_tokens(self, tokens: TokenPair) -> None: ...

    async def clear(self) -> None: ...


async def is_authenticated(store: TokenStore) -> bool:
    """A stored access token means the user is considered signed in."""
    return bool(await store.get_access_token())


class MemoryTokenStore:
    """Process-local store; tokens are lost on exit."""

    def __init__(self, tokens: TokenPair | None = None) -> None:
        self._tokens: dict[str, str] = {}
        if tokens is not None:
            self._tokens = {
                ACCESS_TOKEN_KEY: tokens.access_token,
                REFRESH_TOKEN_KEY: tokens.refresh_token,
            }

    async def get_access_token(self) -> str | None:
        return self._tokens.get(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> str | None:
        return self._tokens.get(REFRESH_TOKEN_KEY)

    async def set_tokens(self, tokens: TokenPair) -> None:
        self._tokens = {
            ACCESS_TOKEN_KEY: tokens.access_token,
            REFRESH_TOKEN_KEY: tokens.refresh_token,
        }

    async def clear(self) -> None:
        self._tokens = {}


class FileTokenStore:
    """JSON file store, written whole on every change."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def _read(self) -> dict[str, str]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Unreadable token file ignored", path=str(self._path))
            return {}
        return data if isinstance(data, dict) else {}

    async def get_access_token(self) -> str | None:
        return self._read().get(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> str | None:
        return self._read().get(REFRESH_TOKEN_KEY)

    async def set_tokens(self, tokens: TokenPair) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(
            json.dumps(
                {
                    ACCESS_TOKEN_KEY: tokens.access_token,
                    REFRESH_TOKEN_KEY: tokens.refresh_token,
                }
            ),
            encoding="utf-8",
        )
        tmp.chmod(0o600)
        tmp.replace(self._path)

    async def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class RedisTokenStore:
    """Redis-backed store for shells that share credentials across processes."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "docquery:") -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    async def get_access_token(self) -> str | None:
        return await self._redis.get(self._key(ACCESS_TOKEN_KEY))

    async def get_refresh_token(self) -> str | None:
        return await self._redis.get(self._key(REFRESH_TOKEN_KEY))

    async def set_tokens(self, tokens: TokenPair) -> None:
        await self._redis.mset(
            {
                self._key(ACCESS_TOKEN_KEY): tokens.access_token,
                self._key(REFRESH_TOKEN_KEY): tokens.refresh_token,
            }
        )

    async def clear(self) -> None:
        await self._redis.delete(
            self._key(ACCESS_TOKEN_KEY), self._key(REFRESH_TOKEN_KEY)
        )

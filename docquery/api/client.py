"""Authenticated HTTP client with transparent single-shot token refresh."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from docquery.api.token_store import TokenStore
from docquery.schemas.auth_schema import TokenPair

logger = structlog.get_logger()

REFRESH_PATH = "/auth/refresh"
MAX_REFRESH_ATTEMPTS = 1

AuthFailureCallback = Callable[[], Awaitable[None] | None]


def should_refresh(
    status_code: int | None,
    attempt: int,
    max_refresh_attempts: int = MAX_REFRESH_ATTEMPTS,
) -> bool:
    """Decide whether a failed response warrants a token refresh and replay.

    Only a 401 qualifies, and only while the request has been replayed fewer
    than `max_refresh_attempts` times. Transport failures (no status) never do.
    """
    return status_code == 401 and attempt < max_refresh_attempts


class ApiClient:
    """Wraps `httpx.AsyncClient` with bearer auth and refresh-on-401.

    Non-2xx responses raise `httpx.HTTPStatusError` and transport failures
    raise `httpx.TransportError`; both reach the caller unchanged unless the
    single refresh-and-replay recovers the request.
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        *,
        on_auth_failure: AuthFailureCallback | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._tokens = token_store
        self._on_auth_failure = on_auth_failure
        self._refresh_lock = asyncio.Lock()
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def token_store(self) -> TokenStore:
        return self._tokens

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Public request API ---

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, refreshing the access token once on 401."""
        attempt = 0
        while True:
            access_token = await self._tokens.get_access_token()
            request = self._http.build_request(
                method,
                url,
                params=_drop_none(params),
                json=json,
                data=data,
                files=files,
                headers=_auth_headers(access_token),
            )
            response = await self._http.send(request)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError:
                if not should_refresh(response.status_code, attempt):
                    raise
                attempt += 1
                new_token = await self._refresh_access_token(stale_token=access_token)
                if new_token is None:
                    raise
                logger.debug("Replaying request after refresh", method=method, url=url)
                continue
            return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    # --- Refresh ---

    async def _refresh_access_token(self, stale_token: str | None) -> str | None:
        """Exchange the refresh token for a new pair.

        Concurrent callers are coalesced: whoever waits on the lock while
        another refresh succeeds reuses the token it stored. Returns None when
        there is no refresh token to use.
        """
        async with self._refresh_lock:
            current = await self._tokens.get_access_token()
            if current and current != stale_token:
                logger.debug("Reusing token from concurrent refresh")
                return current

            refresh_token = await self._tokens.get_refresh_token()
            if not refresh_token:
                return None

            try:
                response = await self._http.post(
                    REFRESH_PATH, params={"refresh_token": refresh_token}
                )
                response.raise_for_status()
                tokens = TokenPair.model_validate(response.json())
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Token refresh failed", error=str(exc))
                await self._tokens.clear()
                await self._notify_auth_failure()
                raise

            await self._tokens.set_tokens(tokens)
            logger.info("Access token refreshed")
            return tokens.access_token

    async def _notify_auth_failure(self) -> None:
        if self._on_auth_failure is None:
            return
        result = self._on_auth_failure()
        if inspect.isawaitable(result):
            await result


def _auth_headers(access_token: str | None) -> dict[str, str]:
    if not access_token:
        return {}
    return {"Authorization": f"Bearer {access_token}"}


def _drop_none(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Omit unset query parameters instead of sending them empty."""
    if params is None:
        return None
    return {key: value for key, value in params.items() if value is not None}

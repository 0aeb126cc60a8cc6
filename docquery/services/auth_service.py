"""Authentication and profile operations."""

import httpx
import structlog

from docquery.api.client import ApiClient
from docquery.api.token_store import is_authenticated
from docquery.core.exceptions import NotAuthenticatedError
from docquery.schemas.auth_schema import (
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenPair,
    UserResponse,
    UserStats,
)

logger = structlog.get_logger()


class AuthService:
    """Orchestrates login, registration, logout and the current-user lookup."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self._tokens = client.token_store
        self.user: UserResponse | None = None

    async def is_authenticated(self) -> bool:
        return await is_authenticated(self._tokens)

    async def login(self, request: LoginRequest) -> UserResponse:
        """Exchange credentials for a token pair and load the profile."""
        response = await self._client.post("/auth/login", json=request.model_dump())
        await self._tokens.set_tokens(TokenPair.model_validate(response.json()))
        logger.info("User logged in", email=request.email)
        return await self.current_user()

    async def register(self, request: RegisterRequest) -> UserResponse:
        """Register, then log in with the same credentials."""
        await self._client.post(
            "/auth/register", json=request.model_dump(exclude_none=True)
        )
        logger.info("User registered", email=request.email)
        return await self.login(
            LoginRequest(email=request.email, password=request.password)
        )

    async def logout(self) -> None:
        """Forget the stored tokens; the backend is not contacted."""
        await self._tokens.clear()
        self.user = None
        logger.info("User logged out")

    async def current_user(self) -> UserResponse:
        """Fetch the signed-in user; stored tokens are dropped if that fails."""
        if not await self.is_authenticated():
            self.user = None
            raise NotAuthenticatedError
        try:
            response = await self._client.get("/users/me")
        except httpx.HTTPError:
            logger.exception("Failed to fetch current user")
            await self._tokens.clear()
            self.user = None
            raise
        self.user = UserResponse.model_validate(response.json())
        return self.user

    async def update_profile(self, request: ProfileUpdateRequest) -> UserResponse:
        response = await self._client.put(
            "/users/me", json=request.model_dump(exclude_none=True)
        )
        self.user = UserResponse.model_validate(response.json())
        return self.user

    async def change_password(self, request: PasswordChangeRequest) -> None:
        await self._client.put("/users/me/password", json=request.model_dump())

    async def stats(self) -> UserStats:
        response = await self._client.get("/users/me/stats")
        return UserStats.model_validate(response.json())

"""Async HTTP client for the directory API.

DirectoryClient wraps an httpx.AsyncClient and keeps the sign-in state in a
SessionContext. HttpProviderDirectory lets the search pipeline run on the
client side against the same API.
"""

import logging
import uuid
from datetime import datetime

import httpx

from servicefinder.core.auth import SESSION_TOKEN_HEADER
from servicefinder.core.errors import ProviderFetchError
from servicefinder.core.session_context import AuthSession, SessionContext
from servicefinder.schemas.profile import ProfileRead
from servicefinder.schemas.provider import ProviderRecord
from servicefinder.schemas.user import ProviderSignup, SeekerSignup
from servicefinder.services.provider_directory import ProviderDirectory

logger = logging.getLogger("servicefinder.client")


class DirectoryClientError(Exception):
    """Non-2xx response from the directory API."""

    def __init__(self, status_code: int, detail):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class DirectoryClient:
    def __init__(self, http: httpx.AsyncClient, context: SessionContext | None = None):
        self._http = http
        self.context = context if context is not None else SessionContext()

    def _auth_headers(self) -> dict[str, str]:
        token = self.context.token
        return {SESSION_TOKEN_HEADER: token} if token else {}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        response = await self._http.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            detail = body.get("detail") if isinstance(body, dict) else body
            raise DirectoryClientError(response.status_code, detail)
        return response

    # --- auth ---

    async def sign_up(self, payload: SeekerSignup | ProviderSignup) -> dict:
        """Create an account. Does not sign in."""
        response = await self._request("POST", "/auth/signup", json=payload.model_dump(mode="json"))
        return response.json()

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        token = response.json()["token"]

        response = await self._request(
            "GET", "/auth/session", headers={SESSION_TOKEN_HEADER: token}
        )
        data = response.json()["session"]
        if data is None:
            raise DirectoryClientError(401, "Session not available after login")

        session = _to_auth_session(token, data)
        self.context.set_session(session)
        logger.debug("Signed in role=%s", session.role)
        return session

    async def sign_out(self) -> None:
        """Revoke the current token and clear the context.

        The context is cleared even when the server already considers the
        token dead.
        """
        if self.context.token is None:
            return
        try:
            await self._request("POST", "/auth/logout")
        except DirectoryClientError as exc:
            if exc.status_code != 401:
                raise
            logger.debug("Token already rejected by server; clearing local session")
        self.context.set_session(None)

    async def get_session(self) -> AuthSession | None:
        """Re-validate the stored token; clear the context if the server rejects it."""
        token = self.context.token
        if token is None:
            return None
        response = await self._request("GET", "/auth/session")
        data = response.json()["session"]
        if data is None:
            self.context.set_session(None)
            return None
        return _to_auth_session(token, data)

    # --- directory reads ---

    async def list_providers(self) -> list[ProviderRecord]:
        response = await self._request("GET", "/providers")
        rows = response.json()
        if not isinstance(rows, list):
            raise DirectoryClientError(response.status_code, "Expected a list of providers")
        return [ProviderRecord.model_validate(row) for row in rows]

    async def get_provider(self, user_id: uuid.UUID) -> ProviderRecord | None:
        try:
            response = await self._request("GET", f"/providers/{user_id}")
        except DirectoryClientError as exc:
            if exc.status_code == 404:
                return None
            raise
        return ProviderRecord.model_validate(response.json())

    async def search_providers(self, query: str = "", location: str = "") -> dict:
        """Server-side search. Returns the raw response body."""
        response = await self._request(
            "GET", "/providers/search", params={"q": query, "location": location}
        )
        return response.json()

    async def get_profile(self) -> ProfileRead:
        response = await self._request("GET", "/profile")
        return ProfileRead.model_validate(response.json())


def _to_auth_session(token: str, data: dict) -> AuthSession:
    return AuthSession(
        token=token,
        user_id=uuid.UUID(data["user_id"]),
        email=data["email"],
        role=data["role"],
        expires_at=_parse_datetime(data.get("expires_at")),
    )


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class HttpProviderDirectory(ProviderDirectory):
    """ProviderDirectory over the HTTP API, for client-side SearchSessions.

    Transport errors, error statuses, undecodable bodies and rows that fail
    ProviderRecord validation all surface as ProviderFetchError.
    """

    def __init__(self, client: DirectoryClient):
        self._client = client

    async def list_providers(self) -> list[ProviderRecord]:
        try:
            return await self._client.list_providers()
        except (httpx.HTTPError, DirectoryClientError, ValueError) as exc:
            raise ProviderFetchError(f"provider read failed: {exc}") from exc

    async def get_provider(self, user_id: uuid.UUID) -> ProviderRecord | None:
        try:
            return await self._client.get_provider(user_id)
        except (httpx.HTTPError, DirectoryClientError, ValueError) as exc:
            raise ProviderFetchError(f"provider read failed: {exc}") from exc

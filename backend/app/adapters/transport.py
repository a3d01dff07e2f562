"""Authenticated HTTP transport to the booking backend.

Attaches the bearer credential to every request. When the backend rejects
the credential (401, or a ``token_not_valid`` code in the body) the
transport refreshes it once and retries the original request exactly once.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from backend.app.bookings.errors import TransportError
from backend.app.config import Settings, get_settings

logger = logging.getLogger(__name__)

TOKEN_NOT_VALID = "token_not_valid"


@dataclass
class TokenStore:
    """Access and refresh credentials for the current session."""

    access: str | None = None
    refresh: str | None = None

    def clear(self) -> None:
        self.access = None
        self.refresh = None


@dataclass(frozen=True)
class TransportResponse:
    """Decoded backend response."""

    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


# Metrics interface (to be implemented by actual metrics system)
class TransportMetrics:
    """Interface for transport metrics."""

    def inc_retry(self, reason: str) -> None:
        """Count a refresh-and-retry."""
        pass


def _decode(response: httpx.Response) -> TransportResponse:
    if not response.content:
        return TransportResponse(status=response.status_code, data=None)
    try:
        data = response.json()
    except ValueError:
        data = response.text
    return TransportResponse(status=response.status_code, data=data)


def _credential_rejected(response: TransportResponse) -> bool:
    if response.status == 401:
        return True
    return isinstance(response.data, dict) and response.data.get("code") == TOKEN_NOT_VALID


class AuthTransport:
    """Bearer-authenticated transport with a single refresh-and-retry."""

    def __init__(
        self,
        tokens: TokenStore,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
        metrics: TransportMetrics | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            tokens: Session credentials, updated in place on refresh
            base_url: Backend base URL (defaults to settings.api_base_url)
            client: Optional httpx client (for testing with mocks)
            settings: Settings for refresh path and timeout
            metrics: Metrics recorder (optional, defaults to no-op)
        """
        settings = settings or get_settings()
        self.tokens = tokens
        self._refresh_path = settings.token_refresh_path
        self._metrics = metrics or TransportMetrics()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=settings.transport_timeout_seconds,
        )
        self._refresh_lock = asyncio.Lock()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Send a request, refreshing the credential once if it is rejected.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            body: JSON body
            params: Query parameters
            headers: Extra headers (e.g. Idempotency-Key)

        Returns:
            Decoded response of the original request or of its single retry

        Raises:
            TransportError: Network failure or failed credential refresh
        """
        sent_with = self.tokens.access
        response = await self._send(method, path, body, params, headers)
        if not _credential_rejected(response) or self._is_refresh(path):
            return response

        await self._refresh(sent_with)
        self._metrics.inc_retry("credential_refresh")
        logger.info(
            "Retrying request after credential refresh",
            extra={"structured": {"method": method, "path": path}},
        )
        return await self._send(method, path, body, params, headers)

    def _is_refresh(self, path: str) -> bool:
        return self._refresh_path in path

    async def _send(
        self,
        method: str,
        path: str,
        body: Any,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
    ) -> TransportResponse:
        request_headers = dict(headers or {})
        if self.tokens.access:
            request_headers["Authorization"] = f"Bearer {self.tokens.access}"
        try:
            response = await self._client.request(
                method, path, json=body, params=params, headers=request_headers
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        return _decode(response)

    async def _refresh(self, rejected_access: str | None) -> None:
        async with self._refresh_lock:
            # Another request already refreshed while we waited
            if self.tokens.access and self.tokens.access != rejected_access:
                return
            if not self.tokens.refresh:
                self.tokens.clear()
                raise TransportError("Session expired, sign in again", status_code=401)

            response = await self._send(
                "POST", self._refresh_path, {"refresh": self.tokens.refresh}, None, None
            )
            access = response.data.get("access") if isinstance(response.data, dict) else None
            if not response.ok or not access:
                logger.warning(
                    "Credential refresh failed",
                    extra={"structured": {"status": response.status}},
                )
                self.tokens.clear()
                raise TransportError("Session expired, sign in again", status_code=401)

            self.tokens.access = access
            # Rotating backends return a new refresh token too
            if isinstance(response.data, dict) and response.data.get("refresh"):
                self.tokens.refresh = response.data["refresh"]

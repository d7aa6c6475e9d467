"""AdForge backend client.

Thin async wrapper around ``httpx.AsyncClient``:

  - attaches the bearer token to every non-public route
  - turns HTTP failures into the AdForgeError hierarchy
  - unwraps the ``{"success": bool, "data": ...}`` envelope

Resource groups (``client.scraping``, ``client.jobs``, ``client.ads``, ...)
live in ``adforge.api`` and all go through ``request`` / ``request_data``.

Usage:
    async with AdForgeClient(token="...") as client:
        product = await client.scraping.import_product("https://shop.example/p/1")
"""
from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
import structlog

from adforge.api.ads import AdsAPI
from adforge.api.auth import AuthAPI
from adforge.api.avatars import AvatarsAPI
from adforge.api.billing import CreditsAPI, SubscriptionsAPI
from adforge.api.brands import BrandsAPI
from adforge.api.chat import ChatAPI
from adforge.api.cinematic import CinematicAPI
from adforge.api.jobs import JobsAPI
from adforge.api.research import ResearchAPI
from adforge.api.scraping import ScrapingAPI
from adforge.api.strategic import StrategicAnalysisAPI
from adforge.api.video_chat import VideoChatAPI
from adforge.api.videos import VideosAPI
from adforge.api.voice import ScriptsAPI, VoiceAPI
from adforge.config import settings
from adforge.errors import (
    ApiConnectionError,
    ApiError,
    ApiTimeoutError,
    ApiValidationError,
    AuthenticationError,
    InsufficientCreditsError,
    NotFoundError,
)

log = structlog.get_logger(__name__)

TokenProvider = Callable[[], Awaitable[Optional[str]]]

PUBLIC_ROUTES = (
    "/api/v1/auth/signup",
    "/api/v1/auth/verify-token",
    "/api/v1/auth/login",
    "/api/v1/auth/resend-verification",
)

_MISSING = object()


def unwrap(payload: Any) -> Any:
    """Return the ``data`` member of a backend envelope.

    Raises ApiError when the envelope says ``success: false``. Payloads without
    an envelope are returned untouched.
    """
    if not isinstance(payload, dict) or "success" not in payload:
        return payload
    if not payload.get("success"):
        message = payload.get("message") or payload.get("error") or payload.get("detail") or "Request failed"
        raise ApiError(str(message), payload=payload)
    if "data" in payload:
        return payload["data"]
    return {k: v for k, v in payload.items() if k != "success"}


def _format_validation_detail(detail: Any) -> str:
    if isinstance(detail, list):
        parts = []
        for item in detail:
            if isinstance(item, dict):
                loc = ".".join(str(p) for p in item.get("loc") or [])
                parts.append(f"{loc}: {item.get('msg', '')}")
            else:
                parts.append(str(item))
        return ", ".join(parts)
    return json.dumps(detail)


def error_from_response(response: httpx.Response) -> ApiError:
    """Build the ApiError subclass matching a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {"detail": body}

    status = response.status_code
    detail = body.get("detail")

    if status == 422 and detail:
        return ApiValidationError(
            f"Validation error: {_format_validation_detail(detail)}",
            status_code=status,
            payload=body,
        )

    if isinstance(detail, dict):
        message = body.get("message") or detail.get("message") or "An error occurred"
    else:
        message = body.get("message") or detail or "An error occurred"
    message = str(message)

    if status == 402:
        payload = body
        if "error_details" not in body and isinstance(detail, dict):
            payload = detail
        return InsufficientCreditsError(message, status_code=status, payload=payload)
    if status == 401:
        return AuthenticationError(message, status_code=status, payload=body)
    if status == 404:
        return NotFoundError(message, status_code=status, payload=body)
    return ApiError(message, status_code=status, payload=body)


class AdForgeClient:
    """Async client for the AdForge REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        if token is None and settings.api_token_set:
            token = settings.API_TOKEN
        self._token = token
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_S,
            headers={"Accept": "application/json"},
            transport=transport,
        )

        self.auth = AuthAPI(self)
        self.scraping = ScrapingAPI(self)
        self.jobs = JobsAPI(self)
        self.ads = AdsAPI(self)
        self.avatars = AvatarsAPI(self)
        self.cinematic = CinematicAPI(self)
        self.research = ResearchAPI(self)
        self.strategic = StrategicAnalysisAPI(self)
        self.subscriptions = SubscriptionsAPI(self)
        self.credits = CreditsAPI(self)
        self.brands = BrandsAPI(self)
        self.videos = VideosAPI(self)
        self.video_chat = VideoChatAPI(self)
        self.chat = ChatAPI(self)
        self.scripts = ScriptsAPI(self)
        self.voice = VoiceAPI(self)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def _auth_headers(self, path: str) -> Dict[str, str]:
        if any(route in path for route in PUBLIC_ROUTES):
            return {}
        token = self._token
        if self._token_provider is not None:
            token = await self._token_provider() or token
        return {"Authorization": f"Bearer {token}"} if token else {}

    # ------------------------------------------------------------------
    # Raw requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        not_found_default: Any = _MISSING,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        When ``not_found_default`` is given, a 404 returns it instead of raising.
        """
        headers = await self._auth_headers(path)
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(
                method,
                path,
                params=params or None,
                json=json,
                data=data,
                files=files,
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            log.warning("api_request_timeout", method=method, path=path)
            raise ApiTimeoutError() from exc
        except httpx.TransportError as exc:
            log.warning("api_request_unreachable", method=method, path=path, error=str(exc))
            raise ApiConnectionError() from exc

        if response.status_code >= 400:
            if response.status_code == 404 and not_found_default is not _MISSING:
                return not_found_default
            error = error_from_response(response)
            log.error(
                "api_error_response",
                method=method,
                path=path,
                status=response.status_code,
                error=error.message,
            )
            raise error

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "Unexpected non-JSON response from the server",
                status_code=response.status_code,
                payload=response.text[:500],
            ) from exc

    async def request_data(self, method: str, path: str, **kwargs: Any) -> Any:
        """Like ``request`` but returns the unwrapped envelope ``data``."""
        return unwrap(await self.request(method, path, **kwargs))

    async def request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        """Whole payload, envelope included; ``success: false`` still raises."""
        payload = await self.request(method, path, **kwargs)
        unwrap(payload)
        return payload

    async def health(self) -> bool:
        """True when GET /health answers 2xx."""
        try:
            await self.request("GET", "/health", timeout=5.0)
        except (ApiError, ApiConnectionError, ApiTimeoutError):
            return False
        return True

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AdForgeClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

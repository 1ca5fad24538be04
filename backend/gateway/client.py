from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from app.core.config import Settings, settings as default_settings

from .credentials import CredentialStore


SUCCESS_PAYLOAD: dict[str, Any] = {"success": True}

# Only consulted when an error carries no HTTP status.
_AUTH_MESSAGE_PATTERN = re.compile(r"\b(?:401|unauthori[sz]ed)\b", re.IGNORECASE)


class RequestFailed(Exception):
    """Uniform failure raised for non-2xx responses and transport errors."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthExpired(RequestFailed):
    """The server rejected the bearer credential (HTTP 401)."""


def is_auth_failure(exc: BaseException) -> bool:
    """Return True when ``exc`` means the session is no longer authorized."""

    if isinstance(exc, AuthExpired):
        return True
    if not isinstance(exc, RequestFailed):
        return False
    if exc.status_code is not None:
        return exc.status_code == 401
    return bool(_AUTH_MESSAGE_PATTERN.search(exc.message))


class RequestGateway:
    """Authenticated JSON client for the remote market API."""

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self.credentials = credentials
        self.base_url = (base_url or self._settings.resolved_api_base_url).rstrip("/")
        self.timeout = timeout or self._settings.request_timeout_seconds
        client_kwargs: dict[str, Any] = {"timeout": self.timeout}
        if transport is not None:
            client_kwargs["transport"] = transport
        self.client = httpx.AsyncClient(**client_kwargs)

    def _build_headers(self, extra: Mapping[str, str] | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if extra:
            headers.update(extra)
        # Read fresh on every call so a login or logout is visible immediately.
        token = self.credentials.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        json_body: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        content = json.dumps(json_body) if json_body is not None else None
        logger.debug("API {} {}", method, path)
        try:
            response = await self.client.request(
                method,
                url,
                content=content,
                params=params,
                headers=self._build_headers(headers),
            )
        except httpx.HTTPError as exc:
            message = str(exc) or self._settings.network_error_message
            logger.warning("API {} {} transport failure: {}", method, path, message)
            raise RequestFailed(message) from exc

        return self._handle_response(response, method=method, path=path)

    def _handle_response(self, response: httpx.Response, *, method: str, path: str) -> Any:
        if not response.is_success:
            message = self._error_message(response)
            logger.warning(
                "API {} {} failed with status {}: {}", method, path, response.status_code, message
            )
            error_cls = AuthExpired if response.status_code == 401 else RequestFailed
            raise error_cls(message, status_code=response.status_code)

        if response.status_code == 204:
            return dict(SUCCESS_PAYLOAD)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return dict(SUCCESS_PAYLOAD)

        text = response.text
        if not text or not text.strip():
            return dict(SUCCESS_PAYLOAD)

        try:
            return json.loads(text)
        except ValueError:
            logger.warning("API {} {} returned malformed JSON; treating as success", method, path)
            return dict(SUCCESS_PAYLOAD)

    def _error_message(self, response: httpx.Response) -> str:
        try:
            payload = json.loads(response.text)
        except ValueError:
            return self._settings.generic_error_message
        message = payload.get("message") if isinstance(payload, dict) else None
        if isinstance(message, str) and message:
            return message
        return f"HTTP error {response.status_code}"

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return await self.request(path, params=params)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request(path, method="POST", json_body=body)

    async def patch(self, path: str, body: Any = None) -> Any:
        return await self.request(path, method="PATCH", json_body=body)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "RequestGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = [
    "AuthExpired",
    "RequestFailed",
    "RequestGateway",
    "SUCCESS_PAYLOAD",
    "is_auth_failure",
]

"""Fakes shared by the test modules."""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Union

import httpx

Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]

USER_PAYLOAD: dict[str, Any] = {
    "id": "user-1",
    "email": "a@b.com",
    "role": "user",
    "defaultCurrency": "USDC",
}


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"content-type": "application/json"},
    )


def auth_payload(token: str = "token-123", user: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "success": True,
        "token": token,
        "expiresAt": "2030-01-01T00:00:00Z",
        "user": user or USER_PAYLOAD,
    }


class FakeMarketApi:
    """Route table over ``httpx.MockTransport`` that records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._dispatch)

    def add(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def add_json(self, method: str, path: str, payload: Any, status_code: int = 200) -> None:
        self.add(method, path, lambda request: json_response(status_code, payload))

    def calls(self, method: str | None = None, path: str | None = None) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if (method is None or request.method == method)
            and (path is None or request.url.path == f"/api/v1{path}")
        ]

    def body(self, request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content) if request.content else {}

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        handler = self.routes.get((request.method, path))
        if handler is None:
            return json_response(404, {"message": f"No route for {request.method} {path}"})
        result = handler(request)
        if isinstance(result, httpx.Response):
            return result
        return await result


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


class RecordingNavigator:
    def __init__(self) -> None:
        self.routes: list[str] = []

    def navigate(self, route: str) -> None:
        self.routes.append(route)

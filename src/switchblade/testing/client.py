"""Async test client for switchblade applications.

Drives the ASGI adapter in-process and returns the same immutable
``Response`` type that route handlers produce.
"""

import json as json_module
from typing import Any
from urllib.parse import urlencode

from switchblade.app import Switchblade
from switchblade.http.response import Response


class TestClient:
    """Async test client for switchblade applications.

    Sends requests through the ASGI interface directly, no HTTP involved.
    Entering the client runs the lifespan startup, which seals the app.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/users/42")
            assert response.status == 200
            assert response.json() == {"id": "42"}
    """

    __test__ = False  # Tell pytest this is not a test class
    __slots__ = ("app",)

    def __init__(self, app: Switchblade) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        await self._lifespan("startup")
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._lifespan("shutdown")

    async def _lifespan(self, phase: str) -> None:
        messages = [{"type": f"lifespan.{phase}"}]

        async def receive() -> dict[str, Any]:
            if messages:
                return messages.pop()
            return {"type": "lifespan.shutdown"}

        async def send(message: dict[str, Any]) -> None:
            return None

        await self.app({"type": "lifespan", "asgi": {"version": "3.0"}}, receive, send)

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: bytes | None = None,
        json: Any = None,
        form: dict[str, str] | None = None,
    ) -> Response:
        """Send a POST request."""
        return await self.request("POST", path, headers=headers, body=body, json=json, form=form)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body, json=json)

    async def patch(
        self,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PATCH request."""
        return await self.request("PATCH", path, headers=headers, body=body, json=json)

    async def delete(
        self,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        body: bytes | None = None,
        json: Any = None,
        form: dict[str, str] | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        ``json`` and ``form`` encode the body and set ``Content-Type``
        unless *headers* already does. A list of header pairs may repeat
        a name.
        """
        path_part, _, query_string = path.partition("?")

        pairs = list(headers.items()) if isinstance(headers, dict) else list(headers or [])
        request_body = body or b""
        content_type = None
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            content_type = "application/json"
        elif form is not None:
            request_body = urlencode(form).encode("utf-8")
            content_type = "application/x-www-form-urlencoded"
        if content_type and not any(name.lower() == "content-type" for name, _ in pairs):
            pairs.insert(0, ("content-type", content_type))

        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        return Response(
            body=b"".join(body_parts),
            status=status,
            headers=tuple(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in response_headers
            ),
        )

"""ASGI transport adapter.

The only component that touches raw ASGI directly. Converts the scope to
a ``Request``, matches it against the sealed registry, calls
``Route.run`` and writes the returned ``Response`` back through ``send``.

Unmatched paths and methods are answered here with plain-text 404/405
responses; they never reach a route's error handlers. Exceptions raised
by error handlers propagate to the ASGI server.
"""

import logging
from typing import TYPE_CHECKING

from switchblade._internal.asgi import Receive, Scope, Send
from switchblade.errors import HTTPError
from switchblade.http.request import Request
from switchblade.http.response import Response
from switchblade.routing.router import RouteMatch, Router

if TYPE_CHECKING:
    from switchblade.app import Switchblade

logger = logging.getLogger("switchblade.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def error_response(exc: HTTPError) -> Response:
    """Plain-text response for an adapter-level HTTP error."""
    body = (exc.detail or str(exc.status)).encode("utf-8")
    headers = (("Content-Type", "text/plain; charset=utf-8"), *exc.headers)
    return Response(body=body, status=exc.status, headers=headers)


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
        if name.lower() != "content-length"
    ]

    body = response.body if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )


class ASGIAdapter:
    """ASGI 3.0 application wrapping a ``Switchblade`` registry.

    The first call seals the registry and builds the router; routes
    registered before that are the ones served.

    Usage::

        app = Switchblade()
        app.get("/", index)
        asgi = ASGIAdapter(app)   # or serve ``app`` directly
    """

    __slots__ = ("_router", "app")

    def __init__(self, app: "Switchblade") -> None:
        self.app = app
        self._router: Router | None = None

    def compile(self) -> Router:
        """Seal the registry and build the router, once."""
        if self._router is None:
            self.app.seal()
            self._router = Router(self.app.routes, prefix=self.app.config.base_path)
        return self._router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request.from_asgi(scope, receive)
        try:
            match: RouteMatch = self.compile().match(request.method, request.path)
        except HTTPError as exc:
            logger.debug("%d %s %s", exc.status, request.method, request.path)
            await send_response(error_response(exc), send)
            return

        response = await match.route.run(request, match.path_params)
        if self.app.config.debug:
            logger.info("%s %s -> %d", request.method, request.path, response.status)
        await send_response(response, send, head=request.method == "HEAD")

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge startup and shutdown. Startup seals the registry."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self.compile()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    raise
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


__all__ = ["ASGIAdapter", "Router", "error_response", "send_response"]

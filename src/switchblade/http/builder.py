"""Mutable response builder handed to middleware and handlers.

Every mutation returns the builder so calls chain::

    return res.status(201).set_header("X-Powered-By", "switchblade").json(201, user)

The terminal operations (``send``, ``json``, ``text``, ``html``, ``raw``,
``redirect``) produce an immutable ``Response``. The first one commits:
``builder.response`` keeps pointing at it no matter what happens to the
builder afterwards. Later terminal calls still return fresh, independent
``Response`` objects, but the dispatcher only ever uses the committed one.
"""

import json as json_module
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from switchblade.http.cookies import SetCookie
from switchblade.http.headers import MutableHeaders
from switchblade.http.response import Response
from switchblade.routing.schema import ResponseSpec
from switchblade.validation import validate

JSON = "application/json"
TEXT = "text/plain"
HTML = "text/html"


class ResponseBuilder:
    """Accumulates status, headers, and cookies for one request."""

    __slots__ = ("_response", "headers", "responses", "status_code")

    def __init__(self, responses: Mapping[int, ResponseSpec] | None = None) -> None:
        self.responses: Mapping[int, ResponseSpec] = responses or {}
        self.status_code: int = 200
        self.headers = MutableHeaders()
        self._response: Response | None = None

    # -- State --

    @property
    def response(self) -> Response | None:
        """The committed response, or None if nothing was sent yet."""
        return self._response

    @property
    def committed(self) -> bool:
        return self._response is not None

    # -- Mutations --

    def status(self, code: int) -> "ResponseBuilder":
        self.status_code = code
        return self

    def set_header(self, name: str, value: str) -> "ResponseBuilder":
        """Set *name*, replacing any previous values."""
        self.headers.set(name, value)
        return self

    def append_header(self, name: str, value: str) -> "ResponseBuilder":
        """Add another *name* line, keeping existing ones."""
        self.headers.append(name, value)
        return self

    def set_cookie(
        self,
        name: str,
        value: str,
        *,
        path: str | None = None,
        domain: str | None = None,
        expires: datetime | None = None,
        max_age: int | None = None,
        secure: bool = False,
        http_only: bool = False,
        same_site: str | bool | None = None,
        signed: bool = False,
    ) -> "ResponseBuilder":
        cookie = SetCookie(
            name=name,
            value=value,
            path=path,
            domain=domain,
            expires=expires,
            max_age=max_age,
            secure=secure,
            http_only=http_only,
            same_site=same_site,
            signed=signed,
        )
        self.headers.append("Set-Cookie", cookie.to_header_value())
        return self

    def clear_cookie(
        self,
        name: str,
        *,
        path: str | None = None,
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
        same_site: str | bool | None = None,
    ) -> "ResponseBuilder":
        """Tell the client to drop cookie *name* (empty value, epoch expiry)."""
        cookie = SetCookie(
            name=name,
            value="",
            path=path,
            domain=domain,
            secure=secure,
            http_only=http_only,
            same_site=same_site,
        )
        self.headers.append("Set-Cookie", cookie.to_clear_header_value())
        return self

    # -- Terminal operations --

    def _commit(self, response: Response) -> Response:
        if self._response is None:
            self._response = response
        return response

    def _snapshot(self, body: bytes) -> Response:
        return Response(body=body, status=self.status_code, headers=self.headers.items())

    def end(self) -> Response:
        """An empty response at the current status and headers. Does not commit."""
        return self._snapshot(b"")

    def redirect(self, url: str, status: int = 302) -> Response:
        """Set status and ``Location``, then commit an empty response."""
        self.status(status).set_header("Location", url)
        return self._commit(self._snapshot(b""))

    def _validate_outgoing(self, status: int, content_type: str, data: Any) -> None:
        spec = self.responses.get(status)
        if spec is None:
            return
        schema = spec.content.get(content_type)
        if schema is not None:
            validate(schema, data, location="response", field=content_type)
        for name, descriptor in spec.headers.items():
            validate(descriptor, self.headers.get(name), location="response", field=name)

    def send(self, status: int, content_type: str, data: Any) -> Response:
        """Validate *data* for *status*/*content_type*, serialize, and commit.

        ``str`` and ``bytes`` are sent as-is; anything else is JSON-encoded.
        """
        self.status(status).set_header("Content-Type", content_type)
        self._validate_outgoing(status, content_type, data)
        if isinstance(data, bytes):
            body = data
        elif isinstance(data, str):
            body = data.encode("utf-8")
        else:
            body = json_module.dumps(data).encode("utf-8")
        return self._commit(self._snapshot(body))

    def json(self, status: int, data: Any) -> Response:
        self.status(status).set_header("Content-Type", JSON)
        self._validate_outgoing(status, JSON, data)
        body = json_module.dumps(data).encode("utf-8")
        return self._commit(self._snapshot(body))

    def text(self, status: int, data: str) -> Response:
        return self.send(status, TEXT, data)

    def html(self, status: int, data: str) -> Response:
        return self.send(status, HTML, data)

    def raw(self, status: int, data: bytes, content_type: str = "application/octet-stream") -> Response:
        return self.send(status, content_type, data)

    def __repr__(self) -> str:
        state = "committed" if self.committed else "open"
        return f"<ResponseBuilder {self.status_code} {state}>"

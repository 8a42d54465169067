"""Immutable HTTP response.

The value a route produces. Built by ``ResponseBuilder`` (or returned
directly by a handler) and never mutated afterwards, so the dispatcher
can hand it to the transport without copying.
"""

import json as json_module
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """A finished HTTP response.

    ``headers`` is an ordered sequence of ``(name, value)`` pairs; a name
    may repeat (``Set-Cookie``). Header lookups are case-insensitive.
    """

    body: bytes = b""
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()

    # -- Lookups --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for header *name*."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    def get_list(self, name: str) -> list[str]:
        """Return every value for header *name*, in order."""
        lowered = name.lower()
        return [value for key, value in self.headers if key.lower() == lowered]

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    # -- Body helpers --

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.body)


# Terminal safety net for requests no error handler answered
INTERNAL_SERVER_ERROR = Response(
    body=b"Internal Server Error",
    status=500,
    headers=(("Content-Type", "text/plain; charset=utf-8"),),
)

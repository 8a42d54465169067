"""Switchblade exception hierarchy.

Shared across the registry, dispatcher, validation layer, and adapters
so every module raises and catches the same types.
"""

from dataclasses import dataclass
from typing import Any


class SwitchbladeError(Exception):
    """Base for all switchblade-specific errors."""


class ConfigurationError(SwitchbladeError):
    """Raised when application setup is invalid.

    Always raised at registration time, never while serving a request.
    """


class DuplicateRouteError(ConfigurationError):
    """A route with the same method and normalized path already exists."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"Route {method} {path} already exists.")


class RegistryMutationAfterSealError(ConfigurationError):
    """The registry was modified after it started serving requests."""

    def __init__(self, operation: str = "") -> None:
        self.operation = operation
        msg = (
            "Cannot modify the app after it has started serving requests. "
            "Register routes, middleware, and error handlers before the first dispatch."
        )
        if operation:
            msg = f"{msg} (attempted: {operation})"
        super().__init__(msg)


class ValidationFailure(SwitchbladeError):  # noqa: N818
    """A value did not match its schema descriptor.

    ``location`` names the request or response part being checked
    (``params``, ``query``, ``headers``, ``cookies``, ``body``, ``response``).
    ``errors`` holds the engine-specific error details.
    """

    def __init__(
        self,
        message: str,
        *,
        location: str = "",
        field: str = "",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.location = location
        self.field = field
        self.errors = errors or []
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class HTTPError(SwitchbladeError):
    """An error that maps directly to an HTTP status code.

    Only the transport adapter raises these (unmatched path or method).
    Route code reports failures through error handlers instead.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )

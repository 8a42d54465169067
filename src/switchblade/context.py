"""Per-request context: lazily validated accessors and a state map.

Provides:
- ``RequestContext``: wraps the raw request for one dispatch.
- ``context_var`` / ``get_context()``: the active context for code that
  has no reference to it (set by the dispatcher, reset afterwards).

Every accessor (``params``, ``query``, ``headers``, ``cookies``,
``body()``) is computed once, validated against the route's merged
schema, and memoized for the rest of the request. A context is never
shared between requests.
"""

import json
from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any
from urllib.parse import parse_qsl

from switchblade._internal.multimap import collect_multi
from switchblade.http.cookies import parse_cookies
from switchblade.http.request import Request
from switchblade.routing.schema import EMPTY_VALIDATION, ValidationSchema
from switchblade.validation import validate

JSON = "application/json"
FORM = "application/x-www-form-urlencoded"

_MISSING = object()


def _validate_fields(
    location: str,
    values: dict[str, Any],
    schemas: Mapping[str, Any],
    *,
    skip_missing: bool = False,
) -> dict[str, Any]:
    """Validate each declared key; undeclared keys pass through untouched.

    A declared key absent from *values* is validated as ``None`` so the
    schema decides whether it is required, unless *skip_missing* is set.
    """
    for key, descriptor in schemas.items():
        if skip_missing and key not in values:
            continue
        values[key] = validate(descriptor, values.get(key), location=location, field=key)
    return values


class RequestContext:
    """The request as seen by middleware, handlers, and error handlers.

    Usage::

        async def update_user(ctx, res):
            user_id = ctx.params["id"]
            page = ctx.query.get("page")
            payload = await ctx.body()
            ctx.state["user_id"] = user_id
    """

    __slots__ = ("_cache", "path_params", "raw", "state", "validation")

    def __init__(
        self,
        raw: Request,
        path_params: Mapping[str, str] | None = None,
        validation: ValidationSchema | None = None,
    ) -> None:
        self.raw = raw
        self.path_params: dict[str, str] = dict(path_params or {})
        self.validation = validation or EMPTY_VALIDATION
        # Passes data from middleware down to the handler
        self.state: dict[str, Any] = {}
        self._cache: dict[str, Any] = {}

    # -- Raw request metadata --

    @property
    def method(self) -> str:
        return self.raw.method

    @property
    def path(self) -> str:
        return self.raw.path

    @property
    def url(self) -> str:
        return self.raw.url

    @property
    def content_type(self) -> str:
        """Media type without parameters.

        ``multipart/form-data; boundary=...`` becomes ``multipart/form-data``.
        """
        value = self.raw.content_type or ""
        return value.split(";", 1)[0].strip().lower()

    # -- Validated accessors --

    def _cached(self, name: str) -> Any:
        return self._cache.get(name, _MISSING)

    @property
    def params(self) -> dict[str, Any]:
        """Path parameters, validated against ``validation.params``."""
        value = self._cached("params")
        if value is _MISSING:
            value = _validate_fields("params", dict(self.path_params), self.validation.params)
            self._cache["params"] = value
        return value

    @property
    def query(self) -> dict[str, Any]:
        """Query parameters; a key that repeats maps to a list in request order.

        Only keys present in the query string are validated.
        """
        value = self._cached("query")
        if value is _MISSING:
            value = _validate_fields(
                "query", self.raw.query.to_dict(), self.validation.query, skip_missing=True
            )
            self._cache["query"] = value
        return value

    @property
    def headers(self) -> dict[str, Any]:
        """Headers with lower-cased names."""
        value = self._cached("headers")
        if value is _MISSING:
            value = _validate_fields("headers", self.raw.headers.to_dict(), self.validation.headers)
            self._cache["headers"] = value
        return value

    @property
    def cookies(self) -> dict[str, Any]:
        """Cookies parsed from the ``Cookie`` header."""
        value = self._cached("cookies")
        if value is _MISSING:
            parsed: dict[str, Any] = parse_cookies(self.raw.headers.get("cookie", ""))
            value = _validate_fields("cookies", parsed, self.validation.cookies)
            self._cache["cookies"] = value
        return value

    def touch(self) -> None:
        """Force params, headers, query, and cookies validation now."""
        _ = self.params, self.headers, self.query, self.cookies

    # -- Body --

    async def body(self) -> Any:
        """Parse the body by content type and validate it.

        - ``application/json``: decoded JSON.
        - ``application/x-www-form-urlencoded``: dict; repeated keys
          become lists.
        - anything else: a JSON attempt, ``{}`` if the body is not JSON.

        When the route's body schema declares the request's content type,
        the parsed value is validated against that descriptor.
        """
        value = self._cached("body")
        if value is not _MISSING:
            return value

        raw = await self.raw.body()
        content_type = self.content_type
        if content_type == JSON:
            value = json.loads(raw) if raw else None
        elif content_type == FORM:
            text = raw.decode("utf-8", errors="replace")
            value = collect_multi(parse_qsl(text, keep_blank_values=True))
        else:
            try:
                value = json.loads(raw)
            except ValueError:
                value = {}

        schema = self.validation.body
        if schema is not None and content_type in schema.content:
            value = validate(schema.content[content_type], value, location="body")

        self._cache["body"] = value
        return value

    async def json(self) -> Any:
        """Alias of ``body()`` for JSON payloads."""
        return await self.body()

    async def text(self) -> str:
        """The body decoded as UTF-8, unvalidated."""
        return await self.raw.text()

    async def raw_body(self) -> bytes:
        """The body bytes, unvalidated."""
        return await self.raw.body()

    def __repr__(self) -> str:
        return f"<RequestContext {self.method} {self.path}>"


# -- Active context --

context_var: ContextVar[RequestContext] = ContextVar("switchblade_context")
"""The context of the request being dispatched in this task."""


def get_context() -> RequestContext:
    """Return the context of the current request.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return context_var.get()

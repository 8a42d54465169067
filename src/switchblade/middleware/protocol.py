"""Middleware protocol, handler type aliases, and MiddlewareEntry.

A middleware is any callable matching::

    async def my_mw(ctx: RequestContext, res: ResponseBuilder, next: Next) -> None: ...

No base class required. The dispatcher checks the shape, not the lineage.

``next()`` runs the rest of the chain (further middleware, then the
route handler). Not calling it short-circuits the chain: the handler
never runs and the response is whatever the middleware committed on
``res`` (or the builder's empty default).
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

from switchblade.errors import ConfigurationError
from switchblade.routing.schema import (
    EMPTY_DOC,
    EMPTY_VALIDATION,
    DocMetadata,
    RequestBody,
    ValidationSchema,
)

if TYPE_CHECKING:
    from switchblade.context import RequestContext
    from switchblade.http.builder import ResponseBuilder

# Continues the middleware chain
Next: TypeAlias = Callable[[], Awaitable[None]]

# Route handler, ``(ctx, res) -> None | Response``, sync or async
Handler: TypeAlias = Callable[..., Any]

# Error handler, ``(error, ctx, res) -> None | Response``, sync or async
ErrorHandler: TypeAlias = Callable[..., Any]


class Middleware(Protocol):
    """Protocol for switchblade middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def request_id(ctx, res, next):
            ctx.state["request_id"] = uuid.uuid4().hex
            await next()
            res.set_header("X-Request-Id", ctx.state["request_id"])

        # Class middleware
        class RequireToken:
            async def __call__(self, ctx, res, next):
                if "authorization" not in ctx.headers:
                    res.text(401, "Unauthorized")
                    return
                await next()
    """

    def __call__(
        self, ctx: "RequestContext", res: "ResponseBuilder", next: Next
    ) -> Awaitable[None] | None: ...


@dataclass(frozen=True, slots=True)
class MiddlewareEntry:
    """A middleware plus the schema and documentation it contributes.

    Every route registered after the entry is pushed inherits its
    ``validation`` and ``doc`` fragments. Middleware fragments never
    declare ``responses``.
    """

    handler: Middleware
    validation: ValidationSchema = EMPTY_VALIDATION
    doc: DocMetadata = EMPTY_DOC

    @classmethod
    def build(
        cls,
        handler: Middleware,
        *,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        cookies: Mapping[str, Any] | None = None,
        body: RequestBody | Mapping[str, Any] | None = None,
        openapi: DocMetadata | Mapping[str, Any] | None = None,
        **unexpected: Any,
    ) -> "MiddlewareEntry":
        if "responses" in unexpected:
            msg = "Middleware fragments cannot declare responses; declare them on the route."
            raise ConfigurationError(msg)
        if unexpected:
            msg = f"Unknown middleware options: {', '.join(sorted(unexpected))}"
            raise ConfigurationError(msg)
        if not callable(handler):
            msg = f"Middleware must be callable, got {handler!r}"
            raise ConfigurationError(msg)
        return cls(
            handler=handler,
            validation=ValidationSchema.build(
                params=params, query=query, headers=headers, cookies=cookies, body=body
            ),
            doc=DocMetadata.coerce(openapi),
        )

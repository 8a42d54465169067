"""Switchblade: route registration, middleware composition, and dispatch.

Declare routes, group them under shared prefixes, attach ordered
middleware and error handlers, describe request and response shapes with
pydantic types or JSON Schema, and derive an OpenAPI 3.1 document from
the same metadata.

Basic usage::

    from pydantic import BaseModel
    from switchblade import AppConfig, Switchblade

    class NewUser(BaseModel):
        name: str

    app = Switchblade(AppConfig(openapi={"info": {"title": "Users", "version": "1"}}))

    @app.post("/users", body={"application/json": NewUser})
    async def create_user(ctx, res):
        user = await ctx.body()
        res.json(201, user.model_dump())

    document = app.openapi()

The registry is itself an ASGI application; serve ``app`` with any ASGI
server.
"""

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DocMetadata",
    "DuplicateRouteError",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "RegistryMutationAfterSealError",
    "Request",
    "RequestBody",
    "RequestContext",
    "Response",
    "ResponseBuilder",
    "ResponseSpec",
    "Route",
    "Switchblade",
    "SwitchbladeError",
    "ValidationFailure",
    "ValidationSchema",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchblade`` fast while providing a clean top-level API.
    """
    if name == "Switchblade":
        from switchblade.app import Switchblade

        return Switchblade

    if name == "AppConfig":
        from switchblade.config import AppConfig

        return AppConfig

    if name == "Request":
        from switchblade.http.request import Request

        return Request

    if name == "Response":
        from switchblade.http.response import Response

        return Response

    if name == "ResponseBuilder":
        from switchblade.http.builder import ResponseBuilder

        return ResponseBuilder

    if name == "Route":
        from switchblade.routing.route import Route

        return Route

    if name in ("DocMetadata", "RequestBody", "ResponseSpec", "ValidationSchema"):
        from switchblade.routing import schema as _schema

        return getattr(_schema, name)

    if name in ("Middleware", "Next"):
        from switchblade.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "get_context"):
        from switchblade import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "DuplicateRouteError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "RegistryMutationAfterSealError",
        "SwitchbladeError",
        "ValidationFailure",
    ):
        from switchblade import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

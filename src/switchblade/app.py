"""Switchblade application registry.

Mutable during setup (routes, middleware, error handlers, groups).
Sealed when the first request is dispatched or ``seal()`` is called;
every mutating call after that raises ``RegistryMutationAfterSealError``.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any, TypeAlias

from switchblade._internal.asgi import Receive, Scope, Send
from switchblade.config import AppConfig
from switchblade.errors import (
    ConfigurationError,
    DuplicateRouteError,
    RegistryMutationAfterSealError,
)
from switchblade.middleware.protocol import ErrorHandler, Handler, Middleware, MiddlewareEntry
from switchblade.routing.path import normalize_path
from switchblade.routing.route import HTTP_METHODS, Route
from switchblade.routing.schema import (
    DocMetadata,
    RequestBody,
    ResponseSpec,
    ValidationSchema,
)

logger = logging.getLogger("switchblade.app")

# Verbs registered by ``all()``
ALL_METHODS = tuple(method for method in HTTP_METHODS if method != "HEAD")

GroupBuilder: TypeAlias = Callable[["Switchblade"], Any]


class Switchblade:
    """The application registry.

    Routes capture the middleware and error handlers registered *before*
    them::

        app = Switchblade(AppConfig(base_path="/api"))
        app.use(auth)                        # applies to everything below
        app.get("/health", health)
        app.on_error(json_errors)

        @app.post("/users", body={"application/json": NewUser})
        async def create_user(ctx, res):
            return res.json(201, await ctx.body())

        app.group("/admin", lambda admin: admin.use(audit).get("/", dashboard))

    Thread safety:
        Setup is single-threaded. After sealing the registry is read-only,
        so concurrent dispatch needs no locks.
    """

    __slots__ = ("_adapter", "_error_handlers", "_middleware", "_routes", "_sealed", "config")

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._routes: list[Route] = []
        self._middleware: list[MiddlewareEntry] = []
        self._error_handlers: list[ErrorHandler] = []
        self._sealed: bool = False
        self._adapter: Any = None

    # -- Introspection --

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def middleware(self) -> tuple[MiddlewareEntry, ...]:
        return tuple(self._middleware)

    @property
    def error_handlers(self) -> tuple[ErrorHandler, ...]:
        return tuple(self._error_handlers)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def find(self, method: str, path: str) -> Route | None:
        """Return the route registered for *method* and *path*, if any."""
        key = (method.upper(), normalize_path(path))
        for route in self._routes:
            if route.key == key:
                return route
        return None

    # -- Middleware and error handlers --

    def use(
        self,
        middleware: Middleware,
        *,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        cookies: Mapping[str, Any] | None = None,
        body: RequestBody | Mapping[str, Any] | None = None,
        openapi: DocMetadata | Mapping[str, Any] | None = None,
        **unexpected: Any,
    ) -> "Switchblade":
        """Push a middleware for every route registered after this call.

        The optional fragments are inherited by those routes' merged
        schema and documentation; ``responses`` is not accepted here.
        """
        self._check_not_sealed("use")
        entry = MiddlewareEntry.build(
            middleware,
            params=params,
            query=query,
            headers=headers,
            cookies=cookies,
            body=body,
            openapi=openapi,
            **unexpected,
        )
        self._middleware.append(entry)
        return self

    def on_error(self, handler: ErrorHandler) -> "Switchblade":
        """Push an error handler for every route registered after this call.

        Error handlers receive ``(error, ctx, res)`` and answer by
        committing a response on ``res``.
        """
        self._check_not_sealed("on_error")
        if not callable(handler):
            msg = f"Error handler must be callable, got {handler!r}"
            raise ConfigurationError(msg)
        self._error_handlers.append(handler)
        return self

    # -- Route registration --

    def route(
        self,
        method: str,
        path: str,
        handler: Handler | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        cookies: Mapping[str, Any] | None = None,
        body: RequestBody | Mapping[str, Any] | None = None,
        responses: Mapping[int | str, ResponseSpec | Mapping[str, Any]] | None = None,
        openapi: DocMetadata | Mapping[str, Any] | None = None,
    ) -> Any:
        """Register *handler* for *method* and *path*.

        Returns the registry. Without *handler*, returns a decorator that
        registers the decorated function and hands it back unchanged.

        Raises:
            DuplicateRouteError: The normalized ``(method, path)`` is taken;
                the registry is left untouched.
        """
        validation = ValidationSchema.build(
            params=params,
            query=query,
            headers=headers,
            cookies=cookies,
            body=body,
            responses=responses,
        )
        doc = DocMetadata.coerce(openapi)

        if handler is None:

            def decorator(func: Handler) -> Handler:
                self._define(method, path, func, validation, doc)
                return func

            return decorator

        self._define(method, path, handler, validation, doc)
        return self

    def _define(
        self,
        method: str,
        path: str,
        handler: Handler,
        validation: ValidationSchema,
        doc: DocMetadata,
    ) -> None:
        self._check_not_sealed("route")
        if not callable(handler):
            msg = f"Route handler must be callable, got {handler!r}"
            raise ConfigurationError(msg)
        method = method.strip().upper()
        if not method:
            raise ConfigurationError("HTTP method must not be empty.")
        path = normalize_path(path)
        self._add(
            Route(
                method=method,
                path=path,
                handler=handler,
                middleware=tuple(self._middleware),
                error_handlers=tuple(self._error_handlers),
                validation=validation,
                doc=doc,
                owner=self,
            )
        )

    def _add(self, route: Route) -> None:
        if any(existing.key == route.key for existing in self._routes):
            raise DuplicateRouteError(route.method, route.path)
        self._routes.append(route)
        logger.debug("registered %s %s", route.method, route.path)

    def get(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("GET", path, handler, **options)

    def post(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("POST", path, handler, **options)

    def put(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("PUT", path, handler, **options)

    def delete(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("DELETE", path, handler, **options)

    def patch(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("PATCH", path, handler, **options)

    def options(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("OPTIONS", path, handler, **options)

    def head(self, path: str, handler: Handler | None = None, **options: Any) -> Any:
        return self.route("HEAD", path, handler, **options)

    def all(self, path: str, handler: Handler, **options: Any) -> "Switchblade":
        """Register *handler* for GET, POST, PUT, DELETE, PATCH, and OPTIONS.

        Nothing is registered if any of the verbs is already taken.
        """
        normalized = normalize_path(path)
        for method in ALL_METHODS:
            if self.find(method, normalized) is not None:
                raise DuplicateRouteError(method, normalized)
        for method in ALL_METHODS:
            self.route(method, path, handler, **options)
        return self

    # -- Groups --

    def group(
        self,
        path: str,
        builder: "GroupBuilder | Switchblade",
        *,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        cookies: Mapping[str, Any] | None = None,
        body: RequestBody | Mapping[str, Any] | None = None,
        responses: Mapping[int | str, ResponseSpec | Mapping[str, Any]] | None = None,
        openapi: DocMetadata | Mapping[str, Any] | None = None,
    ) -> "Switchblade":
        """Mount a group of routes under *path*.

        *builder* is either a callable that receives a fresh child registry
        or an already-built registry. The child starts with no middleware or
        error handlers of its own. Each of its routes is copied into this
        registry with the prefix joined onto its path, this registry's
        current stacks placed in front of the route's, and the group
        fragments placed underneath the route's own.

        All routes are checked for collisions before any is added.
        """
        self._check_not_sealed("group")
        prefix = normalize_path(path)
        if isinstance(builder, Switchblade):
            child = builder
        else:
            child = Switchblade(replace(self.config, base_path=prefix))
            builder(child)

        validation = ValidationSchema.build(
            params=params,
            query=query,
            headers=headers,
            cookies=cookies,
            body=body,
            responses=responses,
        )
        doc = DocMetadata.coerce(openapi)
        parent_middleware = tuple(self._middleware)
        parent_error_handlers = tuple(self._error_handlers)

        mounted = [
            route.mounted(
                prefix,
                middleware=parent_middleware,
                error_handlers=parent_error_handlers,
                validation=validation,
                doc=doc,
                owner=self,
            )
            for route in child._routes
        ]
        taken = {route.key for route in self._routes}
        for route in mounted:
            if route.key in taken:
                raise DuplicateRouteError(route.method, route.path)
            taken.add(route.key)
        for route in mounted:
            self._add(route)
        return self

    # -- Documentation --

    def openapi(self) -> dict[str, Any]:
        """Build the OpenAPI 3.1 description of every visible route.

        Raises:
            ConfigurationError: ``AppConfig.openapi`` was not provided.
        """
        from switchblade.openapi import build_document

        return build_document(self._routes, self.config)

    # -- Lifecycle --

    def seal(self) -> "Switchblade":
        """Make the registry read-only. Idempotent."""
        if not self._sealed:
            self._sealed = True
            logger.debug("sealed with %d routes", len(self._routes))
        return self

    def _check_not_sealed(self, operation: str) -> None:
        if self._sealed:
            raise RegistryMutationAfterSealError(operation)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point (see ``switchblade.adapters.asgi``)."""
        if self._adapter is None:
            from switchblade.adapters.asgi import ASGIAdapter

            self._adapter = ASGIAdapter(self)
        await self._adapter(scope, receive, send)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"<Switchblade {len(self._routes)} routes {state}>"

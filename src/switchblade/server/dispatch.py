"""Per-request dispatch: the route lifecycle.

1. Build a ``RequestContext`` and ``ResponseBuilder`` from the route's
   merged validation schema.
2. Touch params, headers, query, and cookies so malformed requests fail
   before any middleware or handler code runs.
3. Run the middleware chain; each middleware continues it by awaiting
   ``next()``. The handler runs when the chain reaches its end.
4. Use the committed response, a ``Response`` the handler returned, or
   ``res.end()``, in that order.
5. On any exception in steps 2 to 4, hand it to the route's error handlers
   in registration order and stop at the first one that commits a
   response (or returns one). If none does, answer with a plain-text 500.

Exceptions raised by error handlers themselves are not caught here.
"""

import asyncio
import logging
from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from switchblade._internal.invoke import invoke
from switchblade.context import RequestContext, context_var
from switchblade.http.builder import ResponseBuilder
from switchblade.http.request import Request
from switchblade.http.response import INTERNAL_SERVER_ERROR, Response

if TYPE_CHECKING:
    from switchblade.routing.route import Route

logger = logging.getLogger("switchblade.server")

# Chain positions run on one stack before handing off to a new task
_HOP = 64


class _Chain:
    """Middleware runner with one continuation per chain position.

    Position ``i`` runs middleware ``i``; the position after the last
    middleware runs the route handler. The ``next`` handed to position
    ``i`` can only start position ``i + 1``, and each position starts at
    most once, so a middleware calling ``next()`` twice does not rerun
    downstream code and cannot skip past a middleware that declined to
    call it.
    """

    __slots__ = ("_ctx", "_res", "_started", "result", "route")

    def __init__(self, route: "Route", ctx: RequestContext, res: ResponseBuilder) -> None:
        self.route = route
        self._ctx = ctx
        self._res = res
        self._started: set[int] = set()
        # Whatever the route handler returned, if it ran
        self.result: Any = None

    async def run(self, index: int = 0) -> None:
        if index in self._started:
            return
        self._started.add(index)
        middleware = self.route.middleware
        if index == len(middleware):
            self.result = await invoke(self.route.handler, self._ctx, self._res)
            return
        advance = partial(self._advance, index + 1)
        await invoke(middleware[index].handler, self._ctx, self._res, advance)

    async def _advance(self, index: int) -> None:
        # Every _HOP positions the rest of the chain runs in its own task,
        # which starts from a fresh stack.
        if index % _HOP == 0 and index not in self._started:
            await asyncio.create_task(self.run(index))
        else:
            await self.run(index)


def _finalize(res: ResponseBuilder, result: Any) -> Response:
    # A builder commit wins over a returned value
    if res.response is not None:
        return res.response
    if isinstance(result, Response):
        return result
    return res.end()


async def _handle_error(
    exc: Exception,
    route: "Route",
    ctx: RequestContext,
    res: ResponseBuilder,
) -> Response:
    for handler in route.error_handlers:
        result = await invoke(handler, exc, ctx, res)
        response = res.response if res.response is not None else result
        if isinstance(response, Response):
            logger.debug(
                "%s %s: %s handled with %d", route.method, ctx.path, type(exc).__name__, response.status
            )
            return response

    logger.error("500 %s %s", route.method, ctx.path, exc_info=exc)
    return INTERNAL_SERVER_ERROR


async def dispatch(route: "Route", raw: Request, path_params: Mapping[str, str]) -> Response:
    """Run one request through *route* and return the response to send."""
    validation = route.merged_validation
    ctx = RequestContext(raw, path_params, validation)
    res = ResponseBuilder(validation.responses)
    token = context_var.set(ctx)
    try:
        try:
            ctx.touch()
            chain = _Chain(route, ctx, res)
            await chain.run()
            return _finalize(res, chain.result)
        except Exception as exc:
            return await _handle_error(exc, route, ctx, res)
    finally:
        context_var.reset(token)

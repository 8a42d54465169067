"""Invoke helpers: call sync or async handlers uniformly.

Route handlers, middleware, and error handlers can be ``def`` or
``async def``. Any code that calls user-provided code must handle both
cases. This module keeps the sync/async check in exactly one place.

Usage::

    from switchblade._internal.invoke import invoke

    result = await invoke(handler, ctx, res)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately, no await needed
        def health(ctx, res):
            return res.text(200, "ok")

        # async: returns coroutine, awaited automatically
        async def create_user(ctx, res):
            payload = await ctx.body()
            return res.json(201, payload)
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result

"""Middleware protocol and registry entries.

Middleware are plain callables ``(ctx, res, next)``; see
``switchblade.middleware.protocol``.
"""

from switchblade.middleware.protocol import (
    ErrorHandler,
    Handler,
    Middleware,
    MiddlewareEntry,
    Next,
)

__all__ = ["ErrorHandler", "Handler", "Middleware", "MiddlewareEntry", "Next"]

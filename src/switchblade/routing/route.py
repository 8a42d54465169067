"""Route entry: the unit of registration."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from switchblade.http.request import Request
from switchblade.http.response import Response
from switchblade.middleware.protocol import ErrorHandler, Handler, MiddlewareEntry
from switchblade.routing.path import join_paths
from switchblade.routing.schema import (
    EMPTY_DOC,
    EMPTY_VALIDATION,
    DocMetadata,
    ValidationSchema,
    merge_doc,
    merge_validation,
)

if TYPE_CHECKING:
    from switchblade.app import Switchblade

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD")


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route.

    ``middleware`` and ``error_handlers`` are snapshots of the registry's
    stacks at registration time, outermost (ancestor) entries first.
    ``validation`` and ``doc`` are the route's own fragments; the merged
    views fold every middleware fragment in order and overlay the route's
    own on top. They are computed on first read and cached.
    """

    method: str
    path: str
    handler: Handler
    middleware: tuple[MiddlewareEntry, ...] = ()
    error_handlers: tuple[ErrorHandler, ...] = ()
    validation: ValidationSchema = EMPTY_VALIDATION
    doc: DocMetadata = EMPTY_DOC

    # Registry that sealing is reported to on first dispatch
    owner: "Switchblade | None" = field(default=None, repr=False, compare=False)

    # Private: merged views, filled lazily
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def merged_validation(self) -> ValidationSchema:
        if "validation" not in self._cache:
            merged = EMPTY_VALIDATION
            for entry in self.middleware:
                merged = merge_validation(merged, entry.validation)
            self._cache["validation"] = merge_validation(merged, self.validation)
        return self._cache["validation"]

    @property
    def merged_doc(self) -> DocMetadata:
        if "doc" not in self._cache:
            merged = EMPTY_DOC
            for entry in self.middleware:
                merged = merge_doc(merged, entry.doc)
            self._cache["doc"] = merge_doc(merged, self.doc)
        return self._cache["doc"]

    @property
    def key(self) -> tuple[str, str]:
        return (self.method, self.path)

    def mounted(
        self,
        prefix: str,
        *,
        middleware: tuple[MiddlewareEntry, ...] = (),
        error_handlers: tuple[ErrorHandler, ...] = (),
        validation: ValidationSchema = EMPTY_VALIDATION,
        doc: DocMetadata = EMPTY_DOC,
        owner: "Switchblade | None" = None,
    ) -> "Route":
        """Return a copy mounted under a group.

        The prefix is joined onto the path, the parent's stacks go in
        front of this route's, and the group fragments sit underneath the
        route's own (the route wins on collision).
        """
        return replace(
            self,
            path=join_paths(prefix, self.path),
            middleware=(*middleware, *self.middleware),
            error_handlers=(*error_handlers, *self.error_handlers),
            validation=merge_validation(validation, self.validation),
            doc=merge_doc(doc, self.doc),
            owner=owner,
            _cache={},
        )

    async def run(self, raw: Request, path_params: Mapping[str, str] | None = None) -> Response:
        """Dispatch one request through this route and return its response."""
        from switchblade.server.dispatch import dispatch

        if self.owner is not None:
            self.owner.seal()
        return await dispatch(self, raw, path_params or {})

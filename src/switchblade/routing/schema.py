"""Validation and documentation fragments, and how they merge.

A route's effective schema is folded from several fragments: every
middleware in its snapshot (outermost first), any group it was mounted
through, and finally the route's own options. Later fragments win.

Merge rules for ``ValidationSchema``:

- ``params``, ``query``, ``headers``, ``cookies``, ``responses`` are flat
  maps and merge key by key; the later fragment wins on collision.
- ``body`` is replaced wholesale when the later fragment declares one.

Merge rules for ``DocMetadata``: scalar fields (and ``tags``) take the
later fragment's value when it sets one; ``extra`` merges key by key.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

from switchblade.errors import ConfigurationError
from switchblade.validation import is_schema

_EMPTY: Mapping[str, Any] = MappingProxyType({})

_RESPONSE_KEYS = frozenset({"content", "headers", "description", "summary", "links"})


def _frozen(mapping: Mapping[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(mapping))


def _check_descriptors(location: str, schemas: Mapping[str, Any]) -> None:
    for key, descriptor in schemas.items():
        if not is_schema(descriptor):
            msg = f"Unsupported validation schema for {location}[{key!r}]: {descriptor!r}"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class RequestBody:
    """Declared request body: one descriptor per accepted content type."""

    content: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    description: str = ""
    required: bool = True

    @classmethod
    def coerce(cls, value: "RequestBody | Mapping[str, Any]") -> "RequestBody":
        """Accept a ``RequestBody``, ``{"content": {...}, ...}`` or a bare content map."""
        if isinstance(value, RequestBody):
            return value
        if "content" in value:
            content = value["content"]
            description = value.get("description", "")
            required = value.get("required", True)
        else:
            content, description, required = value, "", True
        _check_descriptors("body", content)
        return cls(content=_frozen(content), description=description, required=required)


@dataclass(frozen=True, slots=True)
class ResponseSpec:
    """Declared response for one status code."""

    content: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    headers: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    description: str = ""

    @classmethod
    def coerce(cls, value: "ResponseSpec | Mapping[str, Any]") -> "ResponseSpec":
        """Accept a ``ResponseSpec``, ``{"content": ..., "headers": ...}`` or a bare content map."""
        if isinstance(value, ResponseSpec):
            return value
        if value and _RESPONSE_KEYS.issuperset(value):
            content = value.get("content", {})
            headers = {name.lower(): schema for name, schema in value.get("headers", {}).items()}
            description = value.get("description", "")
        else:
            content, headers, description = value, {}, ""
        _check_descriptors("response content", content)
        _check_descriptors("response headers", headers)
        return cls(content=_frozen(content), headers=_frozen(headers), description=description)


@dataclass(frozen=True, slots=True)
class ValidationSchema:
    """Schemas for every validated part of a request and its responses.

    Build with ``ValidationSchema.build(...)``, which normalizes header
    names to lower case and status codes to ``int``.
    """

    params: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    query: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    headers: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    cookies: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    body: RequestBody | None = None
    responses: Mapping[int, ResponseSpec] = field(default_factory=lambda: _EMPTY)

    @classmethod
    def build(
        cls,
        *,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        cookies: Mapping[str, Any] | None = None,
        body: RequestBody | Mapping[str, Any] | None = None,
        responses: Mapping[int | str, ResponseSpec | Mapping[str, Any]] | None = None,
    ) -> "ValidationSchema":
        parts = {"params": params or {}, "query": query or {}, "cookies": cookies or {}}
        parts["headers"] = {name.lower(): schema for name, schema in (headers or {}).items()}
        for location, schemas in parts.items():
            _check_descriptors(location, schemas)
        return cls(
            params=_frozen(parts["params"]),
            query=_frozen(parts["query"]),
            headers=_frozen(parts["headers"]),
            cookies=_frozen(parts["cookies"]),
            body=RequestBody.coerce(body) if body is not None else None,
            responses=_frozen(
                {int(status): ResponseSpec.coerce(spec) for status, spec in (responses or {}).items()}
            ),
        )

    @property
    def is_empty(self) -> bool:
        return self.body is None and not (
            self.params or self.query or self.headers or self.cookies or self.responses
        )


EMPTY_VALIDATION = ValidationSchema()


def merge_validation(base: ValidationSchema, overlay: ValidationSchema) -> ValidationSchema:
    """Overlay *overlay* onto *base*; *overlay* wins on every collision."""
    if overlay.is_empty:
        return base
    if base.is_empty:
        return overlay
    return ValidationSchema(
        params=_frozen({**base.params, **overlay.params}),
        query=_frozen({**base.query, **overlay.query}),
        headers=_frozen({**base.headers, **overlay.headers}),
        cookies=_frozen({**base.cookies, **overlay.cookies}),
        body=overlay.body if overlay.body is not None else base.body,
        responses=_frozen({**base.responses, **overlay.responses}),
    )


# Accepted spellings for DocMetadata fields in option mappings
_DOC_ALIASES = {
    "hide": "hide",
    "summary": "summary",
    "description": "description",
    "tags": "tags",
    "deprecated": "deprecated",
    "operationId": "operation_id",
    "operation_id": "operation_id",
    "externalDocs": "external_docs",
    "external_docs": "external_docs",
}


@dataclass(frozen=True, slots=True)
class DocMetadata:
    """Documentation metadata for an operation.

    ``None`` means "not set here" so that merging can tell an explicit
    value from an inherited one. Unknown option keys land in
    ``extra`` and are copied into the operation as-is.
    """

    hide: bool | None = None
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None
    deprecated: bool | None = None
    operation_id: str | None = None
    external_docs: Mapping[str, str] | None = None
    extra: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    @classmethod
    def coerce(cls, value: "DocMetadata | Mapping[str, Any] | None") -> "DocMetadata":
        if value is None:
            return EMPTY_DOC
        if isinstance(value, DocMetadata):
            return value
        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, item in value.items():
            if key in _DOC_ALIASES:
                known[_DOC_ALIASES[key]] = item
            else:
                extra[key] = item
        if isinstance(known.get("tags"), str):
            known["tags"] = (known["tags"],)
        elif known.get("tags") is not None:
            known["tags"] = tuple(known["tags"])
        return cls(**known, extra=_frozen(extra))


EMPTY_DOC = DocMetadata()


def merge_doc(base: DocMetadata, overlay: DocMetadata) -> DocMetadata:
    """Overlay *overlay* onto *base*; set fields in *overlay* win."""
    if overlay == EMPTY_DOC:
        return base
    if base == EMPTY_DOC:
        return overlay
    merged: dict[str, Any] = {}
    for f in fields(DocMetadata):
        if f.name == "extra":
            continue
        value = getattr(overlay, f.name)
        merged[f.name] = value if value is not None else getattr(base, f.name)
    return DocMetadata(**merged, extra=_frozen({**base.extra, **overlay.extra}))

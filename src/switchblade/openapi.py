"""OpenAPI 3.1 document assembler.

Walks registered routes and turns their merged validation schema and
documentation metadata into a single API description. Schema descriptors
are converted through ``switchblade.validation.schema_to_openapi``, so any
registered schema kind documents itself.

Nested definitions (pydantic ``$defs``) are hoisted into
``components.schemas`` and their references rewritten to point there.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from switchblade.config import AppConfig
from switchblade.errors import ConfigurationError
from switchblade.routing.path import join_paths, param_names, to_openapi_path
from switchblade.routing.route import Route
from switchblade.routing.schema import DocMetadata, ResponseSpec, ValidationSchema
from switchblade.validation import schema_to_openapi

logger = logging.getLogger("switchblade.openapi")

_LOCAL_REF = "#/$defs/"
_COMPONENT_REF = "#/components/schemas/"

DEFAULT_RESPONSES: dict[str, Any] = {"200": {"description": "Successful response"}}


class _Schemas:
    """Converts descriptors and collects hoisted definitions."""

    __slots__ = ("components",)

    def __init__(self) -> None:
        self.components: dict[str, Any] = {}

    def convert(self, descriptor: Any) -> dict[str, Any]:
        schema = schema_to_openapi(descriptor)
        defs = schema.pop("$defs", None)
        if defs:
            for name, definition in defs.items():
                self.components.setdefault(name, _rewrite_refs(definition))
        return _rewrite_refs(schema)


def _rewrite_refs(value: Any) -> Any:
    if isinstance(value, dict):
        rewritten = {key: _rewrite_refs(item) for key, item in value.items()}
        ref = rewritten.get("$ref")
        if isinstance(ref, str) and ref.startswith(_LOCAL_REF):
            rewritten["$ref"] = _COMPONENT_REF + ref[len(_LOCAL_REF) :]
        return rewritten
    if isinstance(value, list):
        return [_rewrite_refs(item) for item in value]
    return value


def _parameters(
    route: Route, validation: ValidationSchema, schemas: _Schemas
) -> list[dict[str, Any]]:
    parameters: list[dict[str, Any]] = []

    declared = dict(validation.params)
    for name in param_names(route.path):
        descriptor = declared.pop(name, None)
        schema = schemas.convert(descriptor) if descriptor is not None else {"type": "string"}
        parameters.append({"name": name, "in": "path", "required": True, "schema": schema})
    # Declared params with no matching placeholder are still documented
    for name, descriptor in declared.items():
        parameters.append(
            {"name": name, "in": "path", "required": True, "schema": schemas.convert(descriptor)}
        )

    for location, fragment in (
        ("query", validation.query),
        ("header", validation.headers),
        ("cookie", validation.cookies),
    ):
        for name, descriptor in fragment.items():
            parameters.append(
                {
                    "name": name,
                    "in": location,
                    "required": False,
                    "schema": schemas.convert(descriptor),
                }
            )
    return parameters


def _response(spec: ResponseSpec, schemas: _Schemas) -> dict[str, Any]:
    entry: dict[str, Any] = {"description": spec.description}
    if spec.content:
        entry["content"] = {
            content_type: {"schema": schemas.convert(descriptor)}
            for content_type, descriptor in spec.content.items()
        }
    if spec.headers:
        entry["headers"] = {
            name: {"schema": schemas.convert(descriptor)}
            for name, descriptor in spec.headers.items()
        }
    return entry


def _doc_fields(doc: DocMetadata) -> dict[str, Any]:
    operation: dict[str, Any] = dict(doc.extra)
    if doc.summary is not None:
        operation["summary"] = doc.summary
    if doc.description is not None:
        operation["description"] = doc.description
    if doc.tags is not None:
        operation["tags"] = list(doc.tags)
    if doc.deprecated is not None:
        operation["deprecated"] = doc.deprecated
    if doc.operation_id is not None:
        operation["operationId"] = doc.operation_id
    if doc.external_docs is not None:
        operation["externalDocs"] = dict(doc.external_docs)
    return operation


def build_operation(route: Route, schemas: "_Schemas | None" = None) -> dict[str, Any]:
    """One OpenAPI operation object for *route*."""
    schemas = schemas or _Schemas()
    validation = route.merged_validation
    operation = _doc_fields(route.merged_doc)

    parameters = _parameters(route, validation, schemas)
    if parameters:
        operation["parameters"] = parameters

    body = validation.body
    if body is not None and body.content:
        request_body: dict[str, Any] = {
            "required": body.required,
            "content": {
                content_type: {"schema": schemas.convert(descriptor)}
                for content_type, descriptor in body.content.items()
            },
        }
        if body.description:
            request_body["description"] = body.description
        operation["requestBody"] = request_body

    if validation.responses:
        operation["responses"] = {
            str(status): _response(spec, schemas)
            for status, spec in sorted(validation.responses.items())
        }
    else:
        operation["responses"] = {
            status: dict(entry) for status, entry in DEFAULT_RESPONSES.items()
        }
    return operation


def build_document(routes: Iterable[Route], config: AppConfig) -> dict[str, Any]:
    """Assemble the OpenAPI document for *routes*.

    The header (``openapi``, ``info``, ``servers``, ...) comes from
    ``config.openapi``; ``openapi`` defaults to ``"3.1.0"``. Paths are
    prefixed with ``config.base_path``. Routes whose merged documentation
    sets ``hide`` are left out.

    Raises:
        ConfigurationError: ``config.openapi`` is not set.
    """
    if config.openapi is None:
        msg = "OpenAPI configuration is not provided. Pass AppConfig(openapi={...})."
        raise ConfigurationError(msg)

    header: Mapping[str, Any] = config.openapi
    document: dict[str, Any] = {"openapi": "3.1.0", **header}
    paths: dict[str, dict[str, Any]] = {}
    schemas = _Schemas()

    hidden = 0
    for route in routes:
        if route.merged_doc.hide:
            hidden += 1
            continue
        full_path = route.path
        if config.base_path:
            full_path = join_paths(config.base_path, route.path)
        path_item = paths.setdefault(to_openapi_path(full_path), {})
        path_item[route.method.lower()] = build_operation(route, schemas)

    document["paths"] = paths
    if schemas.components:
        components = dict(document.get("components") or {})
        components["schemas"] = {**schemas.components, **components.get("schemas", {})}
        document["components"] = components

    logger.debug("built document with %d paths (%d routes hidden)", len(paths), hidden)
    return document

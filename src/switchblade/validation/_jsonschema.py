"""JSON Schema kind.

A plain ``dict`` carrying JSON Schema keywords is a descriptor. Values
are checked, never coerced: a query string ``"5"`` does not satisfy
``{"type": "integer"}``.
"""

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from switchblade.errors import ValidationFailure
from switchblade.validation import SchemaKind

_SCHEMA_KEYWORDS = frozenset(
    {"type", "$ref", "anyOf", "oneOf", "allOf", "not", "enum", "const", "properties"}
)


def _detect(descriptor: Any) -> bool:
    return isinstance(descriptor, Mapping) and not _SCHEMA_KEYWORDS.isdisjoint(descriptor)


def _validate(descriptor: Any, value: Any) -> Any:
    validator = Draft202012Validator(dict(descriptor))
    errors = sorted(validator.iter_errors(value), key=lambda e: [str(part) for part in e.path])
    if errors:
        details = [{"loc": list(error.path), "msg": error.message} for error in errors]
        summary = "; ".join(detail["msg"] for detail in details)
        raise ValidationFailure(f"JSON Schema validation failed: {summary}", errors=details)
    return value


def _to_openapi(descriptor: Any) -> dict[str, Any]:
    return deepcopy(dict(descriptor))


JSONSCHEMA_KIND = SchemaKind(
    name="jsonschema",
    detect=_detect,
    validate=_validate,
    to_openapi=_to_openapi,
)

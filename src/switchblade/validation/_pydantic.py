"""Pydantic schema kind.

Any type annotation is a descriptor: ``int``, ``list[str]``,
``Annotated[str, Field(min_length=2)]``, a ``BaseModel`` subclass, or a
prebuilt ``TypeAdapter``. Adapters are built once per descriptor.
"""

import types
from typing import Any, get_origin

from pydantic import TypeAdapter, ValidationError

from switchblade.errors import ValidationFailure
from switchblade.validation import SchemaKind

_adapters: dict[Any, TypeAdapter[Any]] = {}


def _detect(descriptor: Any) -> bool:
    if isinstance(descriptor, TypeAdapter):
        return True
    if isinstance(descriptor, (type, types.UnionType)):
        return True
    return get_origin(descriptor) is not None


def _adapter(descriptor: Any) -> TypeAdapter[Any]:
    if isinstance(descriptor, TypeAdapter):
        return descriptor
    try:
        adapter = _adapters.get(descriptor)
    except TypeError:
        # Unhashable annotation metadata; build without caching
        return TypeAdapter(descriptor)
    if adapter is None:
        adapter = TypeAdapter(descriptor)
        _adapters[descriptor] = adapter
    return adapter


def _validate(descriptor: Any, value: Any) -> Any:
    try:
        return _adapter(descriptor).validate_python(value)
    except ValidationError as exc:
        raise ValidationFailure(
            str(exc),
            errors=[
                {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
                for error in exc.errors(include_url=False)
            ],
        ) from exc


def _to_openapi(descriptor: Any) -> dict[str, Any]:
    return _adapter(descriptor).json_schema()


PYDANTIC_KIND = SchemaKind(
    name="pydantic",
    detect=_detect,
    validate=_validate,
    to_openapi=_to_openapi,
)

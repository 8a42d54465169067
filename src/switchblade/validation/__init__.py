"""Schema validation capability.

Switchblade never validates values itself. A schema descriptor attached
to a route (``params``, ``query``, ``body``, ``responses``...) is handed
to the first registered ``SchemaKind`` whose ``detect`` accepts it::

    from pydantic import BaseModel
    from switchblade.validation import validate

    class User(BaseModel):
        name: str

    validate(User, {"name": "Ada"})                 # pydantic kind
    validate({"type": "integer"}, 42)               # jsonschema kind

Two kinds ship built in, detected in this order:

``pydantic``
    Any type annotation (``int``, ``list[str]``, a ``BaseModel`` subclass,
    ``Annotated[...]``) or a ``pydantic.TypeAdapter``. Values are coerced
    and the coerced value is returned.

``jsonschema``
    A JSON Schema ``dict``. Values are checked with
    ``jsonschema.Draft202012Validator`` and returned unchanged.

Custom engines plug in with ``register_schema_kind``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from switchblade.errors import ConfigurationError, ValidationFailure


@dataclass(frozen=True, slots=True)
class SchemaKind:
    """One validation engine integration.

    Attributes:
        name: Short identifier used in error messages.
        detect: Returns True if the descriptor belongs to this engine.
        validate: ``(descriptor, value) -> value``; raises ``ValidationFailure``.
        to_openapi: ``descriptor -> dict`` JSON Schema for the API description.
    """

    name: str
    detect: Callable[[Any], bool]
    validate: Callable[[Any, Any], Any]
    to_openapi: Callable[[Any], dict[str, Any]]


_KINDS: list[SchemaKind] = []


def register_schema_kind(kind: SchemaKind, *, first: bool = False) -> None:
    """Add a validation engine.

    Kinds are consulted in registration order; pass ``first=True`` to
    take precedence over the built-in kinds.
    """
    if first:
        _KINDS.insert(0, kind)
    else:
        _KINDS.append(kind)


def schema_kinds() -> tuple[SchemaKind, ...]:
    """The registered kinds, in detection order."""
    return tuple(_KINDS)


def find_kind(descriptor: Any) -> SchemaKind | None:
    """Return the kind that understands *descriptor*, or None."""
    for kind in _KINDS:
        if kind.detect(descriptor):
            return kind
    return None


def is_schema(descriptor: Any) -> bool:
    """True if some registered kind accepts *descriptor*."""
    return find_kind(descriptor) is not None


def validate(descriptor: Any, value: Any, *, location: str = "", field: str = "") -> Any:
    """Validate *value* against *descriptor* and return the (possibly coerced) value.

    Raises:
        ValidationFailure: The value does not match. ``location`` and
            ``field`` are attached to the failure for error handlers.
        ConfigurationError: No registered kind understands the descriptor.
    """
    kind = find_kind(descriptor)
    if kind is None:
        msg = f"Unsupported validation schema: {descriptor!r}"
        raise ConfigurationError(msg)
    try:
        return kind.validate(descriptor, value)
    except ValidationFailure as exc:
        if not exc.location:
            exc.location = location
        if not exc.field:
            exc.field = field
        raise


def schema_to_openapi(descriptor: Any) -> dict[str, Any]:
    """Convert a descriptor to an API-description schema object.

    Unknown descriptors fall back to ``{"type": "object"}``.
    """
    kind = find_kind(descriptor)
    if kind is None:
        return {"type": "object"}
    return kind.to_openapi(descriptor)


def _register_builtin_kinds() -> None:
    from switchblade.validation._jsonschema import JSONSCHEMA_KIND
    from switchblade.validation._pydantic import PYDANTIC_KIND

    register_schema_kind(PYDANTIC_KIND)
    register_schema_kind(JSONSCHEMA_KIND)


_register_builtin_kinds()

__all__ = [
    "SchemaKind",
    "ValidationFailure",
    "find_kind",
    "is_schema",
    "register_schema_kind",
    "schema_kinds",
    "schema_to_openapi",
    "validate",
]

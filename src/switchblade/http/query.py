"""Immutable query string parameters.

Implements ``Mapping[str, str]``; ``get_list`` returns every value of a key.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl

from switchblade._internal.multimap import collect_multi


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Attributes:
        _pairs: Parsed query string as ordered (name, value) pairs.
        _raw: Raw query string bytes.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _pairs: tuple[tuple[str, str], ...]
    _raw: bytes

    __slots__ = ("_pairs", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        object.__setattr__(self, "_raw", query_string)
        pairs = parse_qsl(query_string.decode("latin-1"), keep_blank_values=True)
        object.__setattr__(self, "_pairs", tuple(pairs))

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in request order."""
        return [value for name, value in self._pairs if name == key]

    def to_dict(self) -> dict[str, str | list[str]]:
        """Collapse to a dict; keys that repeat become lists in request order."""
        return collect_multi(list(self._pairs))

    @property
    def raw(self) -> bytes:
        return self._raw

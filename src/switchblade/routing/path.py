"""Path normalization and ``:name`` placeholder handling.

One placeholder syntax is recognized everywhere: a segment starting with
``:`` names a path parameter (``/users/:id``). The documentation
assembler rewrites it to ``{id}``; the ASGI router matches it.
"""

import re

_PLACEHOLDER = re.compile(r"(?<=/):([A-Za-z_][A-Za-z0-9_]*)")


def normalize_path(path: str) -> str:
    """Normalize a route path.

    Trims whitespace, defaults to ``/``, forces a leading ``/``, and
    strips trailing slashes except on the root path.

    Examples::

        ""            -> "/"
        "users"       -> "/users"
        " /users/ "   -> "/users"
        "/"           -> "/"
    """
    path = path.strip()
    if not path:
        return "/"
    if not path.startswith("/"):
        path = f"/{path}"
    stripped = path.rstrip("/")
    return stripped or "/"


def join_paths(prefix: str, path: str) -> str:
    """Join a group prefix and a route path; the root prefix adds nothing."""
    prefix = normalize_path(prefix)
    path = normalize_path(path)
    if prefix == "/":
        return path
    if path == "/":
        return prefix
    return normalize_path(f"{prefix}{path}")


def param_names(path: str) -> list[str]:
    """Names of the ``:name`` placeholders in *path*, in order."""
    return [segment[1:] for segment in path.split("/") if segment.startswith(":") and len(segment) > 1]


def to_openapi_path(path: str) -> str:
    """Rewrite ``/users/:id`` to ``/users/{id}``."""
    return _PLACEHOLDER.sub(r"{\1}", path)

"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, with no
string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            base_path="/api",
            openapi={"openapi": "3.1.0", "info": {"title": "Shop", "version": "1.0"}},
        )
    """

    # Prefix applied to every route path by transport adapters and the
    # documentation assembler (never stored on the routes themselves)
    base_path: str = ""

    # Description-document header: "openapi", "info", "servers", "tags", ...
    openapi: Mapping[str, Any] | None = None

    # Logging verbosity only; the 500 fallback body never changes
    debug: bool = False

"""Test utilities for switchblade applications::

    from switchblade.testing import TestClient
"""

from switchblade.testing.client import TestClient

__all__ = ["TestClient"]

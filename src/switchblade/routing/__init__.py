"""Routing: route entries, path handling, and schema fragments.

Routes are registered during setup and read-only once the registry seals.
"""

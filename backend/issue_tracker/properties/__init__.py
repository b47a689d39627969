"""
Property processing engine.

Per-type behavior behind three processor kinds, looked up by property type tag:
- creation processors: validate raw values and turn them into storage rows
- update processors: validate operations and turn them into row diffs
- filter transformers: turn filter conditions into value predicates

Build the registry once with build_default_registry() and pass it to services.
"""

from issue_tracker.properties.registry import (
    PropertyRegistry,
    Registry,
    build_default_registry,
    get_default_registry,
)

__all__ = [
    "Registry",
    "PropertyRegistry",
    "build_default_registry",
    "get_default_registry",
]

"""
Property type registry - maps a property type tag to its processors.

Design notes:
- one Registry per processor kind (creation, update, filter), all keyed by
  the same PropertyType tag space
- build_default_registry() is the single registration step; the result is
  frozen and passed to services, so tests can build their own with fakes
- a missing creation/update processor fails the operation; a missing filter
  transformer degrades to raw-string equality so one odd filter never blocks
  a whole listing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Generic, TypeVar

from issue_tracker.properties.creation import (
    CreationProcessor,
    MinersCreationProcessor,
    MultiSelectCreationProcessor,
    NumberCreationProcessor,
    RichTextCreationProcessor,
    SelectCreationProcessor,
    TextCreationProcessor,
    UserCreationProcessor,
)
from issue_tracker.properties.filters import (
    DefaultFilterTransformer,
    FilterTransformer,
    IdFilterTransformer,
    MinersFilterTransformer,
    MultiSelectFilterTransformer,
    NumberFilterTransformer,
    RichTextFilterTransformer,
    SelectFilterTransformer,
    TextFilterTransformer,
    UserFilterTransformer,
)
from issue_tracker.properties.update import (
    MinersUpdateProcessor,
    MultiSelectUpdateProcessor,
    NumberUpdateProcessor,
    RichTextUpdateProcessor,
    SelectUpdateProcessor,
    TextUpdateProcessor,
    UpdateProcessor,
    UserUpdateProcessor,
)
from issue_tracker.schemas.enums import PropertyType
from issue_tracker.services.exceptions import UnsupportedPropertyTypeError

logger = logging.getLogger(__name__)

__all__ = [
    "Registry",
    "PropertyRegistry",
    "build_default_registry",
    "get_default_registry",
]

T = TypeVar("T")


class Registry(Generic[T]):
    """A type tag -> implementation map that can be sealed after setup."""

    def __init__(self, kind: str):
        self.kind = kind
        self._entries: dict[str, T] = {}
        self._frozen = False

    def register(self, property_type: str, impl: T) -> None:
        if self._frozen:
            raise RuntimeError(f"{self.kind} registry is frozen, cannot register '{property_type}'")
        self._entries[str(property_type)] = impl

    def get(self, property_type: str) -> T | None:
        return self._entries.get(str(property_type))

    def resolve(self, property_type: str) -> T:
        impl = self.get(property_type)
        if impl is None:
            raise UnsupportedPropertyTypeError(str(property_type))
        return impl

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def types(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, property_type: object) -> bool:
        return str(property_type) in self._entries


@dataclass
class PropertyRegistry:
    """The three processor registries, handed to services by injection."""

    creation: Registry[CreationProcessor] = field(default_factory=lambda: Registry("creation"))
    update: Registry[UpdateProcessor] = field(default_factory=lambda: Registry("update"))
    filters: Registry[FilterTransformer] = field(default_factory=lambda: Registry("filter"))
    fallback_filter: FilterTransformer = field(default_factory=DefaultFilterTransformer)

    def creation_processor(self, property_type: str) -> CreationProcessor:
        return self.creation.resolve(property_type)

    def update_processor(self, property_type: str) -> UpdateProcessor:
        return self.update.resolve(property_type)

    def filter_transformer(self, property_type: str) -> FilterTransformer:
        transformer = self.filters.get(property_type)
        if transformer is None:
            logger.warning(
                f"No filter transformer for property type '{property_type}', using default equality match"
            )
            return self.fallback_filter
        return transformer

    def freeze(self) -> PropertyRegistry:
        self.creation.freeze()
        self.update.freeze()
        self.filters.freeze()
        return self


def build_default_registry() -> PropertyRegistry:
    """Register every built-in property type and freeze the result."""
    registry = PropertyRegistry()

    registry.creation.register(PropertyType.TEXT, TextCreationProcessor())
    registry.creation.register(PropertyType.RICH_TEXT, RichTextCreationProcessor())
    registry.creation.register(PropertyType.SELECT, SelectCreationProcessor())
    registry.creation.register(PropertyType.MULTI_SELECT, MultiSelectCreationProcessor())
    registry.creation.register(PropertyType.MINERS, MinersCreationProcessor())
    registry.creation.register(PropertyType.USER, UserCreationProcessor())
    registry.creation.register(PropertyType.NUMBER, NumberCreationProcessor())

    registry.update.register(PropertyType.TEXT, TextUpdateProcessor())
    registry.update.register(PropertyType.RICH_TEXT, RichTextUpdateProcessor())
    registry.update.register(PropertyType.SELECT, SelectUpdateProcessor())
    registry.update.register(PropertyType.MULTI_SELECT, MultiSelectUpdateProcessor())
    registry.update.register(PropertyType.MINERS, MinersUpdateProcessor())
    registry.update.register(PropertyType.USER, UserUpdateProcessor())
    registry.update.register(PropertyType.NUMBER, NumberUpdateProcessor())

    registry.filters.register(PropertyType.TEXT, TextFilterTransformer())
    registry.filters.register(PropertyType.RICH_TEXT, RichTextFilterTransformer())
    registry.filters.register(PropertyType.ID, IdFilterTransformer())
    registry.filters.register(PropertyType.NUMBER, NumberFilterTransformer())
    registry.filters.register(PropertyType.SELECT, SelectFilterTransformer())
    registry.filters.register(PropertyType.USER, UserFilterTransformer())
    registry.filters.register(PropertyType.MULTI_SELECT, MultiSelectFilterTransformer())
    registry.filters.register(PropertyType.MINERS, MinersFilterTransformer())

    return registry.freeze()


@lru_cache
def get_default_registry() -> PropertyRegistry:
    """Process-wide default registry, built on first use."""
    return build_default_registry()

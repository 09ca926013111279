"""User-defined menu sections and the registry built from their config slots.

A section (:class:`Category`) is a display name, a color and a list of
lowercase keywords. The :class:`SectionRegistry` holds the enabled sections in
configured slot order; that order decides both which section claims an item
(first match wins) and how the sections stack in the rendered menu (slot 1 on
top). Registries are immutable snapshots: a configuration change builds a new
one instead of editing the old.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Iterator, Optional, Sequence, Tuple

RGB = Tuple[int, int, int]

MAX_SECTIONS = 5
COLOR_TAG_CLOSE = "</col>"

_LOGGER = logging.getLogger("GroundItemOrganizer.Sections")


def color_tag(color: RGB) -> str:
    """Return the opening ``<col=rrggbb>`` marker for ``color``."""
    red, green, blue = color
    return f"<col={red:02x}{green:02x}{blue:02x}>"


def colorize(text: str, color: RGB) -> str:
    return f"{color_tag(color)}{text}{COLOR_TAG_CLOSE}"


def parse_keywords(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated keyword string into lowercase, non-empty keywords.

    Order is preserved and duplicates are kept; ``"a,,b"`` yields ``("a", "b")``.
    """

    if raw is None:
        return ()
    text = str(raw)
    if not text.strip():
        return ()
    return tuple(token for token in (part.strip().lower() for part in text.split(",")) if token)


@dataclass(frozen=True)
class SectionSlot:
    """Raw values read from one of the configurable section slots."""

    name: str
    color: RGB
    items: str


@dataclass(frozen=True)
class Category:
    name: str
    color: RGB
    keywords: Tuple[str, ...]

    @classmethod
    def from_slot(cls, slot: SectionSlot) -> "Category":
        return cls(
            name=(slot.name or "").strip(),
            color=tuple(slot.color),  # type: ignore[arg-type]
            keywords=parse_keywords(slot.items),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.name)

    def matches(self, item_name: Optional[str]) -> bool:
        """Return True when any keyword occurs anywhere in ``item_name`` (case-insensitive)."""
        if not item_name:
            return False
        lowered = item_name.lower()
        return any(keyword in lowered for keyword in self.keywords)

    def color_tag(self) -> str:
        return color_tag(self.color)

    def colorize(self, text: str) -> str:
        return colorize(text, self.color)

    def separator_label(self) -> str:
        return self.colorize(f"-- {self.name} --")

    def __str__(self) -> str:
        red, green, blue = self.color
        return f"Category(name={self.name!r}, color=#{red:02x}{green:02x}{blue:02x}, keywords={len(self.keywords)})"


@dataclass(frozen=True)
class SectionRegistry:
    """Ordered, immutable snapshot of the enabled sections."""

    categories: Tuple[Category, ...] = ()

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def __bool__(self) -> bool:
        return bool(self.categories)

    def match_index(self, item_name: Optional[str]) -> Optional[int]:
        """Return the slot index of the first section claiming ``item_name``."""
        if not item_name:
            return None
        for index, category in enumerate(self.categories):
            if category.matches(item_name):
                return index
        return None

    def find_match(self, item_name: Optional[str]) -> Optional[Category]:
        index = self.match_index(item_name)
        return None if index is None else self.categories[index]

    def names(self) -> Tuple[str, ...]:
        return tuple(category.name for category in self.categories)


EMPTY_REGISTRY = SectionRegistry()


def build_registry(slots: Iterable[SectionSlot]) -> SectionRegistry:
    """Build a registry from up to :data:`MAX_SECTIONS` config slots.

    Slots whose trimmed name is empty are skipped; extra slots are ignored.
    """

    categories: list[Category] = []
    for index, slot in enumerate(slots):
        if index >= MAX_SECTIONS:
            _LOGGER.debug("Ignoring section slot %d; only %d slots are supported", index + 1, MAX_SECTIONS)
            break
        if not (slot.name or "").strip():
            continue
        categories.append(Category.from_slot(slot))
    registry = SectionRegistry(tuple(categories))
    _LOGGER.debug("Built section registry: %s", ", ".join(str(category) for category in registry) or "<empty>")
    return registry


def registry_from_values(values: Sequence[Tuple[str, RGB, str]]) -> SectionRegistry:
    """Convenience wrapper for callers holding plain ``(name, color, items)`` tuples."""
    return build_registry(SectionSlot(name, color, items) for name, color, items in values)

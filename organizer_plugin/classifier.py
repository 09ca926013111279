"""Reorder a ground-item context menu into colored, user-defined sections.

:func:`classify_menu` is a pure pass over the host's entry list. It returns
either :data:`UNCHANGED` (the host menu must be left exactly as it is) or a
:class:`MenuLayout` describing the full replacement ordering, bottom to top.
:func:`apply_layout` then writes that layout back through the host menu API.

Ordering, bottom to top (the host renders the last entry on top):

1. entries that are not ground-item "Take" actions, in their original order;
2. "Take" entries no section claimed, in their original order;
3. each non-empty section, last configured first, as its entries followed by
   its separator label, so the first configured section ends up topmost.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from .menu_entries import MenuAction, TAKE_OPTION, TakeCommand, is_ground_item_take, remove_tags
from .sections import SectionRegistry

_LOGGER = logging.getLogger("GroundItemOrganizer.Classifier")


class _Unchanged:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNCHANGED"

    def __bool__(self) -> bool:
        return False


UNCHANGED = _Unchanged()


@dataclass(frozen=True)
class Relocated:
    """A host entry moved to a new position, its target rewritten."""

    entry: Any
    target: str


@dataclass(frozen=True)
class Recreated:
    """A new entry standing in for a removed original; activation replays ``command``."""

    command: TakeCommand
    target: str


@dataclass(frozen=True)
class Passthrough:
    entry: Any


@dataclass(frozen=True)
class Separator:
    label: str
    category: str


Placement = Union[Passthrough, Relocated, Recreated, Separator]


@dataclass(frozen=True)
class MenuLayout:
    placements: Tuple[Placement, ...]
    matched: int

    def __len__(self) -> int:
        return len(self.placements)

    def separators(self) -> Tuple[Separator, ...]:
        return tuple(p for p in self.placements if isinstance(p, Separator))


ClassifyResult = Union[MenuLayout, _Unchanged]


def _clean_target(entry: Any, strip_markup: Callable[[str], str]) -> Optional[str]:
    target = getattr(entry, "target", None)
    if not isinstance(target, str) or not target:
        return None
    cleaned = strip_markup(target)
    return cleaned or None


def classify_menu(
    entries: Optional[Sequence[Any]],
    registry: SectionRegistry,
    *,
    remove_originals: bool = False,
    show_separators: bool = True,
    enabled: bool = True,
    strip_markup: Callable[[str], str] = remove_tags,
) -> ClassifyResult:
    """Group ground-item "Take" entries under the first section whose keywords match.

    With ``remove_originals`` the matched entries are replaced by
    :class:`Recreated` placements that replay the take from a snapshot;
    otherwise the original entries are :class:`Relocated`.
    """

    if not enabled:
        return UNCHANGED
    if not registry:
        return UNCHANGED
    if not entries:
        return UNCHANGED

    others: List[Any] = []
    unmatched: List[Any] = []
    categories = registry.categories
    buckets: List[List[Placement]] = [[] for _ in categories]
    matched = 0

    for entry in entries:
        try:
            classifiable = entry is not None and is_ground_item_take(entry)
        except Exception as exc:
            _LOGGER.debug("Passing through unreadable menu entry %r: %s", entry, exc)
            classifiable = False
        if not classifiable:
            others.append(entry)
            continue
        try:
            item_name = _clean_target(entry, strip_markup)
            index = registry.match_index(item_name)
        except Exception as exc:
            _LOGGER.debug("Leaving unreadable Take entry %r unmatched: %s", entry, exc)
            unmatched.append(entry)
            continue
        if index is None or item_name is None:
            unmatched.append(entry)
            continue
        category = categories[index]
        target = category.colorize(item_name)
        if remove_originals:
            placement: Placement = Recreated(TakeCommand.from_entry(entry, category.name, item_name), target)
        else:
            placement = Relocated(entry, target)
        buckets[index].append(placement)
        matched += 1

    if not matched:
        return UNCHANGED

    placements: List[Placement] = [Passthrough(entry) for entry in others]
    placements.extend(Passthrough(entry) for entry in unmatched)
    for index in reversed(range(len(categories))):
        items = buckets[index]
        if not items:
            continue
        placements.extend(items)
        if show_separators:
            category = categories[index]
            placements.append(Separator(category.separator_label(), category.name))

    _LOGGER.debug(
        "Organised %d of %d menu entries into %d section(s)",
        matched,
        len(entries),
        sum(1 for items in buckets if items),
    )
    return MenuLayout(tuple(placements), matched)


def _set_field(entry: Any, name: str, value: Any) -> None:
    setter = getattr(entry, f"set_{name}", None)
    if callable(setter):
        setter(value)
    else:
        setattr(entry, name, value)


def _create_entry(menu: Any) -> Any:
    return menu.create_menu_entry(-1)


def apply_layout(menu: Any, layout: ClassifyResult, dispatch: Callable[[TakeCommand], Any]) -> bool:
    """Write ``layout`` to the host menu. Returns False when nothing was changed."""

    if not isinstance(layout, MenuLayout):
        return False
    ordered: List[Any] = []
    for placement in layout.placements:
        if isinstance(placement, Passthrough):
            ordered.append(placement.entry)
        elif isinstance(placement, Relocated):
            _set_field(placement.entry, "target", placement.target)
            ordered.append(placement.entry)
        elif isinstance(placement, Separator):
            separator = _create_entry(menu)
            _set_field(separator, "option", placement.label)
            _set_field(separator, "target", "")
            _set_field(separator, "type", MenuAction.CANCEL)
            ordered.append(separator)
        elif isinstance(placement, Recreated):
            ordered.append(_recreate_entry(menu, placement, dispatch))
    menu.set_menu_entries(ordered)
    return True


def _recreate_entry(menu: Any, placement: Recreated, dispatch: Callable[[TakeCommand], Any]) -> Any:
    snapshot = placement.command.snapshot
    entry = _create_entry(menu)
    _set_field(entry, "option", TAKE_OPTION)
    _set_field(entry, "target", placement.target)
    _set_field(entry, "type", MenuAction.RUNELITE)
    _set_field(entry, "identifier", snapshot.identifier)
    _set_field(entry, "item_id", snapshot.item_id)
    _set_field(entry, "param0", snapshot.param0)
    _set_field(entry, "param1", snapshot.param1)
    command = placement.command
    _set_field(entry, "take_command", command)
    _set_field(entry, "on_click", lambda _entry: dispatch(command))
    return entry

"""Menu entry model shared by the classifier, quick pickup and the host bridge.

The host owns its menu entries; the plugin only reads a handful of attributes
from them (``type``, ``option``, ``target`` and the identity fields needed to
replay an action). :class:`MenuEntry` and :class:`Menu` implement that surface
for hosts without their own types and for the test-suite.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
import logging
import re
from typing import Any, Callable, List, Optional, Sequence

_LOGGER = logging.getLogger("GroundItemOrganizer.Entries")

TAKE_OPTION = "Take"
_TAG_PATTERN = re.compile(r"<[^>]*>")


class MenuAction(IntEnum):
    GROUND_ITEM_FIRST_OPTION = 18
    GROUND_ITEM_SECOND_OPTION = 19
    GROUND_ITEM_THIRD_OPTION = 20
    GROUND_ITEM_FOURTH_OPTION = 21
    GROUND_ITEM_FIFTH_OPTION = 22
    WALK = 23
    EXAMINE_ITEM_GROUND = 1004
    CANCEL = 1006
    RUNELITE = 1500


GROUND_ITEM_ACTIONS = frozenset(
    {
        MenuAction.GROUND_ITEM_FIRST_OPTION,
        MenuAction.GROUND_ITEM_SECOND_OPTION,
        MenuAction.GROUND_ITEM_THIRD_OPTION,
        MenuAction.GROUND_ITEM_FOURTH_OPTION,
        MenuAction.GROUND_ITEM_FIFTH_OPTION,
    }
)


def remove_tags(text: Optional[str]) -> str:
    """Strip ``<...>`` markup from a display string."""
    if not text:
        return ""
    return _TAG_PATTERN.sub("", text)


def coerce_action(value: Any) -> Optional[MenuAction]:
    if isinstance(value, MenuAction):
        return value
    try:
        return MenuAction(int(value))
    except (TypeError, ValueError):
        pass
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return MenuAction.__members__.get(name)
    return None


def is_ground_item_take(entry: Any) -> bool:
    """Return True for a ground-item action whose option text reads "Take"."""
    if coerce_action(getattr(entry, "type", None)) not in GROUND_ITEM_ACTIONS:
        return False
    option = getattr(entry, "option", None)
    return isinstance(option, str) and option.lower() == TAKE_OPTION.lower()


@dataclass
class MenuEntry:
    option: str = ""
    target: str = ""
    type: MenuAction = MenuAction.CANCEL
    identifier: int = -1
    param0: int = 0
    param1: int = 0
    item_id: int = -1
    on_click: Optional[Callable[["MenuEntry"], None]] = field(default=None, repr=False, compare=False)
    take_command: Optional[TakeCommand] = field(default=None, repr=False, compare=False)

    # Fluent setters mirror the host API so created entries can be built in one expression.

    def set_option(self, option: str) -> "MenuEntry":
        self.option = option
        return self

    def set_target(self, target: str) -> "MenuEntry":
        self.target = target
        return self

    def set_type(self, action: MenuAction) -> "MenuEntry":
        self.type = action
        return self

    def set_identifier(self, identifier: int) -> "MenuEntry":
        self.identifier = identifier
        return self

    def set_params(self, param0: int, param1: int) -> "MenuEntry":
        self.param0 = param0
        self.param1 = param1
        return self

    def set_item_id(self, item_id: int) -> "MenuEntry":
        self.item_id = item_id
        return self

    def set_on_click(self, callback: Callable[["MenuEntry"], None]) -> "MenuEntry":
        self.on_click = callback
        return self

    def set_take_command(self, command: Optional[TakeCommand]) -> "MenuEntry":
        self.take_command = command
        return self

    def click(self) -> None:
        if self.on_click is not None:
            self.on_click(self)


class Menu:
    """Ordered entry list; the last entry renders at the top of the menu."""

    def __init__(self, entries: Optional[Sequence[Any]] = None) -> None:
        self._entries: List[Any] = list(entries or [])
        self.replacements = 0

    def get_menu_entries(self) -> List[Any]:
        return list(self._entries)

    def set_menu_entries(self, entries: Sequence[Any]) -> None:
        self._entries = list(entries)
        self.replacements += 1

    def create_menu_entry(self, index: int) -> MenuEntry:
        # Created entries are detached; the caller places them with set_menu_entries.
        return MenuEntry()


@dataclass(frozen=True)
class EntrySnapshot:
    """Identity fields needed to replay a menu action after its entry is gone."""

    option: str
    target: str
    action: int
    identifier: int
    param0: int
    param1: int
    item_id: int

    @classmethod
    def capture(cls, entry: Any) -> "EntrySnapshot":
        action = coerce_action(getattr(entry, "type", None))
        return cls(
            option=str(getattr(entry, "option", "") or ""),
            target=str(getattr(entry, "target", "") or ""),
            action=int(action) if action is not None else -1,
            identifier=_coerce_int(getattr(entry, "identifier", -1), -1),
            param0=_coerce_int(getattr(entry, "param0", 0), 0),
            param1=_coerce_int(getattr(entry, "param1", 0), 0),
            item_id=_coerce_int(getattr(entry, "item_id", -1), -1),
        )


@dataclass(frozen=True)
class TakeCommand:
    """A "take this ground item" request, interpreted by :func:`dispatch_take`."""

    category: str
    item_name: str
    snapshot: EntrySnapshot

    @classmethod
    def from_entry(cls, entry: Any, category: str, item_name: str) -> "TakeCommand":
        return cls(category=category, item_name=item_name, snapshot=EntrySnapshot.capture(entry))


def dispatch_take(client: Any, command: TakeCommand) -> bool:
    """Replay a take action through the host. Returns False when the host refused."""

    invoke = getattr(client, "invoke_menu_action", None)
    if not callable(invoke):
        _LOGGER.debug("Host does not expose invoke_menu_action; dropping take for %s", command.item_name)
        return False
    snapshot = command.snapshot
    try:
        invoke(
            snapshot.param0,
            snapshot.param1,
            snapshot.action,
            snapshot.identifier,
            snapshot.item_id,
            TAKE_OPTION,
            snapshot.target,
        )
    except Exception as exc:  # pragma: no cover - defensive guard
        _LOGGER.debug("Take action for %s failed: %s", command.item_name, exc, exc_info=exc)
        return False
    _LOGGER.debug("Dispatched take for %s (section=%s)", command.item_name, command.category)
    return True


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

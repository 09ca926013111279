"""Modifier-click helper that takes every item of the clicked item's section.

When the quick-pickup option is on and the modifier key is held, clicking a
"Take" entry whose item belongs to a section also takes the other items on
the same tile that belong to that section. Entries recreated by the organizer
are resolved through the :class:`TakeCommand` they carry. Tile lookups and
action replays must run on the host's client thread, so the whole pickup is
handed to ``client.client_thread.invoke`` once; if that handoff is
unavailable the pickup is skipped.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .menu_entries import (
    EntrySnapshot,
    TAKE_OPTION,
    TakeCommand,
    dispatch_take,
    is_ground_item_take,
    remove_tags,
)
from .sections import Category, SectionRegistry

_LOGGER = logging.getLogger("GroundItemOrganizer.QuickPickup")


def _entry_item_id(entry: Any) -> int:
    for attr in ("item_id", "identifier"):
        try:
            value = int(getattr(entry, attr))
        except (TypeError, ValueError, AttributeError):
            continue
        if value >= 0:
            return value
    return -1


def _ground_item_id(item: Any) -> int:
    for attr in ("item_id", "id"):
        try:
            return int(getattr(item, attr))
        except (TypeError, ValueError, AttributeError):
            continue
    return -1


class QuickPickup:
    """Plan and run section pickups for a single host client."""

    def __init__(self, client: Any, *, strip_markup: Callable[[str], str] = remove_tags) -> None:
        self._client = client
        self._strip_markup = strip_markup

    # Public API ---------------------------------------------------------

    def run(self, entry: Any, registry: SectionRegistry) -> bool:
        """Hand the pickup for ``entry`` to the client thread.

        Returns ``True`` when the handoff was accepted.
        """

        if not registry or self._source(entry) is None:
            return False
        client_thread = getattr(self._client, "client_thread", None)
        invoke = getattr(client_thread, "invoke", None)
        if not callable(invoke):
            _LOGGER.debug("Client thread unavailable; skipping quick pickup")
            return False
        try:
            invoke(lambda: self._pickup(entry, registry))
        except Exception as exc:
            _LOGGER.debug("Client thread refused quick pickup: %s", exc, exc_info=exc)
            return False
        return True

    def plan(self, entry: Any, registry: SectionRegistry) -> List[TakeCommand]:
        """Return take commands for the other same-section items on ``entry``'s tile."""

        source = self._source(entry)
        if source is None:
            return []
        snapshot, item_name = source
        category = registry.find_match(item_name)
        if category is None:
            return []
        clicked_id = _entry_item_id(snapshot)
        skipped_clicked = False
        commands: List[TakeCommand] = []
        for item in self._tile_items(snapshot.param0, snapshot.param1):
            item_id = _ground_item_id(item)
            if item_id < 0:
                continue
            if item_id == clicked_id and not skipped_clicked:
                # The host takes the clicked item itself.
                skipped_clicked = True
                continue
            name = self._item_name(item_id)
            if not category.matches(name):
                continue
            commands.append(self._command_for(category, name or "", item_id, snapshot))
        return commands

    # Implementation details --------------------------------------------

    def _source(self, entry: Any) -> Optional[Tuple[EntrySnapshot, str]]:
        # Entries rebuilt by the organizer carry the take they stand in for.
        command = getattr(entry, "take_command", None)
        if isinstance(command, TakeCommand):
            return command.snapshot, command.item_name
        if not is_ground_item_take(entry):
            return None
        return EntrySnapshot.capture(entry), self._strip_markup(getattr(entry, "target", "") or "")

    def _pickup(self, entry: Any, registry: SectionRegistry) -> int:
        commands = self.plan(entry, registry)
        taken = sum(1 for command in commands if dispatch_take(self._client, command))
        if commands:
            _LOGGER.debug("Quick pickup took %d of %d item(s) from section %s", taken, len(commands), commands[0].category)
        return taken

    def _tile_items(self, scene_x: int, scene_y: int) -> Iterable[Any]:
        lookup = getattr(self._client, "ground_items_at", None)
        if not callable(lookup):
            return []
        try:
            return list(lookup(scene_x, scene_y) or [])
        except Exception as exc:  # pragma: no cover - defensive guard
            _LOGGER.debug("Ground item lookup failed at (%d, %d): %s", scene_x, scene_y, exc)
            return []

    def _item_name(self, item_id: int) -> Optional[str]:
        lookup = getattr(self._client, "item_name", None)
        if not callable(lookup):
            return None
        try:
            name = lookup(item_id)
        except Exception as exc:
            _LOGGER.debug("Item name lookup failed for %d: %s", item_id, exc)
            return None
        return self._strip_markup(name) if isinstance(name, str) else None

    @staticmethod
    def _command_for(category: Category, name: str, item_id: int, origin: EntrySnapshot) -> TakeCommand:
        snapshot = EntrySnapshot(
            option=TAKE_OPTION,
            target=name,
            action=origin.action,
            identifier=item_id,
            param0=origin.param0,
            param1=origin.param1,
            item_id=item_id,
        )
        return TakeCommand(category=category.name, item_name=name, snapshot=snapshot)

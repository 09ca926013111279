"""Primary entry point for the Ground Item Organizer plugin."""
from __future__ import annotations

import importlib
import logging
import threading
from typing import Any, Optional

if __package__:
    from .version import __version__ as ORGANIZER_VERSION, DEV_MODE_ENV_VAR, is_dev_build
    from .organizer_plugin.classifier import UNCHANGED, apply_layout, classify_menu
    from .organizer_plugin.menu_entries import TakeCommand, dispatch_take, remove_tags
    from .organizer_plugin.preferences import CONFIG_GROUP, Preferences
    from .organizer_plugin.quick_pickup import QuickPickup
    from .organizer_plugin.sections import EMPTY_REGISTRY, SectionRegistry, build_registry
else:  # pragma: no cover - host loads as top-level module
    from version import __version__ as ORGANIZER_VERSION, DEV_MODE_ENV_VAR, is_dev_build
    from organizer_plugin.classifier import UNCHANGED, apply_layout, classify_menu
    from organizer_plugin.menu_entries import TakeCommand, dispatch_take, remove_tags
    from organizer_plugin.preferences import CONFIG_GROUP, Preferences
    from organizer_plugin.quick_pickup import QuickPickup
    from organizer_plugin.sections import EMPTY_REGISTRY, SectionRegistry, build_registry

PLUGIN_NAME = "GroundItemOrganizer"
PLUGIN_VERSION = ORGANIZER_VERSION
DEV_BUILD = is_dev_build(ORGANIZER_VERSION)
LOGGER_NAME = PLUGIN_NAME
LOG_TAG = PLUGIN_NAME

# java.awt.event.KeyEvent.VK_SHIFT, plus the names Tk-style hosts report.
MODIFIER_KEY_CODES = frozenset({16})
MODIFIER_KEY_NAMES = frozenset({"shift", "shift_l", "shift_r"})

HOST_DEFAULT_LOG_LEVEL = logging.DEBUG if DEV_BUILD else logging.INFO


def _load_host_config_module() -> Optional[Any]:
    try:
        return importlib.import_module("config")
    except Exception:
        return None


def _resolve_host_logger() -> Optional[logging.Logger]:
    logger_obj = getattr(_load_host_config_module(), "logger", None)
    return logger_obj if isinstance(logger_obj, logging.Logger) else None


def _resolve_host_log_level() -> int:
    """Follow the host logger's level, or the root logger's when the host has none."""

    source = _resolve_host_logger() or logging.getLogger()
    level = source.getEffectiveLevel()
    return level if level != logging.NOTSET else HOST_DEFAULT_LOG_LEVEL


def _effective_log_level(level: Optional[int] = None) -> int:
    if level is None:
        level = _resolve_host_log_level()
    return min(level, logging.DEBUG) if DEV_BUILD else level


def _ensure_plugin_logger_level() -> int:
    effective_level = _effective_log_level()
    logging.getLogger(LOGGER_NAME).setLevel(effective_level)
    return effective_level


class _HostLogHandler(logging.Handler):
    """Hand formatted plugin records to the host logger, or the root logger outside the host."""

    def emit(self, record: logging.LogRecord) -> None:
        target = _resolve_host_logger() or logging.getLogger()
        if target.isEnabledFor(record.levelno):
            target.log(record.levelno, self.format(record))


def _configure_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    _ensure_plugin_logger_level()
    if not any(getattr(handler, "_host_handler", False) for handler in logger.handlers):
        handler = _HostLogHandler()
        handler._host_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(f"[{LOG_TAG}] %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


LOGGER = _configure_logger()
if DEV_BUILD:
    LOGGER.info(
        "Running Ground Item Organizer dev build (%s); override via %s=0 to force release behaviour.",
        ORGANIZER_VERSION,
        DEV_MODE_ENV_VAR,
    )


def _is_modifier_key(key: Any) -> bool:
    if isinstance(key, bool):
        return False
    if isinstance(key, int):
        return key in MODIFIER_KEY_CODES
    if isinstance(key, str):
        return key.strip().lower() in MODIFIER_KEY_NAMES
    return False


class _PluginRuntime:
    """Owns the section registry and input state for one host client."""

    def __init__(self, client: Any, preferences: Preferences) -> None:
        self.client = client
        self._preferences = preferences
        self._lock = threading.Lock()
        self._registry: SectionRegistry = EMPTY_REGISTRY
        self._modifier_held = False
        self._running = False
        self._quick_pickup = QuickPickup(client, strip_markup=self._strip_markup)

    # Lifecycle ------------------------------------------------------------

    def start(self) -> str:
        with self._lock:
            if self._running:
                return PLUGIN_NAME
            _ensure_plugin_logger_level()
            self._running = True
        self.rebuild_sections()
        LOGGER.info("Ground Item Organizer started")
        return PLUGIN_NAME

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._registry = EMPTY_REGISTRY
            self._modifier_held = False
        LOGGER.info("Ground Item Organizer stopped")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def registry(self) -> SectionRegistry:
        return self._registry

    @property
    def modifier_held(self) -> bool:
        return self._modifier_held

    # Configuration --------------------------------------------------------

    def rebuild_sections(self) -> SectionRegistry:
        registry = build_registry(self._preferences.section_slots())
        with self._lock:
            self._registry = registry
        LOGGER.debug("Rebuilt %d custom section(s): %s", len(registry), ", ".join(registry.names()) or "<none>")
        return registry

    def handle_config_changed(self, group: Optional[str], key: Optional[str] = None) -> bool:
        if not self._running or group != CONFIG_GROUP:
            return False
        LOGGER.debug("Config change in %s (key=%s); reloading sections", group, key)
        self._preferences.reload()
        self.rebuild_sections()
        return True

    # Menu handling --------------------------------------------------------

    def handle_menu_opened(self) -> bool:
        if not self._running:
            return False
        prefs = self._preferences
        registry = self._registry
        if not prefs.enable_organizer or not registry:
            return False
        menu = self._resolve_menu()
        if menu is None:
            return False
        layout = classify_menu(
            menu.get_menu_entries(),
            registry,
            remove_originals=prefs.remove_originals,
            show_separators=prefs.show_separators,
            enabled=prefs.enable_organizer,
            strip_markup=self._strip_markup,
        )
        if layout is UNCHANGED:
            return False
        return apply_layout(menu, layout, self.dispatch_take)

    def dispatch_take(self, command: TakeCommand) -> bool:
        return dispatch_take(self.client, command)

    def handle_menu_option_clicked(self, entry: Any) -> bool:
        if not self._running or not self._preferences.quick_pickup or not self._modifier_held:
            return False
        return self._quick_pickup.run(entry, self._registry)

    # Input state ----------------------------------------------------------

    def handle_key_pressed(self, key: Any) -> None:
        if _is_modifier_key(key):
            self._modifier_held = True

    def handle_key_released(self, key: Any) -> None:
        if _is_modifier_key(key):
            self._modifier_held = False

    def handle_focus_changed(self, focused: bool) -> None:
        if not focused:
            self._modifier_held = False

    # Helpers --------------------------------------------------------------

    def _resolve_menu(self) -> Optional[Any]:
        getter = getattr(self.client, "get_menu", None)
        if callable(getter):
            return getter()
        return getattr(self.client, "menu", None)

    def _strip_markup(self, text: str) -> str:
        host_strip = getattr(self.client, "remove_tags", None)
        if callable(host_strip):
            try:
                return str(host_strip(text) or "")
            except Exception as exc:  # pragma: no cover - defensive guard
                LOGGER.debug("Host markup stripping failed; using built-in: %s", exc)
        return remove_tags(text)


# Host hook functions ------------------------------------------------------

_plugin: Optional[_PluginRuntime] = None
_preferences: Optional[Preferences] = None


def plugin_start3(plugin_dir: str, client: Any = None) -> str:
    """Host entrypoint: read settings, build sections and start the runtime."""
    LOGGER.info("Initialising Ground Item Organizer %s from %s", PLUGIN_VERSION, plugin_dir)
    global _plugin, _preferences
    if _plugin is not None:
        _plugin.stop()
    _preferences = Preferences()
    _plugin = _PluginRuntime(client, _preferences)
    return _plugin.start()


def plugin_stop() -> None:
    """Host entrypoint: drop cached state; safe to call when not running."""
    global _plugin, _preferences
    if _plugin:
        try:
            _plugin.stop()
        finally:
            _plugin = None
    _preferences = None


def menu_opened(event: Any = None) -> None:
    if _plugin is None:
        return
    try:
        _plugin.handle_menu_opened()
    except Exception as exc:
        LOGGER.exception("Failed to organise menu: %s", exc)


def config_changed(group: Optional[str], key: Optional[str] = None) -> None:
    if _plugin is None:
        return
    try:
        _plugin.handle_config_changed(group, key)
    except Exception as exc:
        LOGGER.exception("Failed to apply config change: %s", exc)


def menu_option_clicked(entry: Any) -> None:
    if _plugin is None:
        return
    try:
        _plugin.handle_menu_option_clicked(entry)
    except Exception as exc:
        LOGGER.exception("Quick pickup failed: %s", exc)


def key_pressed(key: Any) -> None:
    if _plugin:
        _plugin.handle_key_pressed(key)


def key_released(key: Any) -> None:
    if _plugin:
        _plugin.handle_key_released(key)


def focus_changed(focused: bool) -> None:
    if _plugin:
        _plugin.handle_focus_changed(focused)


# Metadata expected by some plugin loaders
name = PLUGIN_NAME
plugin_name = PLUGIN_NAME
version = PLUGIN_VERSION

"""Read-only view of the organizer settings stored in the host's config."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Optional, Sequence, Tuple

from .sections import MAX_SECTIONS, RGB, SectionSlot

try:
    import config as _host_config_module  # type: ignore
    from config import config as HOST_CONFIG  # type: ignore
except Exception:  # pragma: no cover - running outside the host client
    _host_config_module = None
    HOST_CONFIG = None


CONFIG_GROUP = "grounditemorganizer"

DEFAULT_SECTIONS: Tuple[SectionSlot, ...] = (
    SectionSlot("Food", (255, 170, 0), "garden pie, shark, lobster"),
    SectionSlot(
        "Runes",
        (170, 120, 255),
        "fire rune, water rune, air rune, earth rune, law rune, nature rune, cosmic rune",
    ),
    SectionSlot("Burst Nechryael", (255, 80, 80), "Rune full helm, Rune boots, Rune chainbody"),
    SectionSlot("Construction", (100, 220, 100), "Oak plank, Teak plank, hammer"),
    SectionSlot("", (80, 220, 220), ""),
)

LOGGER = logging.getLogger("GroundItemOrganizer.Preferences")


def _config_getter(name: str) -> Optional[Callable[..., Any]]:
    if _host_config_module is not None:
        getter = getattr(_host_config_module, name, None)
        if callable(getter):
            return getter
    if HOST_CONFIG is not None:
        getter = getattr(HOST_CONFIG, name, None)
        if callable(getter):
            return getter
    return None


def _config_available() -> bool:
    return _config_getter("get") is not None or _config_getter("get_str") is not None


def config_key(name: str) -> str:
    return f"{CONFIG_GROUP}.{name}"


def _config_call(getter: Callable[..., Any], key: str, default: Any) -> Any:
    try:
        return getter(key, default)
    except TypeError:
        try:
            return getter(key)
        except Exception:
            return default
    except Exception:
        return default


def _config_get_raw(key: str, default: Any) -> Any:
    if not _config_available():
        return default
    getter = _config_getter("get")
    if getter is not None:
        value = _config_call(getter, key, default)
    else:
        value = getattr(HOST_CONFIG, key, default) if HOST_CONFIG is not None else default
    return default if value is None else value


def _config_get_value(name: str, key: str, default: Any) -> Any:
    getter = _config_getter(name)
    if getter is None:
        return _config_get_raw(key, default)
    value = _config_call(getter, key, default)
    return default if value is None else value


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    return default


def _coerce_str(value: Any, default: str) -> str:
    if value is None:
        return default
    try:
        return str(value)
    except Exception:
        return default


def _coerce_channel(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return None
    if 0 <= numeric <= 255:
        return numeric
    return None


def _coerce_color(value: Any, default: RGB) -> RGB:
    """Accept ``(r, g, b)``, a packed RGB/ARGB integer or a ``#rrggbb`` / ``#aarrggbb`` string."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        packed = value & 0xFFFFFF
        return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)
    if isinstance(value, str):
        text = value.strip()
        if "," in text:
            return _coerce_color(text.split(","), default)
        text = text.lstrip("#")
        if text.lower().startswith("0x"):
            text = text[2:]
        if len(text) not in (6, 8):
            return default
        try:
            packed = int(text, 16)
        except ValueError:
            return default
        return _coerce_color(packed, default)
    if isinstance(value, Sequence) and len(value) in (3, 4):
        channels = [_coerce_channel(part.strip() if isinstance(part, str) else part) for part in value[:3]]
        if any(channel is None for channel in channels):
            return default
        return (channels[0], channels[1], channels[2])  # type: ignore[return-value]
    red = _coerce_channel(getattr(value, "red", None))
    green = _coerce_channel(getattr(value, "green", None))
    blue = _coerce_channel(getattr(value, "blue", None))
    if red is None or green is None or blue is None:
        return default
    return (red, green, blue)


@dataclass
class Preferences:
    """Organizer settings, read from the host config and never written back."""

    enable_organizer: bool = True
    show_separators: bool = True
    remove_originals: bool = False
    quick_pickup: bool = False
    sections: Tuple[SectionSlot, ...] = field(default_factory=lambda: DEFAULT_SECTIONS)

    def __post_init__(self) -> None:
        self._config_enabled = _config_available()
        if self._config_enabled:
            self._load_from_config()
        else:
            LOGGER.debug("Host config unavailable; using default organizer settings")

    def reload(self) -> None:
        self._config_enabled = _config_available()
        if self._config_enabled:
            self._load_from_config()

    def _load_from_config(self) -> None:
        self.enable_organizer = _coerce_bool(
            _config_get_value("get_bool", config_key("enableOrganizer"), self.enable_organizer),
            self.enable_organizer,
        )
        self.show_separators = _coerce_bool(
            _config_get_value("get_bool", config_key("showSeparators"), self.show_separators),
            self.show_separators,
        )
        self.remove_originals = _coerce_bool(
            _config_get_value("get_bool", config_key("removeOriginals"), self.remove_originals),
            self.remove_originals,
        )
        self.quick_pickup = _coerce_bool(
            _config_get_value("get_bool", config_key("quickPickup"), self.quick_pickup),
            self.quick_pickup,
        )
        slots = []
        for index in range(MAX_SECTIONS):
            fallback = DEFAULT_SECTIONS[index]
            number = index + 1
            slots.append(
                SectionSlot(
                    name=_coerce_str(_config_get_value("get_str", config_key(f"section{number}Name"), fallback.name), fallback.name),
                    color=_coerce_color(_config_get_raw(config_key(f"section{number}Color"), fallback.color), fallback.color),
                    items=_coerce_str(_config_get_value("get_str", config_key(f"section{number}Items"), fallback.items), fallback.items),
                )
            )
        self.sections = tuple(slots)
        LOGGER.debug(
            "Loaded organizer settings: enabled=%s separators=%s remove_originals=%s quick_pickup=%s sections=%s",
            self.enable_organizer,
            self.show_separators,
            self.remove_originals,
            self.quick_pickup,
            ", ".join(slot.name for slot in self.sections if slot.name.strip()) or "<none>",
        )

    def section_slots(self) -> Tuple[SectionSlot, ...]:
        return tuple(self.sections[:MAX_SECTIONS])

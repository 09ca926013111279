from __future__ import annotations

import logging
import sys
from types import SimpleNamespace

import pytest

import load
import version


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def test_logger_uses_plugin_name():
    logger = logging.getLogger(load.PLUGIN_NAME)
    assert logger is load.LOGGER
    assert logger.propagate is False
    assert any(getattr(handler, "_host_handler", False) for handler in logger.handlers)
    assert load.plugin_name == load.PLUGIN_NAME
    assert load.version == version.__version__


def test_configure_logger_does_not_duplicate_handlers():
    load._configure_logger()
    load._configure_logger()
    handlers = [h for h in load.LOGGER.handlers if getattr(h, "_host_handler", False)]
    assert len(handlers) == 1


def test_module_loggers_route_through_plugin_logger():
    child = logging.getLogger("GroundItemOrganizer.Classifier")
    assert child.parent is load.LOGGER


def test_records_are_forwarded_to_host_logger(monkeypatch):
    host_logger = logging.getLogger("test.host.logger")
    host_logger.setLevel(logging.DEBUG)
    host_logger.propagate = False
    capture = _ListHandler()
    host_logger.addHandler(capture)
    monkeypatch.setitem(sys.modules, "config", SimpleNamespace(logger=host_logger))
    assert load._ensure_plugin_logger_level() == logging.DEBUG
    try:
        load.LOGGER.info("menu organised")
    finally:
        host_logger.removeHandler(capture)

    assert capture.messages
    assert capture.messages[-1].endswith("menu organised")
    assert f"[{load.LOG_TAG}]" in capture.messages[-1]


def test_host_log_level_follows_host_logger(monkeypatch):
    host_logger = logging.getLogger("test.host.warning")
    host_logger.setLevel(logging.WARNING)
    monkeypatch.setitem(sys.modules, "config", SimpleNamespace(logger=host_logger))
    assert load._resolve_host_log_level() == logging.WARNING


def test_records_fall_back_to_root_logger_outside_host(monkeypatch):
    monkeypatch.setattr(load, "_load_host_config_module", lambda: None)
    root = logging.getLogger()
    capture = _ListHandler()
    previous = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(capture)
    try:
        load.LOGGER.warning("no host logger")
    finally:
        root.removeHandler(capture)
        root.setLevel(previous)

    assert capture.messages == [f"[{load.LOG_TAG}] no host logger"]


def test_host_log_level_defaults_without_host(monkeypatch):
    monkeypatch.delitem(sys.modules, "config", raising=False)
    monkeypatch.setattr(load, "_load_host_config_module", lambda: None)
    assert isinstance(load._resolve_host_log_level(), int)


@pytest.mark.parametrize(
    "identifier, expected",
    [
        ("1.2.0", False),
        ("1.2.0-dev", True),
        ("1.3.0.dev2", True),
        ("dev-1.2", True),
        ("", False),
    ],
)
def test_is_dev_build(monkeypatch, identifier, expected):
    monkeypatch.delenv(version.DEV_MODE_ENV_VAR, raising=False)
    # An empty identifier falls back to the packaged version.
    if identifier == "":
        monkeypatch.setattr(version, "__version__", "")
    assert version.is_dev_build(identifier) is expected


@pytest.mark.parametrize("value, expected", [("1", True), ("off", False), ("YES", True)])
def test_dev_mode_env_override(monkeypatch, value, expected):
    monkeypatch.setenv(version.DEV_MODE_ENV_VAR, value)
    assert version.is_dev_build("1.2.0") is expected

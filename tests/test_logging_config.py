from __future__ import annotations

import logging

from gitnab.LoggingConfig import configure_logging, resolve_level


def test_resolve_level_precedence(monkeypatch):
    monkeypatch.setenv("GITNAB_LOG_LEVEL", "debug")
    assert resolve_level() == logging.DEBUG
    assert resolve_level("error") == logging.ERROR
    assert resolve_level(logging.INFO) == logging.INFO


def test_resolve_level_defaults_to_warning(monkeypatch):
    monkeypatch.delenv("GITNAB_LOG_LEVEL", raising=False)
    assert resolve_level() == logging.WARNING
    assert resolve_level("not-a-level") == logging.WARNING


def test_configure_logging_installs_rich_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("INFO", force=True)
        assert root.level == logging.INFO
        assert [type(h).__name__ for h in root.handlers] == ["RichHandler"]
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

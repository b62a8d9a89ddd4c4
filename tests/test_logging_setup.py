from __future__ import annotations

import io
import logging

import pytest

import expense_ai.logging_setup as logging_setup


@pytest.fixture(autouse=True)
def _restore_loggers(monkeypatch: pytest.MonkeyPatch):
    pkg = logging.getLogger("expense_ai")
    saved = (list(pkg.handlers), pkg.level, pkg.propagate)
    transport = {n: logging.getLogger(n).level for n in ("httpx", "openai")}
    monkeypatch.setattr(logging_setup, "_handler", None)
    pkg.handlers = []
    yield
    pkg.handlers, level, pkg.propagate = saved[0], saved[1], saved[2]
    pkg.setLevel(level)
    for name, lvl in transport.items():
        logging.getLogger(name).setLevel(lvl)


def test_silent_until_configured():
    logging_setup.get_logger("expense_ai.test")
    handlers = logging.getLogger("expense_ai").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.NullHandler)


def test_configure_writes_to_stream_and_drops_null_handler():
    logging_setup.get_logger("expense_ai.test")
    buf = io.StringIO()

    logging_setup.configure_logging("info", fmt="%(levelname)s %(message)s", stream=buf)
    logging_setup.get_logger("expense_ai.test").info("categorize:start num_transactions=%d", 3)

    assert buf.getvalue() == "INFO categorize:start num_transactions=3\n"
    pkg = logging.getLogger("expense_ai")
    assert not any(isinstance(h, logging.NullHandler) for h in pkg.handlers)
    assert pkg.propagate is False


def test_reconfigure_changes_level_without_adding_handlers():
    buf = io.StringIO()
    logging_setup.configure_logging("WARNING", fmt="%(message)s", stream=buf)
    logging_setup.configure_logging("DEBUG", stream=io.StringIO())

    logging_setup.get_logger("expense_ai.test").debug("visible")

    assert len(logging.getLogger("expense_ai").handlers) == 1
    assert buf.getvalue() == "visible\n"


def test_level_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EXPENSE_AI_LOG_LEVEL", "error")
    logging_setup.configure_logging(stream=io.StringIO())
    assert logging.getLogger("expense_ai").level == logging.ERROR


@pytest.mark.parametrize(
    ("level", "expected"),
    [("10", logging.DEBUG), (logging.WARNING, logging.WARNING), ("nonsense", logging.INFO)],
)
def test_level_parsing(level, expected):
    logging_setup.configure_logging(level, stream=io.StringIO())
    assert logging.getLogger("expense_ai").level == expected


def test_transport_loggers_quiet_unless_debug():
    logging_setup.configure_logging("INFO", stream=io.StringIO())
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("openai").level == logging.WARNING

    logging_setup.configure_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG

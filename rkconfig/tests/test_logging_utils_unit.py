from __future__ import annotations

import logging

import pytest

from rkconfig.core import logging_utils


@pytest.fixture(autouse=True)
def _clear_throttle():
    logging_utils.reset_throttle()
    yield
    logging_utils.reset_throttle()


def test_log_throttled_logs_once_per_interval(monkeypatch, caplog):
    now = [100.0]
    monkeypatch.setattr(logging_utils.time, "monotonic", lambda: now[0])
    logger = logging.getLogger("rkconfig.test.throttle")

    with caplog.at_level(logging.INFO, logger="rkconfig.test.throttle"):
        assert logging_utils.log_throttled(logger, "k", interval_s=60, level=logging.INFO, msg="first") is True
        assert logging_utils.log_throttled(logger, "k", interval_s=60, level=logging.INFO, msg="second") is False
        now[0] += 61
        assert logging_utils.log_throttled(logger, "k", interval_s=60, level=logging.INFO, msg="third") is True

    assert [r.getMessage() for r in caplog.records] == ["first", "third"]


def test_log_throttled_keys_are_independent(caplog):
    logger = logging.getLogger("rkconfig.test.throttle")
    with caplog.at_level(logging.INFO, logger="rkconfig.test.throttle"):
        assert logging_utils.log_throttled(logger, "a", interval_s=60, level=logging.INFO, msg="a")
        assert logging_utils.log_throttled(logger, "b", interval_s=60, level=logging.INFO, msg="b")
    assert len(caplog.records) == 2


def test_log_throttled_attaches_exception(caplog):
    logger = logging.getLogger("rkconfig.test.throttle")
    exc = RuntimeError("boom")
    with caplog.at_level(logging.DEBUG, logger="rkconfig.test.throttle"):
        logging_utils.log_throttled(logger, "e", interval_s=1, level=logging.DEBUG, msg="failed", exc=exc)
    assert caplog.records[0].exc_info[1] is exc


def test_configure_logging_respects_existing_handlers(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    root = logging.getLogger()

    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        logging_utils.configure_logging()
    finally:
        root.removeHandler(handler)
    assert calls == []


def test_configure_logging_debug_env(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    monkeypatch.setenv("RKCONFIG_DEBUG", "1")

    # Hide the handlers pytest installs without replacing getLogger itself.
    root = logging.getLogger()
    saved = root.handlers[:]
    root.handlers.clear()
    try:
        logging_utils.configure_logging()
    finally:
        root.handlers[:] = saved
    assert calls and calls[0]["level"] == logging.DEBUG

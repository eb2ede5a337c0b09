import logging
from datetime import datetime

from insurance_client.core.activity_log import ActivityLog, Severity


def _clock():
    return datetime(2024, 5, 1, 9, 5, 7)


def test_entries_are_most_recent_first():
    log = ActivityLog(clock=_clock)
    log.record("first")
    log.success("second")
    log.error("third")

    assert [entry.message for entry in log.entries] == ["third", "second", "first"]
    assert [entry.severity for entry in log.entries] == [Severity.ERROR, Severity.SUCCESS, Severity.INFO]
    assert len(log) == 3


def test_render_prefixes_time():
    log = ActivityLog(clock=_clock)
    entry = log.record("Wallet connected successfully!")
    assert entry.render() == "[09:05:07] Wallet connected successfully!"


def test_entries_returns_a_copy():
    log = ActivityLog(clock=_clock)
    log.record("one")
    log.entries.clear()
    assert len(log) == 1


def test_severity_accepts_plain_strings():
    log = ActivityLog(clock=_clock)
    assert log.record("x", "success").severity is Severity.SUCCESS


def test_errors_are_mirrored_to_logger(caplog):
    log = ActivityLog(clock=_clock)
    with caplog.at_level(logging.INFO, logger="insurance_client.core.activity_log"):
        log.error("Approval failed: reverted")
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "Approval failed: reverted"
    assert record.severity == "error"

from pathlib import Path
import logging

import pytest

import stacky.core.logger
from stacky.core.location import Location

@pytest.fixture(name="log", scope="function")
def fixture_log() -> stacky.core.logger.DiagnosticsLogger:
    return stacky.core.logger.create_root_diagnostics_logger()

def test_logger_check_caplog(caplog, log):
    """emit all message levels. check pytest caplog fixture behavior"""

    log.critical("id1", "message1")
    log.error("id2", "message2")
    log.warning("id3", "message3")
    log.hint("id4", "message4")
    log.info("id5", "message5")
    log.detail("id6", "message6")
    log.debug("id7", "message7")

    assert len(caplog.records) == 7
    final_record = caplog.records[-1]
    assert final_record.levelname == "DEBUG"
    assert final_record.message_id == "id7"
    assert final_record.msg == "message7"

def test_logger_location_extra(caplog, log):
    log.error("backtrace-parse-error", "discarded backtrace", Location("<stdin>", line=14, column=30))

    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.levelname == "ERROR"
    assert record.message_id == "backtrace-parse-error"
    assert record.__dict__.get("source_file_path") == "<stdin>"
    assert record.__dict__.get("source_line") == 14
    assert record.__dict__.get("source_column") == 30

def test_logger_path_and_keyword_extras(caplog, log):
    log.info("loading-config-file", "loading configuration file", Path("config.json"), line=3)

    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.__dict__.get("source_file_path") == str(Path("config.json"))
    assert record.__dict__.get("source_line") == 3
    assert record.__dict__.get("source_column") is None

def test_logger_detail_and_debug_without_message_id(caplog, log):
    log.detail("message3")
    log.debug("message4", line=7)

    assert len(caplog.records) == 2
    assert caplog.records[0].levelname == "DETAIL"
    assert caplog.records[0].message_id is None
    assert caplog.records[0].msg == "message3"
    assert caplog.records[1].message_id is None
    assert caplog.records[1].__dict__.get("source_line") == 7

def test_logger_requires_message_id_at_info_and_above(log):
    with pytest.raises(AssertionError):
        log.info("no message id")
    with pytest.raises(AssertionError):
        log.error("no message id", Location("<stdin>", 1, 1))

def test_logger_formatting(caplog, log):
    formatter = stacky.core.logger.DiagnosticRecordFormatter()
    location = Location("<stdin>", line=14, column=30)

    log.critical("error-opening-input", "could not open input file")
    log.error("backtrace-parse-error", "discarded backtrace", location)
    log.warning("bad-xdg-config-home", "will not load user config", location)
    log.hint("unused-marker", "marker has no effect")
    log.info("info-1", "info message")
    log.detail("detail-1", "detail with message id")
    log.detail("detail without message id")
    log.debug("debug dump", line=3)

    expect_formatted_record_tuples = [
        ("stacky", logging.CRITICAL, "critical: [error-opening-input]: could not open input file"),
        ("stacky", logging.ERROR, "<stdin>:14:30: error: [backtrace-parse-error]: discarded backtrace"),
        ("stacky", logging.WARNING, "<stdin>:14:30: warning: [bad-xdg-config-home]: will not load user config"),
        ("stacky", stacky.core.logger.HINT, "hint: [unused-marker]: marker has no effect"),
        ("stacky", logging.INFO, "info: [info-1]: info message"),
        ("stacky", stacky.core.logger.DETAIL, "detail: [detail-1]: detail with message id"),
        ("stacky", stacky.core.logger.DETAIL, "detail: detail without message id"),
        ("stacky", logging.DEBUG, "<input>:3: debug: debug dump"),
    ]
    # caplog captures records before formatting, so format them here to check the formatter too
    formatted_caplog_record_tuples = [(r.name, r.levelno, formatter.format(r)) for r in caplog.records]
    assert formatted_caplog_record_tuples == expect_formatted_record_tuples

def test_logger_message_counters(log):
    assert log.critical_count() == 0
    assert log.error_count() == 0
    assert log.warning_count() == 0

    log.critical("id1", "message1")
    log.error("id2", "message2")
    log.error("id3", "message3")
    log.warning("id4", "message4")
    assert log.critical_count() == 1
    assert log.error_count() == 2
    assert log.warning_count() == 1

    for level, message_count in log.message_counts.items():
        if level in (logging.CRITICAL, logging.ERROR, logging.WARNING):
            continue
        assert message_count == 0, f"should be 0, no level {level} messages were logged"

"""
    Compiler-style diagnostic logging.

    Diagnostics about the input stream are located at the stream line and column
    where the problem was found, e.g.

        <stdin>:14:30: error: [backtrace-parse-error]: discarded backtrace. unbalanced-symbol: ...

    Logging Levels:
    - critical: Conditions that halt the whole run.
    - error: A backtrace or configuration file that could not be processed.
    - warning: Non-error conditions that the user could benefit from being notified about.
    - hint: Suggestions, e.g. configuration that has no effect.
    - info: Key happy-path information and status.
    - detail: Verbose per-block and per-notifier reporting. Non-standard level between DEBUG and INFO.
    - debug: Developer-oriented dumps of internal state.

    Refer to the Python logging documentation for general guidelines:
    https://docs.python.org/3/howto/logging.html
"""
from typing import Any
import logging
import pathlib
import sys

from .location import Location

LOGGER_NAME = "stacky"

# Add HINT and DETAIL logging levels without monkey patching the logging module.
def add_logging_level(level: int, name: str, lower_bound: int, upper_bound: int) -> int:
    existing_level = logging.getLevelName(name)
    # ^^^ getLevelName maps a registered name to its number, an unregistered name to the string "Level <name>"
    if isinstance(existing_level, str):
        existing_level = None

    if existing_level is None:
        assert lower_bound < level < upper_bound
        logging.addLevelName(level, name)
        return level
    if existing_level > upper_bound or existing_level < lower_bound:
        print(f"warning: stacky: log level {name} was not configured in expected range", file=sys.stderr)
    return existing_level

HINT: int = add_logging_level(25, "HINT", logging.INFO, logging.WARNING)
DETAIL: int = add_logging_level(15, "DETAIL", logging.DEBUG, logging.INFO)

log_levels = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'HINT': HINT,
    'INFO': logging.INFO,
    'DETAIL': DETAIL,
    'DEBUG': logging.DEBUG,
}

class DiagnosticsLogger:
    """Ergonomic facade for logging compiler-style diagnostic messages.
    - Requires message ids for INFO and above.
    - Accepts a Location, a Path, and line/column keywords to locate the message.
    - Counts messages per level so that the tool can compute its exit status.
    """
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.message_counts: dict[int, int] = {level: 0 for level in log_levels.values()}

    def critical_count(self) -> int:
        return self.message_counts[logging.CRITICAL]

    def error_count(self) -> int:
        return self.message_counts[logging.ERROR]

    def warning_count(self) -> int:
        return self.message_counts[logging.WARNING]

    def _make_extra(self, message_id: str|None, extras: tuple[Any, ...], kwextras: dict[str, Any]) -> dict[str, Any]:
        """interpret extras and kwextras as source_file_path, source_line and source_column fields"""
        result: dict[str, Any] = {'message_id': message_id}
        file_path, line, column = None, None, None

        for obj in extras:
            if isinstance(obj, Location):
                # one location per message, the last one wins
                file_path, line, column = obj.path, obj.line, obj.column
            elif isinstance(obj, pathlib.Path):
                file_path = str(obj)
            else:
                assert False, f"unrecognised type-dispatched extra log argument {repr(obj)}"

        for name, value in kwextras.items():
            if name == "line":
                line = value
            elif name == "column":
                column = value
            else:
                assert False, f"unrecognised keyword extra log argument {name} = {repr(value)}"

        if file_path is not None:
            result['source_file_path'] = file_path
        if line is not None:
            result['source_line'] = line
        if column is not None:
            result['source_column'] = column
        return result

    # log calls take one of two forms:
    #   log.error(message, ...)
    #   log.error(message_id, message, ...)
    # where ... are optional Location/Path extras and line=/column= keywords.

    def _log(self, level: int, msg_id_or_msg: str, msg_and_or_extras: tuple[Any, ...], kwextras: dict[str, Any]):
        if msg_and_or_extras and isinstance(msg_and_or_extras[0], str):
            message_id = msg_id_or_msg
            message = msg_and_or_extras[0]
            extras = msg_and_or_extras[1:]
        else:
            message_id = None
            message = msg_id_or_msg
            extras = msg_and_or_extras

        if level >= logging.INFO:
            assert message_id is not None, "message_id is required for logging at 'info' level and above"

        self.logger.log(level, message, extra=self._make_extra(message_id, extras, kwextras))
        self.message_counts[level] += 1

    def critical(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(logging.CRITICAL, msg_id_or_msg, msg_and_or_extras, kwextras)

    def error(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(logging.ERROR, msg_id_or_msg, msg_and_or_extras, kwextras)

    def warning(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(logging.WARNING, msg_id_or_msg, msg_and_or_extras, kwextras)

    def hint(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(HINT, msg_id_or_msg, msg_and_or_extras, kwextras)

    def info(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(logging.INFO, msg_id_or_msg, msg_and_or_extras, kwextras)

    def detail(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(DETAIL, msg_id_or_msg, msg_and_or_extras, kwextras)

    def debug(self, msg_id_or_msg: str, *msg_and_or_extras, **kwextras):
        self._log(logging.DEBUG, msg_id_or_msg, msg_and_or_extras, kwextras)

    def error_exception(self, ex: BaseException):
        self.logger.error(ex, exc_info=True)

    def debug_exception(self, ex: BaseException):
        self.logger.debug(ex, exc_info=True)


class DiagnosticRecordFormatter(logging.Formatter):
    """Format log records as `path:line:col: level: [message-id]: message`"""
    def formatMessage(self, record) -> str:
        source_file: str = record.__dict__.get('source_file_path', '')
        source_line = record.__dict__.get('source_line', None)
        source_column = record.__dict__.get('source_column', None)
        if (source_line is not None or source_column is not None) and not source_file:
            source_file = '<input>'
        source_location_str = ":".join(str(s) for s in (source_file, source_line, source_column) if s)

        message_id = record.__dict__.get('message_id', None)
        message_id = f"[{message_id}]" if message_id else None

        parts = (source_location_str, record.levelname.lower(), message_id)
        message = record.__dict__['message']
        if message:
            return ": ".join(s for s in parts + (message,) if s)
        return ": ".join(s for s in parts if s) + ":"


def create_root_diagnostics_logger(initial_level=logging.DEBUG) -> DiagnosticsLogger:
    logger = logging.getLogger(name=LOGGER_NAME)
    logger.setLevel(initial_level)
    if not logger.handlers:
        stream_handler = logging.StreamHandler() # stderr, stdout carries the passed-through program output
        stream_handler.setLevel(logging.DEBUG)
        stream_handler.setFormatter(DiagnosticRecordFormatter())
        logger.addHandler(stream_handler)

    return DiagnosticsLogger(logger=logger)

"""
    Parse the source location line that may follow a frame header, e.g.

        "                               at /home/me/proj/src/main.rs:12:5"
        "app|                           at /home/me/proj/src/main.rs:12:5"
"""
import re

from .location import Location
from .parse_error import ParseError, ParseErrorKind

U32_MAX = 2**32 - 1

location_regex = re.compile(r"[ \t]*(?:[^\s]+[ \t]+)?at (?P<path>[^:\n]*):(?P<line>[0-9]+):(?P<column>[0-9]+)[ \t\r]*")
# Explanation:
# - `[ \t]*` skips leading indentation.
# - `(?:[^\s]+[ \t]+)?` matches an optional opaque prefix token (thread name, process label, etc.).
# - `at ` is the location marker.
# - `(?P<path>[^:\n]*)` the path is everything up to the first colon.
# - `:(?P<line>[0-9]+):(?P<column>[0-9]+)` line and column, ASCII digits only.
# - `[ \t\r]*` tolerates trailing whitespace and a CRLF line ending.

def _parse_u32(source: str, match: re.Match, group: str) -> int:
    digits = match.group(group).lstrip("0")
    # bound the digit count before int(), which rejects very long digit strings
    if len(digits) > len(str(U32_MAX)) or int(digits or "0") > U32_MAX:
        raise ParseError(ParseErrorKind.NUMERIC_OVERFLOW, f"{group} number is out of range", source, match.start(group))
    return int(digits or "0")

def parse_location(source: str, start: int = 0, end: int|None = None) -> Location|None:
    """Parse `source[start:end]` as a location line.
    Returns None if the fragment is not a location line. Raises ParseError if the
    line and column digits are present but too large."""
    if end is None:
        end = len(source)
    match = location_regex.fullmatch(source, start, end)
    if not match:
        return None
    line = _parse_u32(source, match, "line")
    column = _parse_u32(source, match, "column")
    return Location(path=match.group("path"), line=line, column=column)

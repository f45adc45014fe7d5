"""
    Parse one backtrace frame: a header line and an optional location line.

        "  4:     0x55a98f1f5a8c - demo::parse_config::h1b2c3d4e5f607182"
        "                               at /home/me/proj/src/main.rs:12:5"
"""
import re

from .backtrace import Entry
from .location_parser import parse_location
from .parse_error import ParseError, ParseErrorKind
from .symbol_parser import DEFAULT_MAX_DEPTH, parse_symbol

POINTER_HEX_DIGITS = 16 # 64-bit addresses

index_regex = re.compile(r"[ \t]*(?:[^\s]+[ \t]+)?(?P<index>[0-9]+):[ \t]+")
# Explanation:
# - `[ \t]*` skips leading indentation.
# - `(?:[^\s]+[ \t]+)?` matches an optional prefix token before the frame index,
#   e.g. "app|" when the program output is labelled by a process supervisor.
# - `(?P<index>[0-9]+):` the decimal frame index and its colon.
# - `[ \t]+` the padding that aligns the pointer column.

pointer_regex = re.compile(r"0x(?P<address>[0-9a-fA-F]+)")

SYMBOL_SEPARATOR = " - "

def line_end(source: str, pos: int) -> int:
    """offset of the '\\n' that terminates the line starting at `pos`, or len(source)"""
    end = source.find("\n", pos)
    return len(source) if end == -1 else end

def next_line_start(source: str, pos: int) -> int:
    end = line_end(source, pos)
    return end + 1 if end < len(source) else end

def _strip_trailing_whitespace(source: str, start: int, end: int) -> int:
    while end > start and source[end - 1] in " \t\r":
        end -= 1
    return end

def parse_header(source: str, pos: int, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[str, int]:
    """Parse the frame header line starting at `pos`. Return the canonical function
    name and the offset of the end of the header line."""
    end = line_end(source, pos)

    index_match = index_regex.match(source, pos, end)
    if not index_match:
        raise ParseError(ParseErrorKind.MALFORMED_FRAME, "expected a frame index followed by ':'", source, pos)

    pointer_match = pointer_regex.match(source, index_match.end(), end)
    if not pointer_match:
        raise ParseError(ParseErrorKind.MALFORMED_FRAME, "expected a '0x' frame pointer", source, index_match.end())
    address = pointer_match.group("address").lstrip("0")
    if len(address) > POINTER_HEX_DIGITS:
        raise ParseError(ParseErrorKind.NUMERIC_OVERFLOW, "frame pointer is out of range", source, pointer_match.start("address"))

    symbol_start = pointer_match.end()
    if not source.startswith(SYMBOL_SEPARATOR, symbol_start, end):
        raise ParseError(ParseErrorKind.MALFORMED_FRAME, f"expected '{SYMBOL_SEPARATOR}' after the frame pointer", source, symbol_start)
    symbol_start += len(SYMBOL_SEPARATOR)

    function = parse_symbol(source, symbol_start, _strip_trailing_whitespace(source, symbol_start, end), max_depth)
    return function, end

def parse_frame(source: str, pos: int, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[Entry, int]:
    """Parse the frame starting at `pos`. Return the entry and the offset of the
    first line that was not consumed."""
    function, end = parse_header(source, pos, max_depth)
    if end >= len(source):
        return Entry(function=function, location=None), end

    # a following location line belongs to this frame, anything else is left for the next frame
    location_start = end + 1
    location_end = line_end(source, location_start)
    location = parse_location(source, location_start, location_end)
    if location is None:
        return Entry(function=function, location=None), location_start
    return Entry(function=function, location=location), next_line_start(source, location_start)

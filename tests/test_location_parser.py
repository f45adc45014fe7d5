import pytest

from stacky.core.location import Location
from stacky.core.location_parser import parse_location
from stacky.core.parse_error import ParseError, ParseErrorKind

@pytest.mark.parametrize("line, expected", [
    ("  at /file.rs:1:2", Location("/file.rs", 1, 2)),
    ("at /file.rs:3:4", Location("/file.rs", 3, 4)),
    ("prefix   at /rustc/348e/library/std/src/../../backtrace/src/backtrace/libunwind.rs:93:5",
        Location("/rustc/348e/library/std/src/../../backtrace/src/backtrace/libunwind.rs", 93, 5)),
    ("                               at /home/me/proj/src/main.rs:12:5\r", Location("/home/me/proj/src/main.rs", 12, 5)),
    ("  at ./csu/../sysdeps/nptl/libc_start_call_main.h:58:16  ", Location("./csu/../sysdeps/nptl/libc_start_call_main.h", 58, 16)),
    ("  at :7:8", Location("", 7, 8)),
])
def test_location_line(line: str, expected: Location):
    assert parse_location(line) == expected

@pytest.mark.parametrize("line", [
    "jibberish",
    "",
    "   1:     0x55a98f23062c - std::foo::bar::123",
    "  at /file.rs",
    "  at /file.rs:1",
    "  at /file.rs:1:",
    "  at /file.rs:x:2",
    "  at /file.rs:1:2:3",
    "  at /file.rs:-1:2",
    "two prefix tokens at /file.rs:1:2",
])
def test_not_a_location_line(line: str):
    assert parse_location(line) is None

def test_location_within_source_range():
    source = "   0:     0x1 - main\n   at /file.rs:1:2\nnext line"
    start = source.index("   at")
    end = source.index("\nnext")
    assert parse_location(source, start, end) == Location("/file.rs", 1, 2)

def test_unparseable_numbers_are_not_defaulted_to_zero():
    """Earlier versions of the parser substituted 0 for a line or column number that
    could not be parsed. That was a bug: a location with a made-up line number points
    the user at the wrong place. Such lines are now never turned into a location."""
    assert parse_location("  at /file.rs:x:2") is None
    assert parse_location("  at /file.rs:1:y") is None
    assert parse_location("  at /file.rs") is None

@pytest.mark.parametrize("line, offset", [
    ("  at /file.rs:4294967296:2", 14),
    ("  at /file.rs:1:99999999999999999999", 16),
])
def test_numeric_overflow(line: str, offset: int):
    with pytest.raises(ParseError) as exc_info:
        parse_location(line)
    assert exc_info.value.kind == ParseErrorKind.NUMERIC_OVERFLOW
    assert exc_info.value.offset == offset

def test_largest_line_number():
    assert parse_location("  at /file.rs:4294967295:1") == Location("/file.rs", 4294967295, 1)

def test_very_long_number_is_numeric_overflow():
    line = "  at /file.rs:" + "9" * 5000 + ":2"
    with pytest.raises(ParseError) as exc_info:
        parse_location(line)
    assert exc_info.value.kind == ParseErrorKind.NUMERIC_OVERFLOW
    assert exc_info.value.offset == 14

def test_leading_zeros_do_not_overflow():
    assert parse_location("  at /file.rs:" + "0" * 5000 + "7:0") == Location("/file.rs", 7, 0)

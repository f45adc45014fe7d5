from stacky.core.block_scanner import BacktraceBlockScanner, BacktraceBlock, PassthroughLine, AbsorbedLine, CompletedBlock
from stacky.core.configuration import BlockMarkersConfiguration

def feed_all(scanner: BacktraceBlockScanner, lines: list[str]) -> list:
    return [scanner.feed(line, line_no) for line_no, line in enumerate(lines, start=1)]

def test_lines_outside_blocks_pass_through():
    scanner = BacktraceBlockScanner()
    events = feed_all(scanner, ["hello", "world"])
    assert events == [PassthroughLine("hello"), PassthroughLine("world")]
    assert scanner.finish() is None

def test_block_is_collected_between_markers():
    lines = [
        "thread 'main' panicked at src/main.rs:12:5:",
        "stack backtrace:",
        "   0:     0x55a98f1f5a8c - demo::parse_config::h1b2c3d4e5f607182",
        "                               at /home/me/proj/src/main.rs:12:5",
        "   1:     0x55a98f1f3a15 - _start",
        "note: Some details are omitted",
    ]
    scanner = BacktraceBlockScanner()
    events = feed_all(scanner, lines)
    assert events[0] == PassthroughLine(lines[0])
    assert events[1] == AbsorbedLine()
    assert events[2] == AbsorbedLine()
    assert events[3] == AbsorbedLine()
    assert events[4] == CompletedBlock(BacktraceBlock(text="\n".join(lines[2:5]), first_line_no=3))
    assert events[5] == PassthroughLine(lines[5])
    assert not scanner.in_block

def test_null_pointer_frame_ends_block():
    scanner = BacktraceBlockScanner()
    events = feed_all(scanner, ["Stack backtrace:", "   0:                0x0 - <unknown>"])
    assert events[-1] == CompletedBlock(BacktraceBlock(text="   0:                0x0 - <unknown>", first_line_no=2))

def test_end_markers_are_ignored_outside_blocks():
    scanner = BacktraceBlockScanner()
    events = feed_all(scanner, ["   9:                0x0 - <unknown>", "main: _start"])
    assert all(isinstance(event, PassthroughLine) for event in events)

def test_unterminated_block_is_returned_by_finish():
    scanner = BacktraceBlockScanner()
    feed_all(scanner, ["stack backtrace:", "   0:     0x1 - main"])
    assert scanner.in_block
    assert scanner.finish() == BacktraceBlock(text="   0:     0x1 - main", first_line_no=2)
    assert not scanner.in_block
    assert scanner.finish() is None

def test_empty_unterminated_block_is_dropped():
    scanner = BacktraceBlockScanner()
    feed_all(scanner, ["stack backtrace:"])
    assert scanner.finish() is None

def test_configured_markers():
    markers = BlockMarkersConfiguration(start_markers=["BEGIN TRACE"], end_markers=[], end_suffixes=[" - main"])
    scanner = BacktraceBlockScanner(markers=markers)
    events = feed_all(scanner, ["stack backtrace:", "BEGIN TRACE", "   0:     0x1 - main", "after"])
    assert events[0] == PassthroughLine("stack backtrace:")
    assert events[2] == CompletedBlock(BacktraceBlock(text="   0:     0x1 - main", first_line_no=3))
    assert events[3] == PassthroughLine("after")

def test_multiple_blocks():
    scanner = BacktraceBlockScanner()
    lines = ["stack backtrace:", "   0:     0x1 - _start", "between", "stack backtrace:", "   0:     0x2 - _start"]
    events = feed_all(scanner, lines)
    completed = [event.block for event in events if isinstance(event, CompletedBlock)]
    assert completed == [
        BacktraceBlock(text="   0:     0x1 - _start", first_line_no=2),
        BacktraceBlock(text="   0:     0x2 - _start", first_line_no=5),
    ]
    assert events[2] == PassthroughLine("between")

"""
    Assemble a Backtrace from one delimited backtrace block.

    The block is the text between the "stack backtrace:" marker line and the end
    of the trace, one frame after another:

        "   0:     0x55a98f23062c - std::backtrace_rs::backtrace::libunwind::trace::h5d6d4a3f2c3b7a0e"
        "                               at /rustc/90c5418/library/std/src/../../backtrace/src/backtrace/libunwind.rs:93:5"
        "   1:     0x55a98f1f5a8c - demo::parse_config::h1b2c3d4e5f607182"
        ...
"""
from .backtrace import Backtrace, Entry
from .frame_parser import line_end, next_line_start, parse_frame
from .parse_error import ParseError
from .symbol_parser import DEFAULT_MAX_DEPTH

def _is_blank_line(text: str, pos: int) -> bool:
    return not text[pos:line_end(text, pos)].strip()

def assemble(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[list[Entry], ParseError|None]:
    """Parse frames until the end of `text` or the first frame that fails to parse.
    Returns the entries parsed so far and the failure, if any."""
    entries: list[Entry] = []
    pos = 0
    while pos < len(text):
        if _is_blank_line(text, pos):
            pos = next_line_start(text, pos)
            continue
        try:
            entry, pos = parse_frame(text, pos, max_depth)
        except ParseError as error:
            return entries, error
        entries.append(entry)
    return entries, None

def parse(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Backtrace:
    """Parse a backtrace block. A block that fails to parse yields no entries at all:
    the partial result is discarded and the ParseError is raised."""
    entries, error = assemble(text, max_depth)
    if error is not None:
        raise error
    return Backtrace(entries)

"""
    Delimit backtrace blocks within a stream of program output.

    Ordinary output lines pass through. A line containing a start marker
    (e.g. "stack backtrace:") opens a block; the following lines are collected
    until a line that looks like the final frame (e.g. one resolving to `_start`).
"""
from dataclasses import dataclass, field

from .configuration import BlockMarkersConfiguration

@dataclass
class BacktraceBlock:
    text: str
    first_line_no: int # 1-based stream line number of the first line of `text`

@dataclass
class PassthroughLine:
    text: str

@dataclass
class AbsorbedLine:
    pass

@dataclass
class CompletedBlock:
    block: BacktraceBlock

ScanEvent = PassthroughLine | AbsorbedLine | CompletedBlock

@dataclass
class BacktraceBlockScanner:
    markers: BlockMarkersConfiguration = field(default_factory=BlockMarkersConfiguration)
    _lines: list[str]|None = field(default=None, init=False, repr=False) # None when not inside a block
    _first_line_no: int = field(default=0, init=False, repr=False)

    @property
    def in_block(self) -> bool:
        return self._lines is not None

    def _is_start(self, line: str) -> bool:
        return any(marker in line for marker in self.markers.start_markers)

    def _is_end(self, line: str) -> bool:
        return (any(marker in line for marker in self.markers.end_markers)
            or any(line.endswith(suffix) for suffix in self.markers.end_suffixes))

    def _take_block(self) -> BacktraceBlock:
        assert self._lines is not None
        block = BacktraceBlock(text="\n".join(self._lines), first_line_no=self._first_line_no)
        self._lines = None
        return block

    def feed(self, line: str, line_no: int) -> ScanEvent:
        """Process one line (without its line terminator) at 1-based stream line `line_no`."""
        if self._lines is None:
            if self._is_start(line):
                self._lines = []
                self._first_line_no = line_no + 1
                return AbsorbedLine()
            return PassthroughLine(line)

        self._lines.append(line)
        if self._is_end(line.rstrip()):
            return CompletedBlock(self._take_block())
        return AbsorbedLine()

    def finish(self) -> BacktraceBlock|None:
        """At end of input, return the unterminated block, if any."""
        if self._lines is None or not self._lines:
            self._lines = None
            return None
        return self._take_block()

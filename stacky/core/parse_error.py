"""
    Backtrace parse errors

    "No location for this frame" is not an error: the location parser reports
    it by returning None. Every kind listed here aborts parsing of the whole
    backtrace block.
"""
from enum import Enum

class ParseErrorKind(Enum):
    MALFORMED_FRAME = "malformed-frame" # frame header doesn't match: bad index, pointer or separator
    UNBALANCED_SYMBOL = "unbalanced-symbol" # bracket mismatch or disallowed character in symbol text
    NUMERIC_OVERFLOW = "numeric-overflow" # line/column/pointer digits don't fit the required integer range
    MAX_NESTING_EXCEEDED = "max-nesting-exceeded" # symbol brackets nested deeper than the configured limit

class ParseError(Exception):
    """A failure to parse a backtrace block.

    `offset` is the character offset into the parsed block where the failure was
    detected, `remainder` is the unconsumed input starting at `offset`.
    """
    def __init__(self, kind: ParseErrorKind, message: str, source: str, offset: int):
        super().__init__(message)
        self.kind: ParseErrorKind = kind
        self.message: str = message
        self.offset: int = offset
        self.remainder: str = source[offset:]
        line_start = source.rfind("\n", 0, offset) + 1
        self.line: int = source.count("\n", 0, offset) + 1 # 1-based
        self.column: int = offset - line_start + 1 # 1-based

    @property
    def fragment(self) -> str:
        """the rest of the offending line, starting at the failure offset"""
        return self.remainder.split("\n", maxsplit=1)[0].rstrip("\r")

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message} (line {self.line}, column {self.column})"

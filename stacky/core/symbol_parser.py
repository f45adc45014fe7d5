"""
    Parse the symbol text of a frame header into a canonical function path.

    e.g. "core::ops::function::impls::<impl core::ops::function::FnOnce<A> for &F>::call_once::h92bf06c783fb5223"
    becomes "core::ops::function::impls::<impl core::ops::function::FnOnce<A> for &F>::call_once"

    Grammar:

        symbol  := segment ("::" segment)*
        segment := part+
        part    := leaf | group
        group   := "<" (leaf | group)* ">"
        leaf    := run of symbol characters

    At the top level a leaf stops at "::", so "::" separates segments. Inside a
    group "::" is ordinary leaf text: the group is rendered back out verbatim.
    The final segment is the compiler-generated hash and is dropped when there is
    more than one segment.
"""
from dataclasses import dataclass
import string

from .parse_error import ParseError, ParseErrorKind

DEFAULT_MAX_DEPTH = 64
# hard ceiling on max_depth, well below the interpreter recursion limit
MAX_DEPTH_LIMIT = 512

SEGMENT_SEPARATOR = "::"
RETURN_ARROW = "->"

# letters, digits, underscore and the decorations used by closure and impl syntax.
# the second group covers lifetimes, raw pointers, slices, tuples and closure suffixes,
# the third covers fn pointer return types, trait object bounds, associated types and `!`.
SYMBOL_CHARACTERS = frozenset(string.ascii_letters + string.digits + "_{} &,:" + "'*[]();.$#" + "-+=!")

@dataclass(frozen=True, slots=True)
class Leaf:
    text: str

@dataclass(frozen=True, slots=True)
class Branch:
    children: tuple['Leaf|Branch', ...]

Part = Leaf | Branch
Segment = tuple[Part, ...]

def render_part(part: Part) -> str:
    match part:
        case Leaf():
            return part.text
        case Branch():
            return "<" + "".join(render_part(child) for child in part.children) + ">"
    raise TypeError(f"unexpected symbol tree node {part!r}")

def render_segment(segment: Segment) -> str:
    return "".join(render_part(part) for part in segment)

class _SymbolReader:
    """Recursive descent over source[start:end] with an explicit nesting depth guard."""
    def __init__(self, source: str, start: int, end: int, max_depth: int):
        self.source = source
        self.pos = start
        self.end = end
        self.max_depth = min(max_depth, MAX_DEPTH_LIMIT)

    def _error(self, kind: ParseErrorKind, message: str, offset: int|None = None) -> ParseError:
        return ParseError(kind, message, self.source, self.pos if offset is None else offset)

    def _at_separator(self) -> bool:
        return self.source.startswith(SEGMENT_SEPARATOR, self.pos, self.end)

    def _read_leaf(self, top_level: bool) -> Leaf:
        start = self.pos
        while self.pos < self.end and self.source[self.pos] in SYMBOL_CHARACTERS:
            if top_level and self._at_separator():
                break
            if self.source.startswith(RETURN_ARROW, self.pos, self.end):
                self.pos += len(RETURN_ARROW) # the '>' of '->' does not close a group
                continue
            self.pos += 1
        return Leaf(self.source[start:self.pos])

    def _read_group(self, depth: int) -> Branch:
        if depth > self.max_depth:
            raise self._error(ParseErrorKind.MAX_NESTING_EXCEEDED, f"symbol brackets nested deeper than {self.max_depth} levels")
        open_offset = self.pos
        self.pos += 1 # consume '<'
        children: list[Part] = []
        while True:
            if self.pos >= self.end:
                raise self._error(ParseErrorKind.UNBALANCED_SYMBOL, "unmatched '<' in symbol", open_offset)
            c = self.source[self.pos]
            if c == ">":
                self.pos += 1
                return Branch(tuple(children))
            elif c == "<":
                children.append(self._read_group(depth + 1))
            elif c in SYMBOL_CHARACTERS:
                children.append(self._read_leaf(top_level=False))
            else:
                raise self._error(ParseErrorKind.UNBALANCED_SYMBOL, f"unexpected character {c!r} in symbol")

    def _read_segment(self) -> Segment:
        parts: list[Part] = []
        while self.pos < self.end:
            c = self.source[self.pos]
            if c == "<":
                parts.append(self._read_group(depth=1))
            elif c in SYMBOL_CHARACTERS and not self._at_separator():
                parts.append(self._read_leaf(top_level=True))
            else:
                break
        if not parts:
            raise self._error(ParseErrorKind.UNBALANCED_SYMBOL, "expected a symbol segment")
        return tuple(parts)

    def read_symbol(self) -> list[Segment]:
        segments = [self._read_segment()]
        while self.pos < self.end:
            if self._at_separator():
                self.pos += len(SEGMENT_SEPARATOR)
                segments.append(self._read_segment())
            elif self.source[self.pos] == ">":
                raise self._error(ParseErrorKind.UNBALANCED_SYMBOL, "unmatched '>' in symbol")
            else:
                raise self._error(ParseErrorKind.UNBALANCED_SYMBOL, f"unexpected character {self.source[self.pos]!r} in symbol")
        return segments

def parse_symbol_tree(source: str, start: int = 0, end: int|None = None, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Segment]:
    """Parse `source[start:end]` into its top-level segments, hash segment included."""
    return _SymbolReader(source, start, len(source) if end is None else end, max_depth).read_symbol()

def canonical_function_name(segments: list[Segment]) -> str:
    """Join top-level segments with '::', dropping the trailing hash segment if there is more than one segment."""
    if len(segments) > 1:
        segments = segments[:-1]
    return SEGMENT_SEPARATOR.join(render_segment(segment) for segment in segments)

def parse_symbol(source: str, start: int = 0, end: int|None = None, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Parse `source[start:end]` and return the canonical, hash-stripped function path."""
    return canonical_function_name(parse_symbol_tree(source, start, end, max_depth))

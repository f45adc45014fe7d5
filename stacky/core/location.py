from dataclasses import dataclass

@dataclass(frozen=True, slots=True)
class Location:
    """Represent a source position reported by a backtrace frame,
    e.g. `/home/me/proj/src/main.rs:12:5`.
    Also used to locate diagnostics within the input stream."""
    path: str
    line: int # 1-based
    column: int # 1-based

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"

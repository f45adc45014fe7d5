"""
    Structured backtrace

    A Backtrace is the ordered list of call frames parsed from one backtrace block,
    nearest-to-panic frame first. Entries are never reordered or de-duplicated.
"""
from dataclasses import dataclass, field
from typing import Any, Iterator
import json

from .location import Location
from .noise_filter import NoiseFilterConfiguration, is_noise

BACKTRACE_START_BANNER = "--- BACKTRACE START ---"
BACKTRACE_END_BANNER = "--- BACKTRACE END ------"

@dataclass(frozen=True, slots=True)
class Entry:
    function: str # canonical, hash-stripped symbol path
    location: Location|None = None

    def to_record(self) -> dict[str, Any]:
        location = None
        if self.location is not None:
            location = {
                "path": self.location.path,
                "line": self.location.line,
                "column": self.location.column,
            }
        return {"function": self.function, "location": location}

    def __str__(self) -> str:
        if self.location is None:
            return self.function
        return f"{self.function} [{self.location}]"

@dataclass
class Backtrace:
    entries: list[Entry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def has_location_under(self, prefix: str) -> bool:
        """True if any entry's location path starts with `prefix`.
        Plain string prefix match, not path-component aware."""
        return any(entry.location is not None and entry.location.path.startswith(prefix) for entry in self.entries)

    def prune_noise(self, noise: NoiseFilterConfiguration|None = None) -> None:
        """Remove noise entries in place, preserving the order of the remaining entries."""
        if noise is None:
            noise = NoiseFilterConfiguration()
        self.entries[:] = [entry for entry in self.entries if not is_noise(entry, noise)]

    def to_records(self) -> list[dict[str, Any]]:
        return [entry.to_record() for entry in self.entries]

    def to_json(self) -> str:
        return json.dumps(self.to_records())

    def render(self) -> str:
        """Multi-line human readable rendering for console display."""
        lines = ["", BACKTRACE_START_BANNER]
        lines.extend(str(entry) for entry in self.entries)
        lines.append(BACKTRACE_END_BANNER)
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.render()

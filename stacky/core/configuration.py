"""
    Configuration is a tree of pydantic models. It is loaded from JSON
    configuration files and then overridden by command line flags.
"""
import inspect
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .noise_filter import NoiseFilterConfiguration
from .symbol_parser import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT

class BlockMarkersConfiguration(BaseModel):
    """Markers that delimit a backtrace block within the input stream"""
    model_config = ConfigDict(
        validate_assignment=True)

    start_markers: list[str] = Field(default_factory=lambda: ["stack backtrace:", "Stack backtrace:"], description=inspect.cleandoc("""\
        A line containing any of these substrings starts a backtrace block.
        The marker line itself is not part of the block."""))
    end_markers: list[str] = Field(default_factory=lambda: ["0x0 - "], description=inspect.cleandoc("""\
        A block line containing any of these substrings is the final line of the block."""))
    end_suffixes: list[str] = Field(default_factory=lambda: [" - _start", ": _start"], description=inspect.cleandoc("""\
        A block line ending with any of these strings is the final line of the block."""))

class StackyConfiguration(BaseModel):
    """The root of the configuration tree"""
    model_config = ConfigDict(
        validate_assignment=True)

    prune_noise: bool = Field(default=True, description="Remove noise frames (runtime startup, library internals, frames without location) before display and notification.")
    max_nesting_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT, description="Maximum angle bracket nesting depth accepted in a frame symbol.")
    notify_function: str = Field(default="stacky_global", description="Name of the function that the notified consumer invokes with the backtrace records.")
    notify_cwd: str|None = Field(default=None, description="Only notify backtraces that have a location under this path prefix. Notify all backtraces if unset.")

    noise: NoiseFilterConfiguration = Field(default_factory=NoiseFilterConfiguration)
    markers: BlockMarkersConfiguration = Field(default_factory=BlockMarkersConfiguration)

# ---------------------------------------------------------------------------

def merge_config_data(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge `update` into a copy of `base`. Nested objects are merged,
    all other values (including lists) are replaced."""
    result = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_config_data(result[key], value)
        else:
            result[key] = value
    return result

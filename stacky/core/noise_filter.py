"""
    Noise frame predicate.

    A noise frame is uninformative to the user: runtime startup glue, C library
    internals, standard library sources, or a frame with no location at all.
"""
import inspect
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .backtrace import Entry

DEFAULT_FUNCTION_MARKERS = ("__libc", "start_thread", "__GI___clone3")
DEFAULT_THREAD_START_PATHS = ("_start",)
DEFAULT_PATH_MARKERS = ("/rustc/", "/sysdeps/")

class NoiseFilterConfiguration(BaseModel):
    """Substrings that mark a backtrace entry as noise"""
    model_config = ConfigDict(
        validate_assignment=True)

    function_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_FUNCTION_MARKERS), description=inspect.cleandoc("""\
        Entries whose function name contains any of these substrings are removed.
        Defaults cover C library entry points and thread start symbols."""))
    thread_start_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_THREAD_START_PATHS), description=inspect.cleandoc("""\
        Entries whose location path is exactly one of these strings are removed."""))
    path_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_PATH_MARKERS), description=inspect.cleandoc("""\
        Entries whose location path contains any of these substrings are removed.
        Defaults cover the compiler's standard library sources and glibc sources."""))

def is_noise(entry: 'Entry', noise: NoiseFilterConfiguration) -> bool:
    if any(marker in entry.function for marker in noise.function_markers):
        return True
    if entry.location is None:
        return True
    path = entry.location.path
    return (not path
        or path in noise.thread_start_paths
        or any(marker in path for marker in noise.path_markers))

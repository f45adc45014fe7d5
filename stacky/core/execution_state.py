from dataclasses import dataclass, field
import pathlib

from .backtrace import Backtrace
from .configuration import StackyConfiguration
from .logger import DiagnosticsLogger
from .parse_error import ParseError

@dataclass
class ExecutionState:
    """
        An ExecutionState is the overall state associated with a single run of
        scanning an input stream for backtraces.
    """
    stacky_version: str
    argv: list[str]
    log: DiagnosticsLogger
    input_name: str # "<stdin>" or the input file path, used to locate diagnostics
    config: StackyConfiguration = field(default_factory=StackyConfiguration)
    config_file_paths: list[pathlib.Path] = field(default_factory=list) # the config files, in the order that they were applied
    backtraces: list[Backtrace] = field(default_factory=list) # parsed (and pruned) backtraces, in input order
    parse_errors: list[ParseError] = field(default_factory=list)
    test_exfil: dict = field(default_factory=dict) # conduit for test inspection

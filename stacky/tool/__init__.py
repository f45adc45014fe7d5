"""
    Stacky command line tool: pass program output through, replacing
    backtrace blocks with a short, structured rendering and notifying
    external consumers of each parsed backtrace.

    Typical use: `RUST_BACKTRACE=full cargo run 2>&1 | stacky`
"""
import argparse
import asyncio
import pathlib
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, TextIO

from cancel_token import CancellationToken

from .. import __version__
from ..core.backtrace import Backtrace
from ..core.backtrace_parser import parse
from ..core.block_scanner import BacktraceBlock, BacktraceBlockScanner, PassthroughLine, AbsorbedLine, CompletedBlock
from ..core.execution_state import ExecutionState
from ..core.load_configuration import load_configuration
from ..core.location import Location
from ..core.logger import create_root_diagnostics_logger, log_levels
from ..core.notifier import Notifier, NotifierContext, JsonLinesNotifier, CallScriptNotifier, QueueSentinel, run_notifier_task
from ..core.parse_error import ParseError

class ExitStatus(Enum):
    SUCCESS = 0
    FAILURE = 1

# command line args ----------------------------------------------------------

def make_argument_parser() -> argparse.ArgumentParser:
    result = argparse.ArgumentParser(prog="stacky", description="Condense and forward program backtraces")
    result.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    result.add_argument("--no-default-config", help="disable loading the user config.json", action="store_true")
    result.add_argument("--config-file", help="specify additional config file(s)", required=False, default=[], action="append")
    result.add_argument("--no-prune", help="keep noise frames (runtime startup, library internals, frames without location)", action="store_true")
    result.add_argument("--noise-function-marker", help="treat frames whose function contains this text as noise (in addition to configured markers)", required=False, default=[], action="append")
    result.add_argument("--notify-file", help="append each backtrace to this file for an external consumer", required=False, default=None)
    result.add_argument("--notify-format", help="format of --notify-file records", choices=["json", "call"], required=False, default="json")
    result.add_argument("--notify-cwd", help="only notify backtraces with a location under this path prefix", required=False, default=None)

    log_level_choices = [level.lower() for level in log_levels]
    result.add_argument("--log-level", help="specify the minimum level of log messages to be printed", choices=log_level_choices, required=False, default="info")

    result.add_argument("filename", help="program output to scan (default: standard input)", nargs="?", default=None)
    return result

argument_parser = make_argument_parser()

# ----------------------------------------------------------------------------

@dataclass
class RunState:
    completed: bool
    result_code: int|None = None
    state: ExecutionState|None = None
    notifiers: list[Notifier]|None = None
    input_file: TextIO|None = None

def make_notifiers(command_line_args: argparse.Namespace) -> list[Notifier]:
    if not command_line_args.notify_file:
        return []
    notify_path = pathlib.Path(command_line_args.notify_file)
    match command_line_args.notify_format:
        case "call":
            return [CallScriptNotifier(notify_path)]
        case _:
            return [JsonLinesNotifier(notify_path)]

def run_phase_1(argv: Sequence[str]|None = None, test_exfil: dict|None = None) -> RunState:
    """synchronous setup phase: parse arguments, create logger, load configuration, open input."""
    if not argv:
        argv = sys.argv
    state_argv = list(argv)
    command_line_args = argument_parser.parse_args(args=argv[1:])

    log_level = log_levels.get(command_line_args.log_level.upper(), None)
    if not log_level:
        print(f"error: '{command_line_args.log_level}' is not a valid log level", file=sys.stderr, flush=True)
        return RunState(completed=True, result_code=ExitStatus.FAILURE.value)

    log = create_root_diagnostics_logger(initial_level=log_level)
    input_name = command_line_args.filename if command_line_args.filename else "<stdin>"
    state = ExecutionState(stacky_version=__version__, argv=state_argv, log=log, input_name=input_name)
    if test_exfil is not None:
        state.test_exfil = test_exfil
    state.test_exfil["state"] = state

    config, config_file_paths = load_configuration(
        [pathlib.Path(p) for p in command_line_args.config_file], log,
        use_default_config=not command_line_args.no_default_config)
    state.config = config
    state.config_file_paths = config_file_paths

    # command line flags override configuration files
    if command_line_args.no_prune:
        state.config.prune_noise = False
    if command_line_args.noise_function_marker:
        state.config.noise.function_markers = state.config.noise.function_markers + command_line_args.noise_function_marker
    if command_line_args.notify_cwd is not None:
        state.config.notify_cwd = command_line_args.notify_cwd
    if state.config.notify_cwd is not None and not command_line_args.notify_file:
        log.hint("notify-cwd-without-notify-file", f"notify_cwd '{state.config.notify_cwd}' has no effect without --notify-file")

    input_file = None
    if command_line_args.filename:
        try:
            input_file = open(command_line_args.filename, "rt", encoding="utf-8")
        except OSError as e:
            log.critical("error-opening-input", f"could not open input file '{command_line_args.filename}': {e}")
            return RunState(completed=True, state=state, result_code=ExitStatus.FAILURE.value)

    return RunState(completed=False, state=state, notifiers=make_notifiers(command_line_args), input_file=input_file)

# ----------------------------------------------------------------------------

def process_block(block: BacktraceBlock, state: ExecutionState) -> Backtrace|ParseError:
    """Parse and prune one backtrace block. Report the error and return it if the block fails to parse."""
    try:
        backtrace = parse(block.text, max_depth=state.config.max_nesting_depth)
    except ParseError as error:
        state.parse_errors.append(error)
        error_location = Location(path=state.input_name, line=block.first_line_no + error.line - 1, column=error.column)
        state.log.error("backtrace-parse-error", f"discarded backtrace. {error.kind.value}: {error.message}: '{error.fragment}'", error_location)
        return error

    entry_count = len(backtrace)
    if state.config.prune_noise:
        backtrace.prune_noise(state.config.noise)
    state.log.detail("parsed-backtrace", f"parsed backtrace with {entry_count} entries, {len(backtrace)} after pruning", Location(path=state.input_name, line=block.first_line_no, column=1))
    state.backtraces.append(backtrace)
    return backtrace

async def run_phase_2(run_state: RunState, input_stream: TextIO, output_stream: TextIO, cancellation_token: CancellationToken) -> int:
    """asynchronous phase: scan input, echo output, feed the notifier task, emit result code"""
    assert run_state.state is not None
    state = run_state.state
    scanner = BacktraceBlockScanner(markers=state.config.markers)
    queue: asyncio.Queue = asyncio.Queue()
    context = NotifierContext(state=state, config=state.config, log=state.log)
    notifier_task = asyncio.create_task(run_notifier_task(queue, run_state.notifiers or [], cancellation_token, context))

    def emit_backtrace(block: BacktraceBlock) -> None:
        match process_block(block, state):
            case Backtrace() as backtrace:
                output_stream.write(backtrace.render())
                output_stream.flush()
                queue.put_nowait(backtrace)
            case ParseError() as error:
                # lines from the failing one onward may be ordinary program output, pass them through
                unparsed_lines = block.text.split("\n")[error.line - 1:]
                state.log.detail("echo-unparsed-lines", f"passing through {len(unparsed_lines)} line(s) of the discarded backtrace", Location(path=state.input_name, line=block.first_line_no + error.line - 1, column=1))
                output_stream.write("".join(line + "\n" for line in unparsed_lines))
                output_stream.flush()

    try:
        line_no = 0
        while not cancellation_token.cancelled:
            raw_line = await asyncio.to_thread(input_stream.readline)
            if not raw_line: # end of input
                break
            line_no += 1
            line = raw_line.rstrip("\r\n")
            match scanner.feed(line, line_no):
                case PassthroughLine(text=text):
                    output_stream.write(text + "\n")
                    output_stream.flush()
                case AbsorbedLine():
                    state.log.debug(f"absorbed backtrace line: {line}", line=line_no)
                case CompletedBlock(block=block):
                    emit_backtrace(block)

        if unterminated_block := scanner.finish():
            state.log.detail("unterminated-backtrace", "input ended inside a backtrace block, parsing what was collected", Location(path=state.input_name, line=unterminated_block.first_line_no, column=1))
            emit_backtrace(unterminated_block)
    except Exception as ex:
        state.log.error("unhandled-exception", f"scanning halted unexpectedly. an unhandled exception occurred: {repr(ex)}")
        state.log.error_exception(ex)
    finally:
        queue.put_nowait(QueueSentinel())
        delivered_count = await notifier_task
        if run_state.notifiers:
            state.log.detail("notified", f"delivered {delivered_count} backtrace(s) to {len(run_state.notifiers)} notifier(s)")
        state.log.detail("run-summary", f"{len(state.backtraces)} backtrace(s), {len(state.parse_errors)} discarded, {state.log.error_count()} error(s), {state.log.warning_count()} warning(s)")

    if state.log.critical_count() == 0 and state.log.error_count() == 0:
        return ExitStatus.SUCCESS.value
    return ExitStatus.FAILURE.value

def main(argv: Sequence[str]|None = None, test_exfil: dict|None = None, input_stream: TextIO|None = None, output_stream: TextIO|None = None) -> int:
    run_state = run_phase_1(argv, test_exfil)
    if run_state.completed:
        assert run_state.result_code is not None
        return run_state.result_code

    try:
        if input_stream is None:
            input_stream = run_state.input_file if run_state.input_file else sys.stdin
        return asyncio.run(run_phase_2(run_state, input_stream, output_stream or sys.stdout, CancellationToken()))
    finally:
        if run_state.input_file:
            run_state.input_file.close()

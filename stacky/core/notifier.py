"""
    Notifiers hand parsed backtraces to an external consumer, typically an
    editor that shows the frames in a quickfix-style list.

    Notifiers run in their own asyncio task, fed by a queue, so that a slow
    consumer does not hold up passing program output through.
"""
import abc
import asyncio
import json
import pathlib
from dataclasses import dataclass

from cancel_token import CancellationToken

from .backtrace import Backtrace
from .configuration import StackyConfiguration
from .execution_state import ExecutionState
from .logger import DiagnosticsLogger

@dataclass
class NotifierContext:
    state: ExecutionState
    config: StackyConfiguration
    log: DiagnosticsLogger

def is_relevant(backtrace: Backtrace, config: StackyConfiguration) -> bool:
    """A backtrace is relevant if notify_cwd is unset, or any of its locations is under notify_cwd"""
    return config.notify_cwd is None or backtrace.has_location_under(config.notify_cwd)

def format_notify_call(function_name: str, backtrace: Backtrace) -> str:
    """Render `function_name('<records json>')`, a call the consumer evaluates as a script statement"""
    payload = backtrace.to_json().replace("\\", "\\\\").replace("'", "\\'")
    return f"{function_name}('{payload}')"

class Notifier(metaclass=abc.ABCMeta):
    """Base class for notifiers"""
    def __init__(self, name: str):
        self.name = name

    @abc.abstractmethod
    async def notify(self, backtrace: Backtrace, cancellation_token: CancellationToken, context: NotifierContext) -> None:
        pass

class _AppendingFileNotifier(Notifier):
    def __init__(self, name: str, file_path: pathlib.Path):
        super().__init__(name)
        self.file_path = file_path

    def _append_line(self, line: str) -> None:
        with open(self.file_path, "a", encoding="utf-8") as file:
            file.write(line + "\n")

    @abc.abstractmethod
    def format_line(self, backtrace: Backtrace, context: NotifierContext) -> str:
        pass

    async def notify(self, backtrace: Backtrace, cancellation_token: CancellationToken, context: NotifierContext) -> None:
        if not is_relevant(backtrace, context.config):
            context.log.detail(f"{self.name}: skipping backtrace with no location under '{context.config.notify_cwd}'")
            return
        if cancellation_token.cancelled:
            return
        await asyncio.to_thread(self._append_line, self.format_line(backtrace, context))
        context.log.detail(f"{self.name}: wrote backtrace with {len(backtrace)} entries", self.file_path)

class JsonLinesNotifier(_AppendingFileNotifier):
    """Append one JSON object per backtrace: {"function": <notify_function>, "backtrace": [records...]}"""
    def __init__(self, file_path: pathlib.Path):
        super().__init__("json-lines", file_path)

    def format_line(self, backtrace: Backtrace, context: NotifierContext) -> str:
        return json.dumps({"function": context.config.notify_function, "backtrace": backtrace.to_records()})

class CallScriptNotifier(_AppendingFileNotifier):
    """Append one `notify_function('<json>')` statement per backtrace"""
    def __init__(self, file_path: pathlib.Path):
        super().__init__("call-script", file_path)

    def format_line(self, backtrace: Backtrace, context: NotifierContext) -> str:
        return format_notify_call(context.config.notify_function, backtrace)

@dataclass
class QueueSentinel:
    pass

async def run_notifier_task(queue: asyncio.Queue[Backtrace|QueueSentinel], notifiers: list[Notifier], cancellation_token: CancellationToken, context: NotifierContext) -> int:
    """Deliver queued backtraces to every notifier until a QueueSentinel arrives.
    Return the number of backtraces delivered."""
    delivered_count = 0
    while True:
        item = await queue.get()
        if isinstance(item, QueueSentinel):
            return delivered_count
        if cancellation_token.cancelled:
            context.log.detail("notification cancelled, dropping queued backtrace")
            continue
        for notifier in notifiers:
            try:
                await notifier.notify(item, cancellation_token, context)
            except Exception as ex:
                context.log.error("notifier-exception", f"notifier '{notifier.name}' failed to deliver a backtrace: {repr(ex)}")
                context.log.debug_exception(ex)
        delivered_count += 1

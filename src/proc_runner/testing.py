"""In-memory CommandRunner for tests: records calls, plays back canned results."""

import threading
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from proc_runner.command_line import CommandLine
from proc_runner.runner import CommandOpts, CommandRunner, ExecutionResult


class OutputQueueExhaustedError(LookupError):
    """More commands were run than results were scripted. A bug in the test, not the code."""


@dataclass(frozen=True)
class Invocation:
    command_line: CommandLine
    cwd: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "command_line", CommandLine(self.command_line))
        object.__setattr__(self, "cwd", Path(self.cwd))


class TestCommandRunner(CommandRunner):
    """Records every invocation in call order and pops one scripted result per call.

    Safe to share across threads: the log and queue sit behind one lock.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, hostname: str = "local.example.com") -> None:
        self._hostname = hostname
        self._lock = threading.Lock()
        self._invocations: list[Invocation] = []
        self._outputs: deque[ExecutionResult] = deque()

    @classmethod
    def with_results(cls, results: Iterable[tuple[int, object]], **kwargs) -> "TestCommandRunner":
        """Build a runner from ``(exit_code, stdout)`` pairs."""
        runner = cls(**kwargs)
        for code, stdout in results:
            runner.push_result(code, stdout)
        return runner

    def push_result(self, returncode: int, stdout: object = "", stderr: object = "") -> None:
        result = ExecutionResult(
            returncode=returncode,
            stdout=str(stdout).encode("utf-8"),
            stderr=str(stderr).encode("utf-8"),
        )
        with self._lock:
            self._outputs.append(result)

    @property
    def invocations(self) -> list[Invocation]:
        with self._lock:
            return list(self._invocations)

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._outputs)

    def run_inner(self, command_line: CommandLine, cwd: Path, opts: CommandOpts) -> ExecutionResult:
        with self._lock:
            self._invocations.append(Invocation(command_line, cwd))
            if not self._outputs:
                raise OutputQueueExhaustedError(
                    f"No scripted output left for `{command_line}` "
                    f"({len(self._invocations)} commands issued)"
                )
            return self._outputs.popleft()

    def exec(self, command_line: CommandLine) -> None:
        return None

    def hostname(self) -> str:
        return self._hostname

"""Tests for testing.py — the recording/playback runner."""

import threading
from pathlib import Path

import pytest

from proc_runner.command_line import CommandLine, MissingProgramError
from proc_runner.runner import CommandFailedError, CommandOpts, CommandRunner
from proc_runner.testing import Invocation, OutputQueueExhaustedError, TestCommandRunner


def test_is_a_command_runner():
    assert isinstance(TestCommandRunner(), CommandRunner)


def test_scripted_results_in_order():
    runner = TestCommandRunner.with_results([(0, "ok"), (1, "bad")])

    first = runner.run_checked(CommandLine(["first", "arg"]), "/work")
    assert first.success
    assert first.stdout_text() == "ok"

    with pytest.raises(CommandFailedError) as exc_info:
        runner.run_checked(CommandLine(["second"]), "/other")
    assert "bad" in str(exc_info.value)
    assert exc_info.value.program == "second"
    assert exc_info.value.returncode == 1

    assert runner.invocations == [
        Invocation(CommandLine(["first", "arg"]), Path("/work")),
        Invocation(CommandLine(["second"]), Path("/other")),
    ]

    with pytest.raises(OutputQueueExhaustedError):
        runner.run(CommandLine(["third"]), "/work")


def test_exhausted_is_not_a_command_failure(fake_runner):
    with pytest.raises(OutputQueueExhaustedError) as exc_info:
        fake_runner.run_checked(CommandLine(["ls"]), "/")
    assert not isinstance(exc_info.value, CommandFailedError)
    # The attempt is still recorded
    assert len(fake_runner.invocations) == 1


def test_unchecked_nonzero(fake_runner):
    fake_runner.push_result(3, "partial", "warning")
    result = fake_runner.run(CommandLine(["x"]), "/")
    assert result.returncode == 3
    assert result.stdout == b"partial"
    assert result.stderr == b"warning"


def test_with_results_stringifies():
    runner = TestCommandRunner.with_results([(0, 42)])
    assert runner.run(CommandLine(["n"]), "/").stdout_text() == "42"


def test_opts_are_accepted(fake_runner):
    fake_runner.push_result(0, "")
    fake_runner.run_with_opts(CommandLine(["cat"]), "/", CommandOpts(stdin=b"abc"))
    assert fake_runner.remaining == 0


def test_invocation_snapshot_is_a_copy(fake_runner):
    fake_runner.push_result(0)
    fake_runner.run(CommandLine(["a"]), "/")
    snapshot = fake_runner.invocations
    snapshot.clear()
    assert len(fake_runner.invocations) == 1


def test_invocation_does_not_alias_caller(fake_runner):
    fake_runner.push_result(0)
    cmd = CommandLine(["a"])
    fake_runner.run(cmd, "/")
    cmd.push("b")
    assert fake_runner.invocations[0].command_line == ["a"]


def test_empty_command_line_not_recorded(fake_runner):
    with pytest.raises(MissingProgramError):
        fake_runner.run(CommandLine([]), "/")
    assert fake_runner.invocations == []


def test_exec_is_noop(fake_runner):
    assert fake_runner.exec(CommandLine(["anything"])) is None
    assert fake_runner.invocations == []


def test_hostname():
    assert TestCommandRunner().hostname() == "local.example.com"
    assert TestCommandRunner(hostname="box").hostname() == "box"


def test_with_results_accepts_hostname():
    runner = TestCommandRunner.with_results([], hostname="box")
    assert runner.hostname() == "box"
    assert runner.remaining == 0


def test_concurrent_use():
    runner = TestCommandRunner.with_results((0, str(i)) for i in range(200))
    outputs = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            out = runner.run(CommandLine(["w"]), "/").stdout_text()
            with lock:
                outputs.append(out)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outputs, key=int) == [str(i) for i in range(200)]
    assert len(runner.invocations) == 200
    assert runner.remaining == 0

"""Command runners — the single seam between callers and the OS.

Callers depend on ``CommandRunner``. ``DefaultCommandRunner`` spawns real
processes; ``proc_runner.testing.TestCommandRunner`` records calls and plays
back canned results instead.
"""

import abc
import os
import signal
import socket
import subprocess
from dataclasses import dataclass
from pathlib import Path

from proc_runner import log
from proc_runner.command_line import CommandLine
from proc_runner.env import EnvPolicy
from proc_runner.tee import Tee

ROOT_SYSTEMD_PATH = Path("/etc/systemd/user")


class MissingHomeError(RuntimeError):
    def __init__(self) -> None:
        super().__init__("Could not get $HOME!")


def format_status(returncode: int) -> str:
    """Render a returncode the way ``wait(2)`` reports it."""
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            return f"signal: {-returncode}"
        return f"signal: {-returncode} ({name})"
    return f"exit status: {returncode}"


class CommandFailedError(RuntimeError):
    """A checked command exited non-zero. Carries both captured streams."""

    def __init__(self, program: str, returncode: int, stdout: bytes, stderr: bytes) -> None:
        self.program = program
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command `{program}` failed with status `{format_status(returncode)}`\n"
            f"Stdout:\n{stdout.decode('utf-8', errors='replace')}\n"
            f"Stderr:\n{stderr.decode('utf-8', errors='replace')}"
        )


@dataclass
class CommandOpts:
    capture_stderr: bool = True
    stdin: bytes | None = None


@dataclass(frozen=True)
class ExecutionResult:
    """The outcome of a command."""

    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def stdout_text(self) -> str:
        """Decode stdout as UTF-8. Raises UnicodeDecodeError on bad bytes."""
        return self.stdout.decode("utf-8")


def _absolute(cwd) -> Path:
    path = Path(cwd)
    if not path.is_absolute():
        raise ValueError(f"Working directory must be absolute, got `{cwd}`")
    return path


def _config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    home = os.path.expanduser("~")
    if not os.path.isabs(home):
        raise MissingHomeError()
    return Path(home) / ".config"


class CommandRunner(abc.ABC):
    """Runs command lines. Subclasses implement ``run_inner`` and ``exec``."""

    def run(self, command_line: CommandLine, cwd) -> ExecutionResult:
        return self.run_with_opts(command_line, cwd, CommandOpts())

    def run_with_opts(self, command_line: CommandLine, cwd, opts: CommandOpts) -> ExecutionResult:
        """Run *command_line* in *cwd*. A non-zero exit is not an error here."""
        program = command_line.program()
        cwd = _absolute(cwd)
        log.info(f"Running `{command_line}` in `{cwd}`", err=True)
        result = self.run_inner(command_line, cwd, opts)
        log.debug(f"Completed `{program}` with {format_status(result.returncode)}")
        return result

    def run_checked(self, command_line: CommandLine, cwd) -> ExecutionResult:
        return self.run_checked_with_opts(command_line, cwd, CommandOpts())

    def run_checked_with_opts(
        self, command_line: CommandLine, cwd, opts: CommandOpts
    ) -> ExecutionResult:
        """Like ``run_with_opts``, but raise CommandFailedError on a non-zero exit."""
        program = command_line.program()
        result = self.run_with_opts(command_line, cwd, opts)
        if not result.success:
            raise CommandFailedError(program, result.returncode, result.stdout, result.stderr)
        return result

    @abc.abstractmethod
    def run_inner(self, command_line: CommandLine, cwd: Path, opts: CommandOpts) -> ExecutionResult:
        """Spawn (or pretend to) and wait. *cwd* is already validated."""

    @abc.abstractmethod
    def exec(self, command_line: CommandLine) -> None:
        """Hand this process over to *command_line*. Only returns by raising."""

    def hostname(self) -> str:
        return socket.gethostname()

    def root_systemd_path(self) -> Path:
        return ROOT_SYSTEMD_PATH

    def user_systemd_path(self) -> Path:
        return _config_dir() / "systemd" / "user"


class DefaultCommandRunner(CommandRunner):
    """Spawns real processes with a filtered environment.

    *env_policy* defaults to dropping ``DEFAULT_IGNORED_ENV_VARS``.
    *stderr_sink* is where teed stderr is echoed (``sys.stderr`` if None).
    """

    def __init__(self, env_policy: EnvPolicy | None = None, stderr_sink=None) -> None:
        self.env_policy = env_policy if env_policy is not None else EnvPolicy.deny()
        self.stderr_sink = stderr_sink

    def run_inner(self, command_line: CommandLine, cwd: Path, opts: CommandOpts) -> ExecutionResult:
        argv = [command_line.program()] + command_line.args()
        env = self.env_policy.apply()
        stdin = subprocess.PIPE if opts.stdin is not None else None

        if not opts.capture_stderr:
            proc = subprocess.Popen(
                argv, cwd=cwd, env=env, stdin=stdin, stdout=subprocess.PIPE, stderr=None
            )
            stdout, _ = proc.communicate(input=opts.stdin)
            return ExecutionResult(returncode=proc.returncode, stdout=stdout, stderr=b"")

        with Tee(self.stderr_sink) as tee:
            try:
                proc = subprocess.Popen(
                    argv, cwd=cwd, env=env, stdin=stdin, stdout=subprocess.PIPE, stderr=tee.fileno()
                )
            finally:
                # The child holds its own copy now; ours must go or the tee never sees EOF.
                tee.close_writer()
            stdout, _ = proc.communicate(input=opts.stdin)
            stderr = tee.get_output()
        return ExecutionResult(returncode=proc.returncode, stdout=stdout, stderr=stderr)

    def exec(self, command_line: CommandLine) -> None:
        program = command_line.program()
        log.info(f"Exec'ing `{command_line}`", err=True)
        os.execvpe(program, [program] + command_line.args(), self.env_policy.apply())

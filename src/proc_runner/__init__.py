try:
    from importlib.metadata import version

    __version__ = version("proc-runner")
except Exception:
    __version__ = "0.0.0"

from proc_runner.command_line import CommandLine, MissingProgramError
from proc_runner.env import DEFAULT_IGNORED_ENV_VARS, EnvMode, EnvPolicy
from proc_runner.runner import (
    CommandFailedError,
    CommandOpts,
    CommandRunner,
    DefaultCommandRunner,
    ExecutionResult,
    MissingHomeError,
)

__all__ = [
    "CommandFailedError",
    "CommandLine",
    "CommandOpts",
    "CommandRunner",
    "DEFAULT_IGNORED_ENV_VARS",
    "DefaultCommandRunner",
    "EnvMode",
    "EnvPolicy",
    "ExecutionResult",
    "MissingHomeError",
    "MissingProgramError",
    "__version__",
]

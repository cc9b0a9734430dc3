"""Load runner settings from .proc-runner.yaml."""

import os
from dataclasses import dataclass, field

import yaml

from proc_runner.env import DEFAULT_IGNORED_ENV_VARS, EnvMode, EnvPolicy
from proc_runner.runner import CommandOpts, DefaultCommandRunner

CONFIG_FILE = ".proc-runner.yaml"
CONFIG_ENV_VAR = "PROC_RUNNER_CONFIG"


class ConfigError(ValueError):
    pass


@dataclass
class RunnerConfig:
    env_mode: EnvMode = EnvMode.DENY
    env_vars: tuple[str, ...] = field(default_factory=lambda: DEFAULT_IGNORED_ENV_VARS)
    capture_stderr: bool = True
    verbose: bool = False

    def env_policy(self) -> EnvPolicy:
        if self.env_mode is EnvMode.ALLOW:
            return EnvPolicy.allow(self.env_vars)
        if self.env_mode is EnvMode.DENY:
            return EnvPolicy.deny(self.env_vars)
        return EnvPolicy.pass_through()

    def command_opts(self, stdin: bytes | None = None) -> CommandOpts:
        return CommandOpts(capture_stderr=self.capture_stderr, stdin=stdin)


def _parse_vars(value) -> tuple[str, ...]:
    """Accept ``[A, B]`` or ``"A,B"``."""
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    if isinstance(value, list):
        return tuple(str(v) for v in value)
    raise ConfigError(f"env.vars must be a list or comma-separated string, got {value!r}")


def _parse_mode(value) -> EnvMode:
    try:
        return EnvMode(str(value).lower())
    except ValueError:
        modes = ", ".join(m.value for m in EnvMode)
        raise ConfigError(f"Unknown env mode `{value}` (expected one of: {modes})") from None


def parse_config(data: dict | None) -> RunnerConfig:
    """Build a RunnerConfig from a parsed YAML document (None = all defaults)."""
    if data is None:
        return RunnerConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping")

    env = data.get("env") or {}
    if not isinstance(env, dict):
        raise ConfigError("`env` must be a mapping")

    mode = _parse_mode(env.get("mode", EnvMode.DENY.value))
    if "vars" in env and env["vars"] is not None:
        names = _parse_vars(env["vars"])
    elif mode is EnvMode.DENY:
        names = DEFAULT_IGNORED_ENV_VARS
    else:
        names = ()

    return RunnerConfig(
        env_mode=mode,
        env_vars=names,
        capture_stderr=bool(data.get("capture_stderr", True)),
        verbose=bool(data.get("verbose", False)),
    )


def resolve_path(path: str | None = None) -> str | None:
    """Find the config file to use.

    Order: explicit path → PROC_RUNNER_CONFIG env → ./.proc-runner.yaml → None.
    """
    if path:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path
    if os.path.isfile(CONFIG_FILE):
        return CONFIG_FILE
    return None


def load_config(path: str | None = None) -> RunnerConfig:
    resolved = resolve_path(path)
    if resolved is None:
        return RunnerConfig()
    try:
        with open(resolved) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {resolved}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {resolved}: {e}") from e
    return parse_config(data)


def build_runner(
    config: RunnerConfig, env_policy: EnvPolicy | None = None, stderr_sink=None
) -> DefaultCommandRunner:
    """A DefaultCommandRunner for *config*; *env_policy* overrides the configured one."""
    policy = env_policy if env_policy is not None else config.env_policy()
    return DefaultCommandRunner(env_policy=policy, stderr_sink=stderr_sink)

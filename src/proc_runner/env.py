"""Environment filtering for child processes."""

import enum
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

# Dropped from every child environment unless the runner says otherwise.
DEFAULT_IGNORED_ENV_VARS = ("SSH_AUTH_SOCK",)


def _names(names: Iterable[str]) -> frozenset[str]:
    if isinstance(names, (str, bytes)):
        # frozenset("SECRET") would be a set of single letters
        raise TypeError("Expected an iterable of variable names, not a single string")
    return frozenset(names)


class EnvMode(enum.Enum):
    PASS_THROUGH = "pass-through"
    DENY = "deny"
    ALLOW = "allow"


@dataclass(frozen=True)
class EnvPolicy:
    """Which ambient variables a child process gets to see.

    ``apply()`` always builds a fresh mapping; that mapping *is* the child's
    whole environment, so nothing outside the policy leaks through.
    """

    mode: EnvMode
    names: frozenset[str] = frozenset()

    @classmethod
    def pass_through(cls) -> "EnvPolicy":
        return cls(EnvMode.PASS_THROUGH)

    @classmethod
    def deny(cls, names: Iterable[str] = DEFAULT_IGNORED_ENV_VARS) -> "EnvPolicy":
        return cls(EnvMode.DENY, _names(names))

    @classmethod
    def allow(cls, names: Iterable[str]) -> "EnvPolicy":
        return cls(EnvMode.ALLOW, _names(names))

    def apply(self, environ: Mapping[str, str] | None = None) -> dict[str, str]:
        source = os.environ if environ is None else environ
        if self.mode is EnvMode.ALLOW:
            return {k: v for k, v in source.items() if k in self.names}
        if self.mode is EnvMode.DENY:
            return {k: v for k, v in source.items() if k not in self.names}
        return dict(source)

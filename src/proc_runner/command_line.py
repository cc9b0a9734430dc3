"""Argument vectors — program first, then its args."""

import os
from collections.abc import Iterable, Iterator


class MissingProgramError(ValueError):
    def __init__(self) -> None:
        super().__init__("At least one argument must be provided")


def _to_str(value) -> str:
    if isinstance(value, (bytes, os.PathLike)):
        # fsdecode, not str(): str(b"x") would be "b'x'"
        return os.fsdecode(value)
    return str(value)


def _to_list(values) -> list[str]:
    if isinstance(values, CommandLine):
        return list(values)
    if isinstance(values, (str, bytes)):
        # Iterating a str would split it into characters
        raise TypeError("Expected an iterable of arguments, not a single string")
    return [_to_str(v) for v in values]


class CommandLine:
    """A list of strings that can be pushed to / extended with any string-like values.

    Empty command lines are allowed, but ``program()`` and ``args()`` fail on them.
    """

    def __init__(self, items: Iterable = ()) -> None:
        self._items = _to_list(items)

    def push(self, value) -> None:
        """Add one argument onto this command line."""
        self._items.append(_to_str(value))

    def extend(self, values: Iterable) -> None:
        """Add every element of *values* (an iterable or another CommandLine)."""
        self._items.extend(_to_list(values))

    def clone_with(self, values: Iterable) -> "CommandLine":
        """Return a copy of this command line with *values* appended.

        The receiver is left untouched, so several variants can be derived
        from one shared base.
        """
        new = CommandLine(self._items)
        new.extend(values)
        return new

    def program(self) -> str:
        """The program to execute: the first argument."""
        if not self._items:
            raise MissingProgramError()
        return self._items[0]

    def args(self) -> list[str]:
        """Everything after ``program()``."""
        if not self._items:
            raise MissingProgramError()
        return self._items[1:]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, CommandLine):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    __hash__ = None

    def __str__(self) -> str:
        # For logs only; no shell escaping.
        return " ".join(self._items)

    def __repr__(self) -> str:
        return f"CommandLine({self._items!r})"

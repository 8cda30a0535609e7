"""
structupdate.errors — Exception hierarchy.

Every error raised by the library inherits from UpdateError, so callers can
catch the whole family at once.  The concrete classes also inherit from the
closest builtin (ValueError / TypeError) so generic handlers keep working.
"""

from typing import Any, Optional


class UpdateError(Exception):
    """Base error for all structupdate operations."""


class PathSyntaxError(UpdateError, ValueError):
    """A string path specifier could not be parsed."""

    def __init__(self, path: str, position: int, reason: str):
        self.path = path
        self.position = position
        self.reason = reason
        super().__init__(f"Property path syntax error at {position} in {path!r}: {reason}")


class CommandTypeError(UpdateError, TypeError):
    """A command was applied to a value of the wrong kind."""

    def __init__(self, op: Optional[str], key: Any, message: str):
        self.op = op
        self.key = key
        if op:
            message = f"{op} at {key!r}: {message}"
        elif key is not None:
            message = f"At {key!r}: {message}"
        super().__init__(message)


class AmbiguousCommandError(UpdateError, ValueError):
    """A command node is both an invocation and something else."""

    def __init__(self, keys: list, path: Optional[tuple] = None,
                 reason: str = "a node must hold exactly one command or only property keys"):
        self.keys = list(keys)
        self.path = tuple(path or ())
        path_str = "/".join(str(p) for p in self.path) or "(root)"
        super().__init__(f"Command node at {path_str} mixes keys {self.keys!r}; {reason}")

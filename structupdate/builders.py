"""
structupdate.builders — Fluent command builders.

Two flavours share one vocabulary (one method per command):

    Chain, bound to a source value:

        state = (chain(source)
                 .set("x.y.z", 3)
                 .splice("foo", 1, 2, 4, 5)
                 .merge("tom", {"tinna": 2})
                 .apply("bob", lambda i: i + 1)
                 .value())

    Macro, with no source, produces a reusable update function:

        rename = macro().set("name", "Bob").omit("nickname").build()
        rename({"name": "Alice", "nickname": "Al"})      → {"name": "Bob"}

Every method returns a NEW builder and leaves the one it was called on as
it was, so partially built chains can be shared and forked freely.
Commands only run when value() / with_diff() / the built function is
called.  Calls addressing the same path replace each other (last one
wins); see structupdate.combine.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

from .combine import merge_commands
from .commands import Op
from .config import UpdateOptions
from .core import CommandNode, SubTree, parse_commands, update, update_with_diff
from .diff import Diff
from .path import PathSpec, build_path_object


class CommandBuilder(ABC):
    """Accumulates a command tree, one method call per command."""
    __slots__ = ('_commands', '_options')

    def __init__(self, commands: Optional[CommandNode] = None,
                 options: Optional[UpdateOptions] = None):
        self._commands = commands if commands is not None else SubTree({})
        self._options = options

    @property
    def commands(self) -> CommandNode:
        """The accumulated (parsed) command tree."""
        return self._commands

    @abstractmethod
    def _fork(self, commands: CommandNode) -> "CommandBuilder":
        """Return a new builder of the same kind holding ``commands``."""

    def _add(self, op: Op, path: PathSpec, argument: Any):
        addition = build_path_object(path, {op.value: argument})
        return self._fork(merge_commands(self._commands, addition, self._options))

    def set(self, path: PathSpec, value: Any):
        return self._add(Op.SET, path, value)

    def push(self, path: PathSpec, item: Any):
        return self._add(Op.PUSH, path, item)

    def unshift(self, path: PathSpec, item: Any):
        return self._add(Op.UNSHIFT, path, item)

    def pop(self, path: PathSpec, assertion: Union[bool, Callable] = True):
        return self._add(Op.POP, path, assertion)

    def shift(self, path: PathSpec, assertion: Union[bool, Callable] = True):
        return self._add(Op.SHIFT, path, assertion)

    def remove_at(self, path: PathSpec, index: int):
        return self._add(Op.REMOVE_AT, path, index)

    def remove(self, path: PathSpec, item: Any):
        return self._add(Op.REMOVE, path, item)

    def splice(self, path: PathSpec, start: int, delete_count: int, *items: Any):
        return self._add(Op.SPLICE, path, [start, delete_count, *items])

    def map(self, path: PathSpec, callback: Callable):
        return self._add(Op.MAP, path, callback)

    def filter(self, path: PathSpec, callback: Callable):
        return self._add(Op.FILTER, path, callback)

    def reduce(self, path: PathSpec, *args: Any):
        return self._add(Op.REDUCE, path, args[0] if len(args) == 1 else list(args))

    def merge(self, path: PathSpec, extensions: dict):
        return self._add(Op.MERGE, path, extensions)

    def defaults(self, path: PathSpec, values: dict):
        return self._add(Op.DEFAULTS, path, values)

    def apply(self, path: PathSpec, factory: Callable):
        return self._add(Op.APPLY, path, factory)

    def omit(self, path: PathSpec, assertion: Union[bool, Callable] = True):
        return self._add(Op.OMIT, path, assertion)

    def compose_before(self, path: PathSpec, before: Callable):
        return self._add(Op.COMPOSE_BEFORE, path, before)

    def compose_after(self, path: PathSpec, after: Callable):
        return self._add(Op.COMPOSE_AFTER, path, after)


# ═══════════════════════════════════════════════════════════════════
#  CHAIN (bound to a source)
# ═══════════════════════════════════════════════════════════════════

class Chain(CommandBuilder):
    """A command builder bound to the value it will update."""
    __slots__ = ('_source',)

    def __init__(self, source: Any, commands: Optional[CommandNode] = None,
                 options: Optional[UpdateOptions] = None):
        super().__init__(commands, options)
        self._source = source

    def _fork(self, commands: CommandNode) -> "Chain":
        return Chain(self._source, commands, self._options)

    def value(self) -> Any:
        """Run the accumulated commands and return the new value."""
        return update(self._source, self._commands, self._options)

    def with_diff(self) -> tuple[Any, Diff]:
        """Run the accumulated commands and return ``(new_value, diff)``."""
        return update_with_diff(self._source, self._commands, self._options)

    def __repr__(self) -> str:
        return f"Chain({self._source!r}, {self._commands!r})"


def chain(source: Any, options: Optional[UpdateOptions] = None) -> Chain:
    """Start a fluent update of ``source``."""
    return Chain(source, options=options)


immutable = chain


# ═══════════════════════════════════════════════════════════════════
#  MACRO (no source)
# ═══════════════════════════════════════════════════════════════════

class Macro(CommandBuilder):
    """A command builder that produces update functions."""
    __slots__ = ()

    def _fork(self, commands: CommandNode) -> "Macro":
        return Macro(commands, self._options)

    def build(self) -> Callable[[Any], Any]:
        """Return ``fn(source) -> new_value``; ``fn.with_diff`` also reports the diff."""
        commands = self._commands
        options = self._options

        def run(source: Any) -> Any:
            return update(source, commands, options)

        run.with_diff = self.build_with_diff()
        return run

    def build_with_diff(self) -> Callable[[Any], tuple]:
        """Return ``fn(source) -> (new_value, diff)``."""
        commands = self._commands
        options = self._options

        def run_with_diff(source: Any) -> tuple:
            return update_with_diff(source, commands, options)

        return run_with_diff

    def __repr__(self) -> str:
        return f"Macro({self._commands!r})"


def macro(commands: Any = None, options: Optional[UpdateOptions] = None) -> Macro:
    """Start recording commands, optionally from an initial command tree."""
    if commands is not None:
        commands = parse_commands(commands, options)
    return Macro(commands, options)


builder = macro
update_builder = macro

"""
structupdate.core — The update/diff engine
==========================================

§1  COMMAND TREES
─────────────────

A command tree is a nested mapping that says WHERE to change a value and
HOW.  Every node is exactly one of two things:

    Invocation(op, argument)      {"$push": 4}
    SubTree({key: node, ...})     {"x": {"y": {"$push": 4}}}

A raw mapping is an invocation when it holds a reserved key ("$set",
"$push", … see structupdate.commands.Op) and a sub-tree otherwise.  Raw
trees are parsed ONCE, before anything runs, so a malformed tree never
produces a half-applied update.

A node that holds several reserved keys, or a reserved key next to
ordinary property keys, is ambiguous.  By default that is an error
(AmbiguousCommandError).  With UpdateOptions(strict=False) the first
reserved key in registry order wins and a warning is logged.


§2  THE WALK
────────────

update_with_diff(source, tree) walks source and tree together:

    Invocation at the root
        The source itself is the target.  It is placed in a throwaway
        one-key wrapper and the operation runs against that key.

    SubTree over a list / tuple
        Untouched elements are copied by reference.  Addressed elements
        are resolved recursively; removed ones are skipped.  Diffs are
        keyed by the SOURCE index.

    SubTree over a mapping
        Same, keyed by property name, preserving key order.

    Reconciliation
        Keys of the tree that the source does not have are applied
        afterwards, so commands can introduce new properties.  A sub-tree
        below a missing (or None, or scalar) value treats it as an empty
        mapping, so deep paths are created on demand.

Only containers on the path to a change are copied (clone-on-write); the
source is never mutated.  The diff is collected in the same pass.


§3  COMPLEXITY
──────────────

Each node of the command tree is visited once, and each container on a
touched path is shallow-copied once:  O(Σ width of touched containers).
Untouched subtrees are never entered.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from .commands import (
    CommandResult, Op,
    execute, get_value, is_array_like, is_mapping_like, lookup_op,
)
from .config import DEFAULT_OPTIONS, UpdateOptions
from .diff import Diff, is_empty
from .errors import AmbiguousCommandError, CommandTypeError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  COMMAND NODES
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Invocation:
    """A single operation applied at the node's location."""
    op: Op
    argument: Any

    def __repr__(self) -> str:
        return f"Invocation({self.op.value}, {self.argument!r})"


@dataclass(frozen=True, slots=True)
class SubTree:
    """Per-key command nodes applied below the node's location."""
    children: dict

    def __init__(self, children: dict):
        object.__setattr__(self, 'children', dict(children))

    def __len__(self) -> int:
        return len(self.children)

    def __repr__(self) -> str:
        if len(self.children) <= 3:
            return f"SubTree({self.children})"
        return f"SubTree({{...}} len={len(self.children)})"


CommandNode = Union[Invocation, SubTree]


def parse_commands(commands: Any, options: Optional[UpdateOptions] = None,
                   path: tuple = ()) -> CommandNode:
    """
    Turn a raw command mapping into a CommandNode tree.

    Already-parsed nodes (anywhere in the tree) are returned unchanged.
    Command arguments are never parsed: ``{"$merge": {"$set": 1}}`` merges
    a property literally named "$set".
    """
    if isinstance(commands, (Invocation, SubTree)):
        return commands

    options = options or DEFAULT_OPTIONS

    if not is_mapping_like(commands):
        raise CommandTypeError(
            None, path[-1] if path else None,
            f"command node must be a mapping, got {type(commands).__name__}"
        )

    ops = [op for op in Op if op.value in commands]
    if not ops:
        return SubTree({
            key: parse_commands(sub, options, path + (key,))
            for key, sub in commands.items()
        })

    extra = [key for key in commands if lookup_op(key) is None]
    if len(ops) > 1 or extra:
        keys = [op.value for op in ops] + extra
        if options.strict:
            raise AmbiguousCommandError(keys, path)
        logger.warning("Ambiguous command node at %s with keys %r, using %s",
                       "/".join(str(p) for p in path) or "(root)", keys, ops[0].value)

    op = ops[0]
    return Invocation(op, commands[op.value])


# ═══════════════════════════════════════════════════════════════════
#  ENGINE
# ═══════════════════════════════════════════════════════════════════

# Key of the throwaway container used for root-level invocations
_ROOT = "source"

_DIGITS = re.compile(r"^[0-9]+$")


def update_with_diff(source: Any, commands: Any,
                     options: Optional[UpdateOptions] = None) -> tuple[Any, Diff]:
    """
    Apply a command tree to ``source`` and report what changed.

    Returns ``(new_value, diff)``.  For a sub-tree the diff is a dict
    (empty when nothing changed).  For a root-level invocation it is that
    operation's own entry, or ``{}`` when the operation was a no-op.  A
    root-level ``$omit`` that fires yields ``None`` as the new value.

    ``source`` is never modified; unaddressed branches of the result are
    the very same objects as in ``source``.
    """
    options = options or DEFAULT_OPTIONS
    node = parse_commands(commands, options)

    if isinstance(node, Invocation):
        logger.debug("Root invocation %s", node.op.value)
        outcome = execute(node.op, {_ROOT: source}, _ROOT, node.argument)
        diff = outcome.diff if not is_empty(outcome.diff) else {}
        if outcome.removed:
            return None, diff
        return outcome.value, diff

    return _update_tree(source, node, options)


def update(source: Any, commands: Any, options: Optional[UpdateOptions] = None) -> Any:
    """Apply a command tree to ``source`` and return the new value."""
    value, _ = update_with_diff(source, commands, options)
    return value


def _resolve(container: Any, key: Any, node: CommandNode,
             options: UpdateOptions) -> CommandResult:
    """Compute the new ``container[key]`` for one node."""
    if isinstance(node, Invocation):
        return execute(node.op, container, key, node.argument)

    value, diff = _update_tree(get_value(container, key), node, options)
    return CommandResult(value, diff or None)


def _update_tree(source: Any, node: SubTree, options: UpdateOptions) -> tuple[Any, dict]:
    if is_array_like(source):
        return _update_sequence(source, node, options)
    if not is_mapping_like(source):
        # Missing, None and scalar targets become a fresh mapping
        source = {}
    return _update_mapping(source, node, options)


def _index_children(children: dict, options: UpdateOptions) -> dict:
    """Key list commands by int index; all-digit strings count as indices."""
    indexed: dict = {}
    spelled: dict = {}
    for key, child in children.items():
        if isinstance(key, str) and _DIGITS.match(key):
            index = int(key)
        elif type(key) is int:
            index = key
        else:
            raise CommandTypeError(None, key, "list elements can only be addressed by non-negative int index")

        if index in indexed:
            keys = [spelled[index], key]
            if options.strict:
                raise AmbiguousCommandError(keys, reason="they address the same list index")
            logger.warning("Keys %r address the same list index, using %r", keys, spelled[index])
            continue
        indexed[index] = child
        spelled[index] = key
    return indexed


def _update_sequence(source: Any, node: SubTree, options: UpdateOptions) -> tuple[Any, dict]:
    children = _index_children(node.children, options)
    result: list = []
    diff: dict = {}

    for index, item in enumerate(source):
        child = children.get(index)
        if child is None:
            result.append(item)
            continue

        outcome = _resolve(source, index, child, options)
        if not outcome.removed:
            result.append(outcome.value)
        if not is_empty(outcome.diff):
            diff[index] = outcome.diff

    # Indices past the end of the source
    for index in sorted(k for k in children if k >= len(source) or k < 0):
        if index < 0:
            raise CommandTypeError(None, index, "list elements can only be addressed by non-negative int index")

        outcome = _resolve(source, index, children[index], options)
        if not is_empty(outcome.diff):
            diff[index] = outcome.diff
        if outcome.removed:
            continue
        while len(result) < index:
            result.append(options.pad_value)
        result.append(outcome.value)

    if isinstance(source, tuple):
        return tuple(result), diff
    return result, diff


def _update_mapping(source: Any, node: SubTree, options: UpdateOptions) -> tuple[dict, dict]:
    children = node.children
    result: dict = {}
    diff: dict = {}

    for key, value in source.items():
        if key not in children:
            result[key] = value
            continue

        outcome = _resolve(source, key, children[key], options)
        if not outcome.removed:
            result[key] = outcome.value
        if not is_empty(outcome.diff):
            diff[key] = outcome.diff

    # Properties introduced by the command tree
    for key, child in children.items():
        if key in source:
            continue

        outcome = _resolve(source, key, child, options)
        if not outcome.removed:
            result[key] = outcome.value
        if not is_empty(outcome.diff):
            diff[key] = outcome.diff

    return result, diff

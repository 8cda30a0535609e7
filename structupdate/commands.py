"""
structupdate.commands — The command table.

Every update operation is a pure function

    fn(container, key, argument) -> CommandResult

that reads ``container[key]``, computes the replacement value and the diff
entry describing the change, and never touches ``container`` itself.  The
engine decides where the result goes; the table knows nothing about
traversal.

The set of operations is closed.  ``Op`` enumerates them in REGISTRY ORDER,
which is also the tie-break order used when a command node holds several
reserved keys and the caller has opted out of strict parsing:

    set, push, unshift, pop, shift, removeAt, remove, splice,
    map, filter, reduce, merge, defaults, apply, omit,
    composeBefore, composeAfter
"""

import functools
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .diff import ChangeKind, Diff, DiffEntry, Splice
from .errors import CommandTypeError


# ═══════════════════════════════════════════════════════════════════
#  OPERATION NAMES
# ═══════════════════════════════════════════════════════════════════

class Op(Enum):
    """Reserved command keys, in registry order."""
    SET = "$set"
    PUSH = "$push"
    UNSHIFT = "$unshift"
    POP = "$pop"
    SHIFT = "$shift"
    REMOVE_AT = "$removeAt"
    REMOVE = "$remove"
    SPLICE = "$splice"
    MAP = "$map"
    FILTER = "$filter"
    REDUCE = "$reduce"
    MERGE = "$merge"
    DEFAULTS = "$defaults"
    APPLY = "$apply"
    OMIT = "$omit"
    COMPOSE_BEFORE = "$composeBefore"
    COMPOSE_AFTER = "$composeAfter"

    @property
    def short_name(self) -> str:
        """The command key without its ``$`` prefix."""
        return self.value[1:]


COMMAND_KEYS = tuple(op.value for op in Op)
_BY_KEY = {op.value: op for op in Op}


def lookup_op(key: Any) -> Optional[Op]:
    """Return the Op for a reserved key, or None for an ordinary property."""
    if not isinstance(key, str):
        return None
    return _BY_KEY.get(key)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """
    Outcome of one operation.

    ``removed`` tells the engine to leave the key out of the result
    container; ``value`` is meaningless in that case.
    """
    value: Any
    diff: Optional[Diff] = None
    removed: bool = False


# ═══════════════════════════════════════════════════════════════════
#  VALUE KINDS
# ═══════════════════════════════════════════════════════════════════

def is_array_like(value: Any) -> bool:
    """Lists and tuples.  Strings and bytes are leaves, not arrays."""
    return isinstance(value, (list, tuple))


def is_mapping_like(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_container(value: Any) -> bool:
    return is_array_like(value) or is_mapping_like(value)


def same_value(a: Any, b: Any) -> bool:
    """
    Strict sameness: identity for containers and objects, equality for
    leaves of the exact same type.

    The exact-type check keeps bools apart from ints: in Python
    ``True == 1``, but replacing ``1`` with ``True`` is still a change.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if is_container(a) or callable(a):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        # Element-wise __eq__ (array types) has no single truth value.
        return False


def has_key(container: Any, key: Any) -> bool:
    """True when ``container[key]`` exists as an own entry."""
    if is_array_like(container):
        return type(key) is int and 0 <= key < len(container)
    if is_mapping_like(container):
        return key in container
    return False


def get_value(container: Any, key: Any) -> Any:
    """``container[key]``, or None when the entry does not exist."""
    if has_key(container, key):
        return container[key]
    return None


def _rebuild(original: Any, items: list) -> Any:
    """Return ``items`` in the same sequence type as ``original``."""
    if isinstance(original, tuple):
        return tuple(items)
    return items


def _require_array(op: Op, container: Any, key: Any) -> Any:
    array = get_value(container, key)
    if not is_array_like(array):
        raise CommandTypeError(
            op.value, key,
            f"target must be a list or tuple, got {type(array).__name__}"
        )
    return array


def _require_callable(op: Op, key: Any, fn: Any, what: str) -> None:
    if not callable(fn):
        raise CommandTypeError(op.value, key, f"{what} must be callable, got {type(fn).__name__}")


def _asserted(assertion: Any, value: Any) -> bool:
    """An assertion holds when it is literally True or a predicate returning truthy."""
    if assertion is True:
        return True
    return callable(assertion) and bool(assertion(value))


def _value_entry(container: Any, key: Any, old_value: Any, new_value: Any) -> DiffEntry:
    kind = ChangeKind.CHANGE if has_key(container, key) else ChangeKind.ADD
    return DiffEntry(kind, old_value, new_value)


def _splice_entry(old: Any, new: Any, index: int, delete_count: int, insertions=()) -> DiffEntry:
    return DiffEntry(ChangeKind.CHANGE, old, new, Splice(index, delete_count, insertions))


# ═══════════════════════════════════════════════════════════════════
#  OPERATIONS
# ═══════════════════════════════════════════════════════════════════

def _set(container: Any, key: Any, new_value: Any) -> CommandResult:
    old_value = get_value(container, key)
    if has_key(container, key) and same_value(new_value, old_value):
        return CommandResult(new_value)
    return CommandResult(new_value, _value_entry(container, key, old_value, new_value))


def _push(container: Any, key: Any, item: Any) -> CommandResult:
    array = _require_array(Op.PUSH, container, key)
    new_value = _rebuild(array, list(array) + [item])
    return CommandResult(new_value, _splice_entry(array, new_value, len(array), 0, [item]))


def _unshift(container: Any, key: Any, item: Any) -> CommandResult:
    array = _require_array(Op.UNSHIFT, container, key)
    new_value = _rebuild(array, [item] + list(array))
    return CommandResult(new_value, _splice_entry(array, new_value, 0, 0, [item]))


def _pop(container: Any, key: Any, assertion: Any) -> CommandResult:
    array = _require_array(Op.POP, container, key)
    if not array or not _asserted(assertion, array):
        return CommandResult(array)
    new_value = array[:-1]
    return CommandResult(new_value, _splice_entry(array, new_value, len(array), 1))


def _shift(container: Any, key: Any, assertion: Any) -> CommandResult:
    array = _require_array(Op.SHIFT, container, key)
    if not array or not _asserted(assertion, array):
        return CommandResult(array)
    new_value = array[1:]
    # The splice index mirrors $pop; consumers rely on the reported shape.
    return CommandResult(new_value, _splice_entry(array, new_value, len(array), 1))


def _remove_at(container: Any, key: Any, index: Any) -> CommandResult:
    array = _require_array(Op.REMOVE_AT, container, key)
    if type(index) is not int:
        raise CommandTypeError(Op.REMOVE_AT.value, key, f"index must be an int, got {type(index).__name__}")
    if index < 0 or index >= len(array):
        return CommandResult(array)
    new_value = array[:index] + array[index + 1:]
    return CommandResult(new_value, _splice_entry(array, new_value, index, 1))


def _remove(container: Any, key: Any, item: Any) -> CommandResult:
    array = _require_array(Op.REMOVE, container, key)
    index = next((i for i, x in enumerate(array) if same_value(x, item)), -1)
    if index == -1:
        return CommandResult(array)
    new_value = array[:index] + array[index + 1:]
    return CommandResult(new_value, _splice_entry(array, new_value, index, 1))


def _splice(container: Any, key: Any, args: Any) -> CommandResult:
    array = _require_array(Op.SPLICE, container, key)
    if not is_array_like(args) or not args:
        raise CommandTypeError(Op.SPLICE.value, key, "argument must be [start, delete_count, *items]")

    start = args[0]
    if type(start) is not int:
        raise CommandTypeError(Op.SPLICE.value, key, f"start must be an int, got {type(start).__name__}")
    if start < 0:
        start = max(len(array) + start, 0)
    start = min(start, len(array))

    delete_count = args[1] if len(args) > 1 else len(array) - start
    if type(delete_count) is not int:
        raise CommandTypeError(Op.SPLICE.value, key,
                               f"delete_count must be an int, got {type(delete_count).__name__}")
    delete_count = max(delete_count, 0)
    items = list(args[2:])

    new_value = _rebuild(array, list(array[:start]) + items + list(array[start + delete_count:]))
    return CommandResult(new_value, _splice_entry(array, new_value, start, delete_count, items))


def _map(container: Any, key: Any, callback: Callable) -> CommandResult:
    array = _require_array(Op.MAP, container, key)
    _require_callable(Op.MAP, key, callback, "callback")
    new_value = _rebuild(array, [callback(item) for item in array])
    return CommandResult(new_value, DiffEntry(ChangeKind.CHANGE, array, new_value))


def _filter(container: Any, key: Any, callback: Callable) -> CommandResult:
    array = _require_array(Op.FILTER, container, key)
    _require_callable(Op.FILTER, key, callback, "callback")
    new_value = _rebuild(array, [item for item in array if callback(item)])
    return CommandResult(new_value, DiffEntry(ChangeKind.CHANGE, array, new_value))


def _reduce(container: Any, key: Any, args: Any) -> CommandResult:
    array = _require_array(Op.REDUCE, container, key)

    # reduce(fn) or reduce([fn, initial])
    if callable(args):
        new_value = functools.reduce(args, array)
    elif is_array_like(args) and len(args) == 2 and callable(args[0]):
        new_value = functools.reduce(args[0], array, args[1])
    else:
        raise CommandTypeError(Op.REDUCE.value, key, "argument must be a reducer or [reducer, initial]")

    return CommandResult(new_value, DiffEntry(ChangeKind.CHANGE, array, new_value))


def _mapping_target(op: Op, container: Any, key: Any, argument: Any) -> Mapping:
    target = get_value(container, key)
    if target is None:
        target = {}
    if not is_mapping_like(target):
        raise CommandTypeError(op.value, key, f"target must be a mapping, got {type(target).__name__}")
    if not is_mapping_like(argument):
        raise CommandTypeError(op.value, key, f"argument must be a mapping, got {type(argument).__name__}")
    return target


def _merge(container: Any, key: Any, extensions: Mapping) -> CommandResult:
    target = _mapping_target(Op.MERGE, container, key, extensions)
    new_value = dict(target)
    diff: dict = {}

    for prop, new_prop in extensions.items():
        old_prop = target.get(prop)
        if prop in target and same_value(new_prop, old_prop):
            continue
        new_value[prop] = new_prop
        kind = ChangeKind.CHANGE if prop in target else ChangeKind.ADD
        diff[prop] = DiffEntry(kind, old_prop, new_prop)

    return CommandResult(new_value, diff or None)


def _defaults(container: Any, key: Any, defaults: Mapping) -> CommandResult:
    target = _mapping_target(Op.DEFAULTS, container, key, defaults)
    new_value = dict(target)
    diff: dict = {}

    for prop, value in defaults.items():
        if prop in new_value:
            continue
        new_value[prop] = value
        diff[prop] = DiffEntry(ChangeKind.ADD, None, value)

    return CommandResult(new_value, diff or None)


def _apply(container: Any, key: Any, factory: Callable) -> CommandResult:
    _require_callable(Op.APPLY, key, factory, "factory")
    old_value = get_value(container, key)
    new_value = factory(old_value)
    return CommandResult(new_value, _value_entry(container, key, old_value, new_value))


def _omit(container: Any, key: Any, assertion: Any) -> CommandResult:
    if not has_key(container, key):
        # Nothing to remove; an index past the end stays absent too
        return CommandResult(None, removed=True)
    value = container[key]
    if _asserted(assertion, value):
        return CommandResult(None, DiffEntry(ChangeKind.REMOVE, value, None), removed=True)
    return CommandResult(value)


def _compose_before(container: Any, key: Any, before: Callable) -> CommandResult:
    fn = get_value(container, key)
    _require_callable(Op.COMPOSE_BEFORE, key, fn, "target")
    _require_callable(Op.COMPOSE_BEFORE, key, before, "wrapper")

    @functools.wraps(fn)
    def composed(*args, **kwargs):
        return fn(before(*args, **kwargs))

    return CommandResult(composed, DiffEntry(ChangeKind.CHANGE, fn, composed))


def _compose_after(container: Any, key: Any, after: Callable) -> CommandResult:
    fn = get_value(container, key)
    _require_callable(Op.COMPOSE_AFTER, key, fn, "target")
    _require_callable(Op.COMPOSE_AFTER, key, after, "wrapper")

    @functools.wraps(fn)
    def composed(*args, **kwargs):
        return after(fn(*args, **kwargs))

    return CommandResult(composed, DiffEntry(ChangeKind.CHANGE, fn, composed))


# ═══════════════════════════════════════════════════════════════════
#  THE TABLE
# ═══════════════════════════════════════════════════════════════════

COMMANDS: dict[Op, Callable[[Any, Any, Any], CommandResult]] = {
    Op.SET: _set,
    Op.PUSH: _push,
    Op.UNSHIFT: _unshift,
    Op.POP: _pop,
    Op.SHIFT: _shift,
    Op.REMOVE_AT: _remove_at,
    Op.REMOVE: _remove,
    Op.SPLICE: _splice,
    Op.MAP: _map,
    Op.FILTER: _filter,
    Op.REDUCE: _reduce,
    Op.MERGE: _merge,
    Op.DEFAULTS: _defaults,
    Op.APPLY: _apply,
    Op.OMIT: _omit,
    Op.COMPOSE_BEFORE: _compose_before,
    Op.COMPOSE_AFTER: _compose_after,
}


def execute(op: Op, container: Any, key: Any, argument: Any) -> CommandResult:
    """Run one operation against ``container[key]``."""
    return COMMANDS[op](container, key, argument)

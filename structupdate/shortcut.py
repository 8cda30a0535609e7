"""
structupdate.shortcut — One function per command.

Every shortcut takes the source value, a path specifier and the command
argument(s), and returns the updated value:

    set({"x": [1, 2, 3]}, "x[1]", 9)        → {"x": [1, 9, 3]}
    push(state, ["todos"], item)
    omit(config, "debug")

A path of None targets the source itself:

    push([1, 2, 3], None, 4)                 → [1, 2, 3, 4]

Note: this module deliberately shadows the builtins ``set``, ``map`` and
``filter``; import it as a module (``from structupdate import shortcut``)
or import the names you need.
"""

from typing import Any, Callable, Union

from .commands import Op
from .core import update
from .path import PathSpec, build_path_object


def _run(source: Any, path: PathSpec, op: Op, argument: Any) -> Any:
    return update(source, build_path_object(path, {op.value: argument}))


def set(source: Any, path: PathSpec, value: Any) -> Any:
    """Replace the value at ``path``."""
    return _run(source, path, Op.SET, value)


def push(source: Any, path: PathSpec, item: Any) -> Any:
    """Append ``item`` to the list at ``path``."""
    return _run(source, path, Op.PUSH, item)


def unshift(source: Any, path: PathSpec, item: Any) -> Any:
    """Prepend ``item`` to the list at ``path``."""
    return _run(source, path, Op.UNSHIFT, item)


def pop(source: Any, path: PathSpec, assertion: Union[bool, Callable] = True) -> Any:
    """Drop the last element of the list at ``path`` if ``assertion`` holds."""
    return _run(source, path, Op.POP, assertion)


def shift(source: Any, path: PathSpec, assertion: Union[bool, Callable] = True) -> Any:
    """Drop the first element of the list at ``path`` if ``assertion`` holds."""
    return _run(source, path, Op.SHIFT, assertion)


def remove_at(source: Any, path: PathSpec, index: int) -> Any:
    return _run(source, path, Op.REMOVE_AT, index)


def remove(source: Any, path: PathSpec, item: Any) -> Any:
    return _run(source, path, Op.REMOVE, item)


def splice(source: Any, path: PathSpec, start: int, delete_count: int, *items: Any) -> Any:
    """``list.splice`` semantics: remove ``delete_count`` from ``start``, insert ``items``."""
    return _run(source, path, Op.SPLICE, [start, delete_count, *items])


def map(source: Any, path: PathSpec, callback: Callable) -> Any:
    return _run(source, path, Op.MAP, callback)


def filter(source: Any, path: PathSpec, callback: Callable) -> Any:
    return _run(source, path, Op.FILTER, callback)


def reduce(source: Any, path: PathSpec, *args: Any) -> Any:
    """
    Fold the list at ``path`` into a single value.

        reduce(state, "x", operator.add)          # no initial value
        reduce(state, "x", operator.sub, 10)      # with initial value
    """
    argument = args[0] if len(args) == 1 else list(args)
    return _run(source, path, Op.REDUCE, argument)


def merge(source: Any, path: PathSpec, extensions: dict) -> Any:
    """Shallow-merge ``extensions`` into the mapping at ``path``."""
    return _run(source, path, Op.MERGE, extensions)


def defaults(source: Any, path: PathSpec, values: dict) -> Any:
    """Fill keys missing from the mapping at ``path``."""
    return _run(source, path, Op.DEFAULTS, values)


def apply(source: Any, path: PathSpec, factory: Callable) -> Any:
    """Replace the value at ``path`` with ``factory(old_value)``."""
    return _run(source, path, Op.APPLY, factory)


def omit(source: Any, path: PathSpec, assertion: Union[bool, Callable] = True) -> Any:
    """Remove the property at ``path`` if ``assertion`` holds."""
    return _run(source, path, Op.OMIT, assertion)


def compose_before(source: Any, path: PathSpec, before: Callable) -> Any:
    """Replace the function at ``path`` with ``fn(before(...))``."""
    return _run(source, path, Op.COMPOSE_BEFORE, before)


def compose_after(source: Any, path: PathSpec, after: Callable) -> Any:
    """Replace the function at ``path`` with ``after(fn(...))``."""
    return _run(source, path, Op.COMPOSE_AFTER, after)


def apply_with(source: Any, path: PathSpec,
               selectors: Union[Callable, list], factory: Callable) -> Any:
    """
    Like ``apply``, with extra inputs pulled from the whole source.

    Each selector receives ``source``; the factory is called as
    ``factory(*selected, old_value)``:

        apply_with(state, "total", lambda s: s["items"],
                   lambda items, total: total + len(items))
    """
    if callable(selectors):
        selectors = [selectors]
    selected = [select(source) for select in selectors]
    return _run(source, path, Op.APPLY, lambda old: factory(*selected, old))

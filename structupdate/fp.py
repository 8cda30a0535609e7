"""
structupdate.fp — Point-free variants of the shortcuts.

Each function takes the path and command arguments and returns an updater
waiting for the source:

    bump = fp.apply("count", lambda n: n + 1)
    bump({"count": 1})                       → {"count": 2}

Handy in pipelines and reducers:

    functools.reduce(lambda s, f: f(s), [fp.push("log", "a"), fp.omit("tmp")], state)
"""

from typing import Any, Callable

from . import shortcut


def _curry(fn: Callable) -> Callable:
    def curried(*args: Any) -> Callable[[Any], Any]:
        return lambda source: fn(source, *args)

    curried.__name__ = fn.__name__
    curried.__qualname__ = fn.__name__
    curried.__doc__ = (
        f"Build an updater for ``shortcut.{fn.__name__}``; "
        f"call it with the source to get the new value."
    )
    return curried


set = _curry(shortcut.set)
push = _curry(shortcut.push)
unshift = _curry(shortcut.unshift)
pop = _curry(shortcut.pop)
shift = _curry(shortcut.shift)
remove_at = _curry(shortcut.remove_at)
remove = _curry(shortcut.remove)
splice = _curry(shortcut.splice)
map = _curry(shortcut.map)
filter = _curry(shortcut.filter)
reduce = _curry(shortcut.reduce)
merge = _curry(shortcut.merge)
defaults = _curry(shortcut.defaults)
apply = _curry(shortcut.apply)
omit = _curry(shortcut.omit)
compose_before = _curry(shortcut.compose_before)
compose_after = _curry(shortcut.compose_after)
apply_with = _curry(shortcut.apply_with)

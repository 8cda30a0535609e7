"""
structupdate.diff — The diff model.

An update reports what it changed as a DIFF TREE that mirrors the touched
part of the command tree:

    update_with_diff({"a": {"b": 1}}, {"a": {"b": {"$set": 2}}})
        → ({"a": {"b": 2}},
           {"a": {"b": DiffEntry(CHANGE, old_value=1, new_value=2)}})

Leaves are DiffEntry objects.  Inner nodes are plain dicts keyed by the
property name or list index that led to the change.  A key only appears
when something below it actually changed, so an empty dict means "no-op".

Positional list operations (push, unshift, pop, shift, removeAt, remove,
splice) also carry a Splice describing the equivalent list.splice call.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Union


class ChangeKind(Enum):
    """What happened to a single property."""
    ADD = "add"         # Key did not exist before
    CHANGE = "change"   # Key existed and now holds a different value
    REMOVE = "remove"   # Key was dropped from its container


@dataclass(frozen=True, slots=True)
class Splice:
    """Parameters of the list splice that reproduces a positional change."""
    index: int
    delete_count: int
    insertions: tuple = ()

    def __init__(self, index: int, delete_count: int, insertions=()):
        object.__setattr__(self, 'index', index)
        object.__setattr__(self, 'delete_count', delete_count)
        object.__setattr__(self, 'insertions', tuple(insertions))


@dataclass(frozen=True, slots=True)
class DiffEntry:
    """A single atomic change."""
    change: ChangeKind
    old_value: Any = None
    new_value: Any = None
    splice: Optional[Splice] = None

    def __repr__(self) -> str:
        if self.change is ChangeKind.ADD:
            return f"ADD: {self.new_value!r}"
        if self.change is ChangeKind.REMOVE:
            return f"REMOVE: {self.old_value!r}"
        if self.splice is not None:
            s = self.splice
            return (f"CHANGE: splice(index={s.index}, delete_count={s.delete_count}, "
                    f"insertions={list(s.insertions)!r})")
        return f"CHANGE: {self.old_value!r} → {self.new_value!r}"


# A diff is either a single entry (root-level command) or a tree of them.
Diff = Union[DiffEntry, dict]


def is_empty(diff: Optional[Diff]) -> bool:
    """True when a diff records no change at all."""
    if diff is None:
        return True
    if isinstance(diff, DiffEntry):
        return False
    return not diff


def iter_entries(diff: Optional[Diff], path: tuple = ()) -> Iterator[tuple[tuple, DiffEntry]]:
    """
    Yield (path, entry) for every leaf entry of a diff, depth first.

    The path is the tuple of keys leading from the updated root to the
    changed property.
    """
    if diff is None:
        return
    if isinstance(diff, DiffEntry):
        yield path, diff
        return
    for key, sub in diff.items():
        yield from iter_entries(sub, path + (key,))

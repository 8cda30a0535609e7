"""
structupdate
============

Immutable updates of nested Python data, driven by declarative commands.

    update({"a": {"b": 1}}, {"a": {"b": {"$set": 2}}})     → {"a": {"b": 2}}
    update([1, 2, 3], {"$push": 4})                          → [1, 2, 3, 4]
    set({"x": [1, 2, 3]}, "x[1]", 9)                         → {"x": [1, 9, 3]}

The source is never modified.  Only the containers on the path to a change
are copied; everything else in the result is the very same object as in
the source, so identity checks (``old["k"] is new["k"]``) tell you what
was left alone.

update_with_diff() additionally reports exactly what changed:

    update_with_diff({"x": [1, 2, 3]}, {"x": {"$splice": [1, 1, 9]}})
        → ({"x": [1, 9, 3]},
           {"x": CHANGE: splice(index=1, delete_count=1, insertions=[9])})

Commands: $set $push $unshift $pop $shift $removeAt $remove $splice $map
$filter $reduce $merge $defaults $apply $omit $composeBefore $composeAfter
"""

from structupdate.commands import Op, COMMAND_KEYS
from structupdate.config import UpdateOptions, DEFAULT_OPTIONS
from structupdate.core import (
    # Command trees
    Invocation,
    SubTree,
    parse_commands,
    # Engine
    update,
    update_with_diff,
)
from structupdate.diff import ChangeKind, Splice, DiffEntry, iter_entries
from structupdate.errors import (
    UpdateError, PathSyntaxError, CommandTypeError, AmbiguousCommandError,
)
from structupdate.path import to_key_path, parse_path, build_path_object
from structupdate.combine import merge_commands
from structupdate.shortcut import (
    set, push, unshift, pop, shift, remove_at, remove, splice,
    map, filter, reduce,
    merge, defaults,
    apply, apply_with,
    omit,
    compose_before, compose_after,
)
from structupdate.builders import Chain, chain, immutable, Macro, macro, builder, update_builder
from structupdate.patch import revert
from structupdate.formats import (
    diff_to_python, diff_from_python, diff_to_json, diff_from_json,
)
from structupdate import fp

__version__ = "0.1.0"
__all__ = [
    "Op", "COMMAND_KEYS", "UpdateOptions", "DEFAULT_OPTIONS",
    "Invocation", "SubTree", "parse_commands",
    "update", "update_with_diff",
    "ChangeKind", "Splice", "DiffEntry", "iter_entries",
    "UpdateError", "PathSyntaxError", "CommandTypeError", "AmbiguousCommandError",
    "to_key_path", "parse_path", "build_path_object", "merge_commands",
    "set", "push", "unshift", "pop", "shift", "remove_at", "remove", "splice",
    "map", "filter", "reduce", "merge", "defaults", "apply", "apply_with",
    "omit", "compose_before", "compose_after",
    "Chain", "chain", "immutable",
    "Macro", "macro", "builder", "update_builder",
    "revert",
    "diff_to_python", "diff_from_python", "diff_to_json", "diff_from_json",
    "fp",
]

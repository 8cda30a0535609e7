"""
structupdate.patch — Undo an update from its diff.

The inverse of update_with_diff:

    new, diff = update_with_diff(old, commands)
    revert(new, diff) == old

Every diff entry records the value it replaced, so reverting is a matter of
walking the diff and putting the old values back:

    ADD      → drop the key
    CHANGE   → restore old_value
    REMOVE   → restore old_value (re-inserting it into lists)
    subtree  → recurse

List diffs are keyed by the index in the ORIGINAL list, so elements that
were removed are re-inserted at their old position and the surviving
elements are matched up around them.

Limits (the diff alone cannot tell these apart):
    • Intermediate mappings created by an update revert to empty mappings
      instead of disappearing.
    • List slots past the original end are dropped from the first leaf ADD
      entry on.  Padding placed in front of that slot is indistinguishable
      from original elements and stays.
    • A sub-tree applied past the end of a list records a nested diff,
      not a leaf ADD, so that slot and its padding stay as well:
      reverting ``update_with_diff([1], {2: {"a": {"$set": 1}}})`` gives
      ``[1, None, {}]``.
"""

from typing import Any, Optional

from .commands import is_array_like, is_mapping_like
from .diff import ChangeKind, Diff, DiffEntry
from .errors import CommandTypeError


def revert(value: Any, diff: Optional[Diff]) -> Any:
    """Return the value ``value`` was produced from, given the update's diff."""
    if diff is None:
        return value
    if isinstance(diff, DiffEntry):
        return diff.old_value
    if not diff:
        return value
    if is_array_like(value):
        return _revert_sequence(value, diff)
    if value is None or is_mapping_like(value):
        return _revert_mapping(value or {}, diff)
    raise CommandTypeError(None, None, f"cannot revert a diff tree onto {type(value).__name__}")


def _revert_mapping(value: Any, diff: dict) -> dict:
    result = dict(value)

    for key, sub in diff.items():
        if isinstance(sub, DiffEntry):
            if sub.change is ChangeKind.ADD:
                result.pop(key, None)
            else:
                result[key] = sub.old_value
        else:
            result[key] = revert(result.get(key), sub)

    return result


def _revert_sequence(value: Any, diff: dict) -> Any:
    result: list = []
    pos = 0
    index = 0
    end = max(int(k) for k in diff) + 1

    while pos < len(value) or index < end:
        sub = diff.get(index, diff.get(str(index)))
        index += 1

        if isinstance(sub, DiffEntry):
            if sub.change is ChangeKind.ADD:
                # Everything from here on was appended by the update
                break
            result.append(sub.old_value)
            if sub.change is ChangeKind.REMOVE:
                continue
        elif pos >= len(value):
            break
        elif sub is not None:
            result.append(revert(value[pos], sub))
        else:
            result.append(value[pos])
        pos += 1

    if isinstance(value, tuple):
        return tuple(result)
    return result

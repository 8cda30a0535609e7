"""
structupdate.formats — Convert diffs to and from plain data.

Supported conversions:
    • Diff (DiffEntry / diff tree) ↔ plain Python dicts
    • Diff ↔ JSON strings

Each entry becomes a dict in the shape UI code usually consumes:

    {"$change": "change", "oldValue": [1, 2], "newValue": [1, 2, 3],
     "splice": {"index": 2, "deleteCount": 0, "insertions": [3]}}

Diff trees become nested dicts keyed like the updated value.
"""

import json
from collections.abc import Mapping
from typing import Any, Optional

from .diff import ChangeKind, Diff, DiffEntry, Splice

CHANGE_KEY = "$change"


# ═══════════════════════════════════════════════════════════════════
#  DIFF ↔ PYTHON OBJECTS
# ═══════════════════════════════════════════════════════════════════

def diff_to_python(diff: Optional[Diff]) -> Any:
    """
    Convert a diff into plain dicts and lists.

    Values recorded in the entries are passed through untouched.
    """
    if diff is None:
        return None
    if isinstance(diff, DiffEntry):
        obj = {
            CHANGE_KEY: diff.change.value,
            "oldValue": diff.old_value,
            "newValue": diff.new_value,
        }
        if diff.splice is not None:
            obj["splice"] = {
                "index": diff.splice.index,
                "deleteCount": diff.splice.delete_count,
                "insertions": list(diff.splice.insertions),
            }
        return obj
    return {key: diff_to_python(sub) for key, sub in diff.items()}


def diff_from_python(obj: Any) -> Optional[Diff]:
    """
    Inverse of diff_to_python:
        diff_from_python(diff_to_python(d)) == d
    """
    if obj is None:
        return None
    if not isinstance(obj, Mapping):
        raise TypeError(f"Expected a mapping, got {type(obj).__name__}")
    if CHANGE_KEY in obj:
        splice = obj.get("splice")
        return DiffEntry(
            ChangeKind(obj[CHANGE_KEY]),
            obj.get("oldValue"),
            obj.get("newValue"),
            Splice(splice["index"], splice["deleteCount"], splice["insertions"]) if splice else None,
        )
    return {key: diff_from_python(sub) for key, sub in obj.items()}


# ═══════════════════════════════════════════════════════════════════
#  DIFF ↔ JSON STRINGS
# ═══════════════════════════════════════════════════════════════════

def diff_to_json(diff: Optional[Diff], **kwargs) -> str:
    """
    Serialize a diff to JSON.

    Keyword arguments go to ``json.dumps``; pass ``default=repr`` when the
    diff holds values JSON cannot encode (functions, custom objects).
    List indices become string keys, as JSON requires.
    """
    return json.dumps(diff_to_python(diff), **kwargs)


def diff_from_json(text: str) -> Optional[Diff]:
    """Parse a JSON string produced by diff_to_json."""
    return diff_from_python(json.loads(text))

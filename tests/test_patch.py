"""
Tests for reverting updates and serializing diffs.

    §1  Revert round-trip
    §2  Revert limits and errors
    §3  Diff ↔ Python objects
    §4  Diff ↔ JSON
"""

import copy
import json
import sys
import os
import pytest

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from structupdate.core import update_with_diff
from structupdate.diff import ChangeKind, DiffEntry, Splice
from structupdate.errors import UpdateError
from structupdate.formats import (
    diff_to_python, diff_from_python, diff_to_json, diff_from_json,
)
from structupdate.patch import revert


ROUND_TRIPS = [
    ({"a": {"b": 1}}, {"a": {"b": {"$set": 2}}}),
    ({"x": [1, 2, 3]}, {"x": {"$splice": [1, 1, 9]}}),
    ({"x": 1, "y": 2}, {"x": {"$omit": True}}),
    ({"x": {"a": 1}}, {"x": {"$merge": {"a": 2, "b": 2}}}),
    ({"x": {"a": 1}}, {"x": {"$defaults": {"b": 2}}}),
    ([1, 2, 3], {1: {"$omit": True}}),
    ([1, 2, 3], {0: {"$set": 9}, 2: {"$omit": True}}),
    ([1, 2], {2: {"$set": 3}}),
    ((1, 2, 3), {1: {"$set": 5}}),
    ({"rows": [{"a": 1}, {"a": 2}]}, {"rows": {1: {"a": {"$set": 5}}}}),
    ([1, 2, 3], {"$push": 4}),
    ({"n": 1}, {"$apply": lambda n: n + 1}),
    ({"keep": [1], "drop": {"deep": True}}, {"drop": {"$omit": True}, "new": {"$set": 0}}),
    ({"a": 1}, {"b": {"$omit": True}}),
]


# ═══════════════════════════════════════════════════════════════════
#  §1  REVERT ROUND-TRIP
# ═══════════════════════════════════════════════════════════════════

class TestRevert:

    @pytest.mark.parametrize("source,commands", ROUND_TRIPS)
    def test_round_trip(self, source, commands):
        value, diff = update_with_diff(source, commands)
        assert revert(value, diff) == source

    @pytest.mark.parametrize("source,commands", ROUND_TRIPS[:10])
    def test_round_trip_through_json(self, source, commands):
        value, diff = update_with_diff(source, commands)
        restored = diff_from_json(diff_to_json(diff))
        assert revert(value, restored) == source

    def test_noop_diff(self):
        value = {"a": 1}
        assert revert(value, {}) is value
        assert revert(value, None) is value

    def test_inputs_not_mutated(self):
        value, diff = update_with_diff({"a": [1, 2]}, {"a": {0: {"$omit": True}}})
        value_copy = copy.deepcopy(value)
        revert(value, diff)
        assert value == value_copy

    def test_tuple_restored_as_tuple(self):
        value, diff = update_with_diff((1, 2), {0: {"$omit": True}})
        assert revert(value, diff) == (1, 2)


# ═══════════════════════════════════════════════════════════════════
#  §2  REVERT LIMITS AND ERRORS
# ═══════════════════════════════════════════════════════════════════

class TestRevertLimits:

    def test_created_parents_become_empty(self):
        value, diff = update_with_diff({}, {"a": {"b": {"$set": 1}}})
        assert revert(value, diff) == {"a": {}}

    def test_padding_is_kept(self):
        value, diff = update_with_diff([1], {3: {"$set": 9}})
        assert revert(value, diff) == [1, None, None]

    def test_subtree_past_end_is_kept(self):
        value, diff = update_with_diff([1], {2: {"a": {"$set": 1}}})
        assert revert(value, diff) == [1, None, {}]

    def test_tree_onto_scalar(self):
        with pytest.raises(UpdateError, match="cannot revert"):
            revert(5, {"a": DiffEntry(ChangeKind.ADD, None, 1)})
        with pytest.raises(TypeError):
            revert("text", {"a": DiffEntry(ChangeKind.ADD, None, 1)})


# ═══════════════════════════════════════════════════════════════════
#  §3  DIFF ↔ PYTHON OBJECTS
# ═══════════════════════════════════════════════════════════════════

class TestDiffToPython:

    def test_splice_entry(self):
        entry = DiffEntry(ChangeKind.CHANGE, [1, 2], [1, 2, 3], Splice(2, 0, [3]))
        assert diff_to_python(entry) == {
            "$change": "change",
            "oldValue": [1, 2],
            "newValue": [1, 2, 3],
            "splice": {"index": 2, "deleteCount": 0, "insertions": [3]},
        }

    def test_tree(self):
        diff = {"a": {"b": DiffEntry(ChangeKind.ADD, None, 1)}}
        assert diff_to_python(diff) == {
            "a": {"b": {"$change": "add", "oldValue": None, "newValue": 1}},
        }

    def test_remove_entry(self):
        assert diff_to_python(DiffEntry(ChangeKind.REMOVE, 1)) == {
            "$change": "remove", "oldValue": 1, "newValue": None,
        }

    def test_inverse(self):
        _, diff = update_with_diff(
            {"x": [1, 2, 3], "m": {"a": 1}},
            {"x": {"$splice": [0, 1, 7]}, "m": {"$merge": {"b": 2}}, "n": {"$set": 1}},
        )
        assert diff_from_python(diff_to_python(diff)) == diff

    def test_none(self):
        assert diff_to_python(None) is None
        assert diff_from_python(None) is None

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            diff_from_python([1, 2])


# ═══════════════════════════════════════════════════════════════════
#  §4  DIFF ↔ JSON
# ═══════════════════════════════════════════════════════════════════

class TestDiffJson:

    def test_to_json(self):
        _, diff = update_with_diff({"x": [1]}, {"x": {"$push": 2}})
        obj = json.loads(diff_to_json(diff))
        assert obj["x"]["$change"] == "change"
        assert obj["x"]["splice"] == {"index": 1, "deleteCount": 0, "insertions": [2]}

    def test_list_indices_become_strings(self):
        _, diff = update_with_diff([1, 2], {1: {"$set": 5}})
        assert list(json.loads(diff_to_json(diff))) == ["1"]

    def test_kwargs_forwarded(self):
        diff = {"b": DiffEntry(ChangeKind.ADD, None, 1), "a": DiffEntry(ChangeKind.ADD, None, 2)}
        text = diff_to_json(diff, sort_keys=True)
        assert text.index('"a"') < text.index('"b"')

    def test_unencodable_values_with_default(self):
        _, diff = update_with_diff({"f": len}, {"f": {"$composeAfter": str}})
        text = diff_to_json(diff, default=repr)
        assert "len" in text

    def test_from_json(self):
        text = '{"a": {"$change": "add", "oldValue": null, "newValue": 1}}'
        assert diff_from_json(text) == {"a": DiffEntry(ChangeKind.ADD, None, 1)}

"""
Stress tests / adversarial evaluation of structupdate.

This script attempts to BREAK the claimed properties:
  1. The source is never mutated
  2. Untouched branches are shared, touched ones are copied
  3. revert(update(x)) == x
  4. Every diff entry describes the value actually found in the result
  5. Edge cases that might expose design flaws
  6. Performance on wide and deep values
"""

import sys, os, random, time, copy
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from structupdate import (
    update, update_with_diff, revert, iter_entries,
    ChangeKind, UpdateOptions, chain,
    diff_to_json, diff_from_json,
)


def test(name, condition, detail=""):
    status = "PASS" if condition else "FAIL"
    print(f"  [{status}] {name}" + (f"  ({detail})" if detail else ""))
    return condition


def random_value(depth=0, max_depth=3):
    """Generate a random nested value."""
    if depth >= max_depth:
        return random.choice([1, 2, 3, "a", "b", None, True, False])

    kind = random.choice(["leaf", "list", "map", "map"])
    if kind == "leaf":
        return random.choice([42, "hello", "world", 3.14, None, True, 0])
    elif kind == "list":
        n = random.randint(0, 4)
        return [random_value(depth+1, max_depth) for _ in range(n)]
    else:
        n = random.randint(0, 4)
        keys = random.sample(["a", "b", "c", "d", "e", "x", "y"], n)
        return {k: random_value(depth+1, max_depth) for k in keys}


def random_path(value):
    """Walk down a random number of levels; return the path and the target."""
    path = []
    while random.random() < 0.6:
        if isinstance(value, dict) and value:
            key = random.choice(list(value))
        elif isinstance(value, list) and value:
            key = random.randrange(len(value))
        else:
            break
        path.append(key)
        value = value[key]
    return path, value


def random_command(target):
    """Pick a command that is valid for ``target``."""
    if isinstance(target, list):
        return random.choice([
            {"$push": random_value(2)},
            {"$unshift": random_value(2)},
            {"$pop": True},
            {"$shift": True},
            {"$removeAt": random.randint(-1, len(target))},
            {"$splice": [random.randint(-2, len(target)), random.randint(0, 2), "s"]},
            {"$filter": lambda x: x is not None},
            {"$set": random_value(2)},
        ])
    if isinstance(target, dict):
        return random.choice([
            {"$merge": {random.choice("abxz"): random_value(2)}},
            {"$defaults": {random.choice("abxz"): random_value(2)}},
            {"$set": random_value(2)},
            {random.choice("abxz"): {"$set": random_value(2)}},
        ])
    return random.choice([
        {"$set": random_value(2)},
        {"$apply": lambda v: [v]},
    ])


def random_update():
    source = random_value()
    path, target = random_path(source)
    if path and random.random() < 0.2:
        commands = {"$omit": True}
    else:
        commands = random_command(target)
    for key in reversed(path):
        commands = {key: commands}
    return source, path, commands


def value_at(value, path):
    for key in path:
        value = value[key]
    return value


# ═══════════════════════════════════════════════════════════════
#  §1  IMMUTABILITY — random values and commands
# ═══════════════════════════════════════════════════════════════

print("=" * 70)
print("  §1  IMMUTABILITY — random values and commands")
print("=" * 70)

random.seed(42)
mutations = 0
runs = 0
for _ in range(2000):
    source, path, commands = random_update()
    snapshot = copy.deepcopy(source)
    update(source, commands)
    runs += 1
    if source != snapshot:
        mutations += 1
        if mutations <= 5:
            print(f"    MUTATED: {snapshot!r} → {source!r} by {commands!r}")

test(f"Source never mutated ({runs} random updates)",
     mutations == 0,
     f"{mutations} mutations")


# ═══════════════════════════════════════════════════════════════
#  §2  IDENTITY SHARING
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §2  IDENTITY SHARING")
print("=" * 70)

random.seed(123)
unshared = 0
checks = 0
for _ in range(1000):
    source = {k: random_value(1) for k in "abcde"}
    touched = random.choice("abcde")
    result = update(source, {touched: {"$set": "changed"}})
    for key in "abcde":
        if key == touched:
            continue
        checks += 1
        if result[key] is not source[key]:
            unshared += 1

test(f"Untouched siblings shared by reference ({checks} checks)",
     unshared == 0,
     f"{unshared} copies")

deep = {"l1": {"l2": {"l3": [1, 2, 3]}, "side": [9]}}
result = update(deep, {"l1": {"l2": {"l3": {"$push": 4}}}})
test("Touched path copied at every level",
     result is not deep
     and result["l1"] is not deep["l1"]
     and result["l1"]["l2"] is not deep["l1"]["l2"]
     and result["l1"]["side"] is deep["l1"]["side"])


# ═══════════════════════════════════════════════════════════════
#  §3  REVERT ROUND-TRIP — random updates
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §3  REVERT ROUND-TRIP — random updates")
print("=" * 70)

random.seed(456)
failures = 0
json_failures = 0
tests = 0
for _ in range(2000):
    source, path, commands = random_update()
    value, diff = update_with_diff(source, commands)
    tests += 1
    if revert(value, diff) != source:
        failures += 1
        if failures <= 5:
            print(f"    FAILED: {source!r} via {commands!r} → {value!r}, diff {diff!r}")
        continue
    restored = diff_from_json(diff_to_json(diff))
    if revert(value, restored) != source:
        json_failures += 1

test(f"revert(update(x)) == x ({tests} random updates)",
     failures == 0,
     f"{failures} failures")
test("Round-trip survives JSON serialization of the diff",
     json_failures == 0,
     f"{json_failures} failures")


# ═══════════════════════════════════════════════════════════════
#  §4  DIFF CONSISTENCY
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §4  DIFF CONSISTENCY")
print("=" * 70)

random.seed(789)
inconsistent = 0
entries_checked = 0
for _ in range(1000):
    source = {k: random_value(1) for k in "abc"}
    commands = {
        random.choice("abcxyz"): {"$set": random_value(2)}
        for _ in range(3)
    }
    value, diff = update_with_diff(source, commands)
    for path, entry in iter_entries(diff):
        entries_checked += 1
        if entry.new_value is not value_at(value, path):
            inconsistent += 1
        if entry.change is ChangeKind.ADD and path[0] in source:
            inconsistent += 1

test(f"Diff entries match the result ({entries_checked} entries)",
     inconsistent == 0,
     f"{inconsistent} mismatches")

_, diff = update_with_diff({"a": 1}, {"a": {"$set": 1}})
test("No-op update yields empty diff", diff == {}, f"got {diff!r}")


# ═══════════════════════════════════════════════════════════════
#  §5  EDGE CASES
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §5  EDGE CASES")
print("=" * 70)

# In Python True == 1, but replacing 1 with True must still be reported
_, diff = update_with_diff({"a": 1}, {"a": {"$set": True}})
test("$set True over 1 is a change", "a" in diff, f"got {diff!r}")

result = update([1, True], {"$remove": 1})
test("$remove 1 leaves True alone", result == [True] and result[0] is True,
     f"got {result!r}")

test("Tuples stay tuples",
     type(update((1, 2), {"$push": 3})) is tuple)

test("Extension past end pads with None",
     update([], {2: {"$set": "x"}}) == [None, None, "x"])

test("Custom pad value",
     update([], {2: {"$set": "x"}}, UpdateOptions(pad_value=0)) == [0, 0, "x"])

test("String is a leaf, not a list",
     update({"s": "abc"}, {"s": {"0": {"$set": "z"}}}) == {"s": {"0": "z"}})

base = chain({"n": 0})
forks = [base.set("n", i) for i in range(10)]
test("Chain forks are independent",
     [f.value()["n"] for f in forks] == list(range(10)) and base.value() == {"n": 0})


# ═══════════════════════════════════════════════════════════════
#  §6  PERFORMANCE
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §6  PERFORMANCE")
print("=" * 70)

for n in [100, 1000, 10000, 100000]:
    wide = {f"key_{i}": {"v": i} for i in range(n)}
    t0 = time.perf_counter()
    update_with_diff(wide, {"key_0": {"v": {"$set": -1}}})
    dt = time.perf_counter() - t0
    print(f"  Map({n}) single change: {dt*1000:.2f}ms")


def make_deep(depth):
    value = {"leaf": 0}
    for _ in range(depth):
        value = {"child": value, "sibling": list(range(10))}
    return value


for depth in [10, 50, 200]:
    value = make_deep(depth)
    commands = {"leaf": {"$set": 1}}
    for _ in range(depth):
        commands = {"child": commands}
    t0 = time.perf_counter()
    update(value, commands)
    dt = time.perf_counter() - t0
    print(f"  Depth {depth}: {dt*1000:.3f}ms")

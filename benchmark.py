"""
Benchmark: structupdate vs the usual ways of producing an updated copy.

This benchmark compares structupdate against:
    1. copy.deepcopy + in-place mutation — the naive immutable update
    2. deepdiff — to recover WHAT changed after the fact
    3. dictdiffer — lightweight dict comparison, same purpose

The point is NOT only "we're faster" — the point is:
    structupdate produces the new value AND the diff in one pass, and
    shares every untouched branch with the source.
"""

import copy
import sys
import os
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from structupdate import update, update_with_diff, iter_entries, chain, macro


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

CONFIG = {
    "server": {
        "host": "0.0.0.0",
        "port": 443,
        "tls": True,
        "workers": 4,
    },
    "database": {
        "host": "db.internal",
        "port": 5432,
        "name": "production",
        "pool_size": 10,
        "ssl": True,
    },
    "logging": {
        "level": "WARN",
        "format": "json",
        "outputs": ["stdout", "file"],
    },
    "cache": {
        "backend": "redis",
        "ttl": 300,
        "max_size": 10000,
    },
}

CONFIG_COMMANDS = {
    "server": {"port": {"$set": 8080}, "workers": {"$apply": lambda n: n * 2}},
    "database": {"$merge": {"host": "db.staging", "name": "staging"}},
    "logging": {"outputs": {"$remove": "file"}},
    "monitoring": {"$set": {"enabled": True, "endpoint": "/health"}},
    "cache": {"$omit": True},
}


def mutate_config(config):
    """The same change as CONFIG_COMMANDS, written as in-place mutation."""
    config["server"]["port"] = 8080
    config["server"]["workers"] *= 2
    config["database"].update({"host": "db.staging", "name": "staging"})
    config["logging"]["outputs"].remove("file")
    config["monitoring"] = {"enabled": True, "endpoint": "/health"}
    del config["cache"]


def make_store(n):
    """A normalized entity store, the typical shape of application state."""
    return {
        "users": {f"u{i}": {"id": i, "name": f"user {i}", "tags": ["a", "b"]} for i in range(n)},
        "order": [f"u{i}" for i in range(n)],
        "meta": {"version": 1},
    }


def _try_import(name):
    """Safely attempt to import an optional dependency by name."""
    import importlib
    try:
        return importlib.import_module(name)
    except ImportError:
        return None


def _timed(fn, repeat=5):
    """Best-of-``repeat`` wall time for ``fn()`` in seconds, and its result."""
    best = float("inf")
    result = None
    for _ in range(repeat):
        t0 = time.perf_counter()
        result = fn()
        best = min(best, time.perf_counter() - t0)
    return best, result


# ═══════════════════════════════════════════════════════════════════
#  BENCHMARKS
# ═══════════════════════════════════════════════════════════════════

def benchmark_config_update():
    """A realistic multi-command config change."""
    print("=" * 70)
    print("  §1  CONFIG UPDATE (realistic use case)")
    print("=" * 70)
    print()

    dt, (value, diff) = _timed(lambda: update_with_diff(CONFIG, CONFIG_COMMANDS))
    entries = list(iter_entries(diff))

    print(f"  Changes reported: {len(entries)}")
    for path, entry in entries:
        print(f"    {'.'.join(str(k) for k in path):<22} {entry!r}")
    print(f"  Time (update + diff): {dt*1000:.3f}ms")
    print()

    def naive():
        config = copy.deepcopy(CONFIG)
        mutate_config(config)
        return config

    dt_naive, naive_value = _timed(naive)
    print(f"  deepcopy + mutate:    {dt_naive*1000:.3f}ms  (same result: {naive_value == value})")
    print()


def benchmark_structural_sharing():
    """How much of the source survives by reference."""
    print("=" * 70)
    print("  §2  STRUCTURAL SHARING")
    print("=" * 70)
    print()

    store = make_store(1000)
    result = update(store, {"users": {"u500": {"name": {"$set": "renamed"}}}})
    shared = sum(1 for k in store["users"] if result["users"][k] is store["users"][k])

    print(f"  Users shared by reference: {shared}/{len(store['users'])}")
    print(f"  'order' list shared:       {result['order'] is store['order']}")
    print(f"  'meta' shared:             {result['meta'] is store['meta']}")
    print()


def benchmark_vs_deepdiff():
    """Compare with deepcopy + deepdiff / dictdiffer (if available)."""
    print("=" * 70)
    print("  §3  COMPARISON WITH EXISTING TOOLS")
    print("=" * 70)
    print()

    deepdiff = _try_import("deepdiff")
    dictdiffer = _try_import("dictdiffer")

    store = make_store(2000)
    commands = {
        "users": {"u10": {"tags": {"$push": "c"}}, "u20": {"$omit": True}},
        "order": {"$remove": "u20"},
        "meta": {"version": {"$apply": lambda v: v + 1}},
    }

    dt, (value, diff) = _timed(lambda: update_with_diff(store, commands))
    print(f"  structupdate:")
    print(f"    Changes found:  {len(list(iter_entries(diff)))}")
    print(f"    Time:           {dt*1000:.3f}ms  (new value and diff in one pass)")
    print()

    dt_copy, _ = _timed(lambda: copy.deepcopy(store))
    print(f"  copy.deepcopy alone: {dt_copy*1000:.3f}ms")
    print()

    if deepdiff:
        dt_dd, dd_result = _timed(lambda: deepdiff.DeepDiff(store, value), repeat=1)
        dd_changes = sum(len(v) if isinstance(v, (dict, set, list)) else 0
                         for v in dd_result.values())
        print(f"  deepdiff:")
        print(f"    Changes found:  {dd_changes}")
        print(f"    Time:           {dt_dd*1000:.3f}ms  (diff only, after the update)")
    else:
        print(f"  deepdiff:         NOT INSTALLED (pip install deepdiff)")
    print()

    if dictdiffer:
        dt_dd, dd_diffs = _timed(lambda: list(dictdiffer.diff(store, value)), repeat=1)
        print(f"  dictdiffer:")
        print(f"    Diffs found:    {len(dd_diffs)}")
        print(f"    Time:           {dt_dd*1000:.3f}ms  (diff only, after the update)")
    else:
        print(f"  dictdiffer:       NOT INSTALLED (pip install dictdiffer)")
    print()

    print("  KEY INSIGHT:")
    print("    deepdiff and dictdiffer compare two finished values, walking both.")
    print("    structupdate only walks the paths it changes, so its cost tracks")
    print("    the size of the change, not the size of the data.")
    print()


def benchmark_builders():
    """Overhead of the fluent builders vs a hand-written command tree."""
    print("=" * 70)
    print("  §4  BUILDERS")
    print("=" * 70)
    print()

    store = make_store(100)

    dt_raw, _ = _timed(lambda: update(store, {"meta": {"version": {"$set": 2}}}))
    dt_chain, _ = _timed(lambda: chain(store).set("meta.version", 2).value())
    bump = macro().set("meta.version", 2).build()
    dt_macro, _ = _timed(lambda: bump(store))

    print(f"  Raw command tree: {dt_raw*1000:.3f}ms")
    print(f"  chain():          {dt_chain*1000:.3f}ms")
    print(f"  macro() (built):  {dt_macro*1000:.3f}ms")
    print()


def benchmark_scaling():
    """Test how a single change scales with data size."""
    print("=" * 70)
    print("  §5  SCALING")
    print("=" * 70)
    print()

    for n in [10, 100, 1000, 10000]:
        data = list(range(n))
        dt, _ = _timed(lambda: update(data, {0: {"$set": -1}}))
        dt_copy, _ = _timed(lambda: copy.deepcopy(data))
        print(f"  List length {n:>5}: update={dt*1000:>8.3f}ms  deepcopy={dt_copy*1000:>8.3f}ms")

    print()

    for n in [10, 100, 1000, 10000]:
        data = {f"key_{i}": {"v": i} for i in range(n)}
        dt, _ = _timed(lambda: update(data, {"key_0": {"v": {"$set": -1}}}))
        dt_copy, _ = _timed(lambda: copy.deepcopy(data))
        print(f"  Map size    {n:>5}: update={dt*1000:>8.3f}ms  deepcopy={dt_copy*1000:>8.3f}ms")

    print()


def main():
    print()
    print("╔══════════════════════════════════════════════════════════════════════╗")
    print("║          IMMUTABLE UPDATES WITH DIFFS — BENCHMARK SUITE             ║")
    print("║          structupdate v0.1.0                                        ║")
    print("╚══════════════════════════════════════════════════════════════════════╝")
    print()

    benchmark_config_update()
    benchmark_structural_sharing()
    benchmark_vs_deepdiff()
    benchmark_builders()
    benchmark_scaling()


if __name__ == "__main__":
    main()

"""
Benchmark: yamldiff alignment paths and incremental sessions.

Measures:
    1. Whole-document diff of a realistic config pair
    2. Exact vs positional sequence alignment around the threshold
    3. One-shot diff vs per-key diffing through a DiffSession

The point is not raw speed but to show where the cost goes: the exact
path is quadratic in the worst case, which is why huge sequences are
paired positionally, and why a viewer diffs one key at a time.
"""

import sys
import os
import random
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import yaml

from yamldiff.core import DiffConfig, dispatch, summarize
from yamldiff.documents import diff
from yamldiff.formats import from_python
from yamldiff.session import DiffSession


# ═══════════════════════════════════════════════════════════════════
#  TEST DATA
# ═══════════════════════════════════════════════════════════════════

CONFIG_A = {
    "server": {"host": "0.0.0.0", "port": 443, "tls": True, "workers": 4},
    "database": {"host": "db.internal", "port": 5432, "name": "production", "pool_size": 10},
    "logging": {"level": "WARN", "format": "json", "outputs": ["stdout", "file"]},
    "cache": {"backend": "redis", "ttl": 300, "max_size": 10000},
}

CONFIG_B = {
    "server": {"host": "0.0.0.0", "port": 8080, "tls": False, "workers": 8},
    "database": {"host": "db.staging", "port": 5432, "name": "staging", "pool_size": 5},
    "logging": {"level": "DEBUG", "format": "text", "outputs": ["stdout"]},
    "monitoring": {"enabled": True, "endpoint": "/health"},
}


def big_document(sections: int, items: int, seed: int) -> dict:
    """A document with many top-level sections, each holding a list of records."""
    rng = random.Random(seed)
    return {
        f"section_{s}": [
            {"id": i, "value": rng.randint(0, 3), "tags": ["a", "b"][: rng.randint(0, 2)]}
            for i in range(items)
        ]
        for s in range(sections)
    }


def timed(fn, repeat: int = 3) -> float:
    best = float("inf")
    for _ in range(repeat):
        start = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - start)
    return best


# ═══════════════════════════════════════════════════════════════════
#  §1  CONFIG DIFF
# ═══════════════════════════════════════════════════════════════════

def bench_config() -> None:
    left, right = yaml.safe_dump(CONFIG_A), yaml.safe_dump(CONFIG_B)
    seconds = timed(lambda: diff(left, right))
    summary = summarize(diff(left, right))
    print(f"  config diff:           {seconds * 1000:8.3f} ms   {summary!r}")


# ═══════════════════════════════════════════════════════════════════
#  §2  EXACT vs POSITIONAL
# ═══════════════════════════════════════════════════════════════════

def bench_alignment() -> None:
    for n in (100, 1000, 3000):
        base = list(range(n))
        edited = base[: n // 2] + [-1] + base[n // 2 :]
        left, right = from_python(base), from_python(edited)

        exact = timed(lambda: dispatch(left, right, config=DiffConfig(align_threshold=n * n * 2)))
        positional = timed(lambda: dispatch(left, right, config=DiffConfig(align_threshold=0)))

        exact_changes = summarize(dispatch(left, right, config=DiffConfig(align_threshold=n * n * 2)))
        positional_changes = summarize(dispatch(left, right, config=DiffConfig(align_threshold=0)))
        print(f"  n={n:5d}  exact {exact * 1000:8.2f} ms ({exact_changes.total_changes:4d} changes)"
              f"   positional {positional * 1000:8.2f} ms ({positional_changes.total_changes:4d} changes)")


# ═══════════════════════════════════════════════════════════════════
#  §3  ONE-SHOT vs SESSION
# ═══════════════════════════════════════════════════════════════════

def bench_session() -> None:
    left = yaml.safe_dump(big_document(50, 200, seed=1))
    right = yaml.safe_dump(big_document(50, 200, seed=2))

    one_shot = timed(lambda: diff(left, right), repeat=1)

    session = DiffSession()
    start = time.perf_counter()
    keys = session.init(left, right)
    init_cost = time.perf_counter() - start
    per_key = timed(lambda: session.diff_key(keys[0]))
    session.cleanup()

    print(f"  one-shot diff:         {one_shot * 1000:8.1f} ms")
    print(f"  session init (parse):  {init_cost * 1000:8.1f} ms")
    print(f"  single key diff:       {per_key * 1000:8.1f} ms   ({len(keys)} keys)")


if __name__ == "__main__":
    print("=" * 70)
    print("  yamldiff benchmark")
    print("=" * 70)
    bench_config()
    print()
    bench_alignment()
    print()
    bench_session()

"""
yamldiff.core — Structural diff of parsed documents
====================================================

OVERVIEW
════════

§1  THE PROBLEM
───────────────

Two YAML documents are compared not as text but as the trees they
parse into.  A line diff of a reformatted config is noise; a tree diff
says "server.port went from 443 to 8080, cache was removed, and a
monitoring section appeared" — which is what the reader wants to see,
laid out as an expandable tree.


§2  VALUES
──────────

The parsed document is the closed union

    Null                      YNull()
    Scalar(primitive)         YScalar(val)
    Sequence(v₁, ..., vₙ)     YSeq((v₁, ..., vₙ))
    Mapping(k₁: v₁, ...)      YMap(((k₁, v₁), ...))

Equality is deep and structural.  Mappings keep their source order for
display but compare order-independently.  Mapping keys may be any
scalar (YAML allows `1: x`, `true: y`, `~: z`); for diffing they are
canonicalized to strings, so `1` and `"1"` denote the same key.


§3  THE DIFF TREE
─────────────────

The result is a list of DiffNodes.  Each node pairs a left and right
value under a key and classifies the pair:

    UNCHANGED   present on both sides, no difference anywhere beneath
    MODIFIED    present on both sides, something beneath differs
    ADDED       present only on the right
    REMOVED     present only on the left

Values present on only one side are expanded into full subtrees
(every entry, every element, same classification all the way down) so
that a removed object renders as a removed tree, not an opaque blob.


§4  ALIGNMENT
─────────────

    Mappings:   by canonical key.  Left keys first in left order, then
                right-only keys in right order.
    Sequences:  by an exact alignment over canonical element tokens
                (difflib's matcher), yielding equal / delete / insert /
                replace runs.  Replace runs are paired positionally;
                the surplus on either side is REMOVED / ADDED.
                When n·m exceeds ALIGN_THRESHOLD the alignment is
                skipped and elements are paired by index instead.
    Anything else (scalars, Null, shape mismatches) is a leaf
                comparison: no decomposition across incompatible shapes.
                Under a key it is MODIFIED or UNCHANGED, since the key
                exists on both sides.

Sequence nodes are keyed by their position in the merged, rendered
sequence — not by their left or right index.


§5  BOUNDS
──────────

Documents are trees (parsed from text) so recursion always terminates,
but nesting depth is under the author's control.  dispatch() refuses
to go deeper than max_depth and the public entry points measure the
nesting of both documents up front.  Orphan expansion is cosmetic and
never fails: past the ceiling it simply stops adding children.
"""

import logging
import math
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Union

from .errors import DepthExceeded

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ═══════════════════════════════════════════════════════════════════

# Recursion ceiling shared by every recursive entry point
MAX_DEPTH = 256

# Above this many n·m comparisons sequences are paired by index
ALIGN_THRESHOLD = 10_000_000


@dataclass(frozen=True)
class DiffConfig:
    """Limits applied to one diff run."""
    max_depth: int = MAX_DEPTH
    align_threshold: int = ALIGN_THRESHOLD


DEFAULT_CONFIG = DiffConfig()


# ═══════════════════════════════════════════════════════════════════
#  VALUE MODEL
# ═══════════════════════════════════════════════════════════════════

def canonical_key(key: Any) -> str:
    """
    Canonical string form of a mapping key.

        "name"  → "name"
        1       → "1"
        1.5     → "1.5"
        True    → "true"
        None    → "null"
        .inf    → ".inf"

    Distinct keys can share a form (`1` and `"1"`); such keys are the
    same key as far as diffing is concerned.
    """
    if isinstance(key, YScalar):
        key = key.val
    if key is None or isinstance(key, YNull):
        return "null"
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, float):
        if math.isnan(key):
            return ".nan"
        if math.isinf(key):
            return ".inf" if key > 0 else "-.inf"
        return repr(key)
    return str(key)


def _scalar_equal(a: Any, b: Any) -> bool:
    # bool is a subclass of int and 1 == 1.0, but in a document `true`,
    # `1` and `1.0` are three different values
    if type(a) is not type(b):
        return False
    if a == b:
        return True
    return isinstance(a, float) and math.isnan(a) and math.isnan(b)


class YVal:
    """Base class for parsed document values.  Not instantiated directly."""
    __slots__ = ()


@dataclass(frozen=True, slots=True)
class YNull(YVal):
    """The null value (`~`, `null`, or an empty entry)."""

    def __repr__(self) -> str:
        return "YNull()"


@dataclass(frozen=True, slots=True, eq=False)
class YScalar(YVal):
    """
    A leaf value: string, int, float, bool, date/datetime or bytes.

    Examples:
        YScalar("hello")
        YScalar(42)
        YScalar(True)
    """
    val: Any

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YVal):
            return NotImplemented
        return isinstance(other, YScalar) and _scalar_equal(self.val, other.val)

    def __hash__(self) -> int:
        if isinstance(self.val, float) and math.isnan(self.val):
            return hash(("float", "nan"))
        return hash((type(self.val).__name__, self.val))

    def __repr__(self) -> str:
        return f"YScalar({self.val!r})"


@dataclass(frozen=True, slots=True)
class YSeq(YVal):
    """An ordered sequence of values."""
    items: tuple[YVal, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        if len(self.items) <= 5:
            return f"YSeq({list(self.items)})"
        return f"YSeq([{self.items[0]!r}, ..., {self.items[-1]!r}] len={len(self.items)})"


@dataclass(frozen=True, slots=True, eq=False)
class YMap(YVal):
    """
    A key-ordered mapping.

    `entries` keeps the original keys in source order.  `index` maps
    canonical keys to values and is what diffing and equality use.
    When two keys collide after canonicalization the first position
    is kept and the last value wins.

    Examples:
        YMap({"name": YScalar("Alice"), "age": YScalar(30)})
        YMap([(1, YScalar("one")), (True, YScalar("yes"))])
    """
    entries: tuple[tuple[Any, YVal], ...]
    index: dict[str, YVal] = field(repr=False)

    def __init__(self, entries: Union[dict, Iterable[tuple[Any, YVal]]] = ()):
        pairs: dict[str, tuple[Any, YVal]] = {}
        items = entries.items() if isinstance(entries, dict) else entries
        for key, value in items:
            ckey = canonical_key(key)
            if ckey in pairs:
                logger.warning("Mapping keys %r and %r collide as %r; keeping the later value",
                               pairs[ckey][0], key, ckey)
            pairs[ckey] = (key, value)
        object.__setattr__(self, "entries", tuple(pairs.values()))
        object.__setattr__(self, "index", {k: v for k, (_, v) in pairs.items()})

    def keys(self) -> list[str]:
        """Canonical keys in source order."""
        return list(self.index)

    def get(self, key: Any) -> Optional[YVal]:
        return self.index.get(canonical_key(key))

    def __contains__(self, key: Any) -> bool:
        return canonical_key(key) in self.index

    def __len__(self) -> int:
        return len(self.index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YVal):
            return NotImplemented
        return isinstance(other, YMap) and self.index == other.index

    def __hash__(self) -> int:
        return hash(frozenset(self.index))

    def __repr__(self) -> str:
        if len(self.index) <= 3:
            return f"YMap({self.index})"
        return f"YMap({{...}} len={len(self.index)})"


def nesting_depth(val: YVal) -> int:
    """
    Number of container levels in a value.

        YScalar(1)                   → 0
        YMap({})                     → 1
        YMap({"a": YSeq((...,))})    → 2

    Walks with an explicit stack so arbitrarily deep input is safe.
    """
    deepest = 0
    stack = [(val, 1)]
    while stack:
        v, level = stack.pop()
        if isinstance(v, YSeq):
            children = v.items
        elif isinstance(v, YMap):
            children = tuple(v.index.values())
        else:
            continue
        deepest = max(deepest, level)
        stack.extend((child, level + 1) for child in children)
    return deepest


def check_depth(val: YVal, config: DiffConfig = DEFAULT_CONFIG) -> None:
    """Raise DepthExceeded if `val` nests deeper than config.max_depth."""
    if nesting_depth(val) > config.max_depth:
        raise DepthExceeded(config.max_depth)


# ═══════════════════════════════════════════════════════════════════
#  DIFF TREE
# ═══════════════════════════════════════════════════════════════════

class DiffType(Enum):
    """Classification of one aligned pair."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class DiffNode:
    """
    One node of the diff tree.

    `left`/`right` are None when the value exists on the other side
    only.  `key` is None only for the single node produced when two
    non-container values are compared at the top level.
    """
    key: Optional[str]
    left: Optional[YVal]
    right: Optional[YVal]
    diff_type: DiffType
    children: tuple["DiffNode", ...] = ()

    @property
    def has_diff(self) -> bool:
        return self.diff_type is not DiffType.UNCHANGED

    def __repr__(self) -> str:
        where = self.key if self.key is not None else "(root)"
        suffix = f" [{len(self.children)} children]" if self.children else ""
        if self.diff_type is DiffType.ADDED:
            return f"ADDED at {where}: {self.right!r}{suffix}"
        if self.diff_type is DiffType.REMOVED:
            return f"REMOVED at {where}: {self.left!r}{suffix}"
        if self.diff_type is DiffType.MODIFIED:
            return f"MODIFIED at {where}: {self.left!r} → {self.right!r}{suffix}"
        return f"UNCHANGED at {where}{suffix}"


# ═══════════════════════════════════════════════════════════════════
#  SCALAR DIFF (base case)
# ═══════════════════════════════════════════════════════════════════

def _scalar_diff(left: YVal, right: YVal) -> DiffNode:
    """
    Compare two values that are not both mappings or both sequences.

    Shape mismatches (a scalar replaced by a mapping, say) land here
    too and are reported as a single MODIFIED leaf.  Only the unkeyed
    root of two scalar documents keeps the null-side ADDED/REMOVED
    classification; paired children are reclassified by `_pair`.
    """
    if left == right:
        diff_type = DiffType.UNCHANGED
    elif isinstance(left, YNull):
        diff_type = DiffType.ADDED
    elif isinstance(right, YNull):
        diff_type = DiffType.REMOVED
    else:
        diff_type = DiffType.MODIFIED
    return DiffNode(None, left, right, diff_type)


# ═══════════════════════════════════════════════════════════════════
#  ORPHAN EXPANSION
# ═══════════════════════════════════════════════════════════════════

def _one_sided(value: YVal, diff_type: DiffType) -> tuple[Optional[YVal], Optional[YVal]]:
    if diff_type is DiffType.ADDED:
        return None, value
    return value, None


def expand_orphan(value: YVal, diff_type: DiffType, depth: int = 0,
                  max_depth: int = MAX_DEPTH) -> tuple[DiffNode, ...]:
    """
    Children of a value that exists on one side only.

    Every mapping entry and sequence element becomes a node classified
    `diff_type` (ADDED or REMOVED), recursively.  Scalars have no
    children.  Never raises on depth: beyond max_depth the subtree is
    returned without further children.
    """
    if diff_type not in (DiffType.ADDED, DiffType.REMOVED):
        raise ValueError(f"orphan expansion needs ADDED or REMOVED, got {diff_type}")

    if isinstance(value, YMap):
        items = list(value.index.items())
    elif isinstance(value, YSeq):
        items = [(str(i), item) for i, item in enumerate(value.items)]
    else:
        return ()

    if depth > max_depth:
        logger.debug("Orphan expansion truncated at depth %d", depth)
        return ()

    nodes = []
    for key, child in items:
        left, right = _one_sided(child, diff_type)
        nodes.append(DiffNode(key, left, right, diff_type,
                              expand_orphan(child, diff_type, depth + 1, max_depth)))
    return tuple(nodes)


def _orphan(key: str, value: YVal, diff_type: DiffType, depth: int,
            config: DiffConfig) -> DiffNode:
    left, right = _one_sided(value, diff_type)
    return DiffNode(key, left, right, diff_type,
                    expand_orphan(value, diff_type, depth + 1, config.max_depth))


# ═══════════════════════════════════════════════════════════════════
#  PAIRED CHILDREN
# ═══════════════════════════════════════════════════════════════════

def _is_container_pair(left: YVal, right: YVal) -> bool:
    return ((isinstance(left, YMap) and isinstance(right, YMap))
            or (isinstance(left, YSeq) and isinstance(right, YSeq)))


def _pair(key: str, left: YVal, right: YVal, depth: int, config: DiffConfig) -> DiffNode:
    """Diff a child present on both sides and attach it under `key`."""
    if _is_container_pair(left, right):
        children = dispatch(left, right, depth + 1, config)
        changed = any(child.has_diff for child in children)
        diff_type = DiffType.MODIFIED if changed else DiffType.UNCHANGED
        return DiffNode(key, left, right, diff_type, tuple(children))

    # A key present on both sides is never ADDED or REMOVED
    diff_type = DiffType.UNCHANGED if left == right else DiffType.MODIFIED
    return DiffNode(key, left, right, diff_type)


# ═══════════════════════════════════════════════════════════════════
#  MAPPING DIFF
# ═══════════════════════════════════════════════════════════════════

def _map_diff(left: YMap, right: YMap, depth: int, config: DiffConfig) -> list[DiffNode]:
    """Align two mappings by canonical key."""
    nodes: list[DiffNode] = []

    for key, lval in left.index.items():
        if key in right.index:
            nodes.append(_pair(key, lval, right.index[key], depth, config))
        else:
            nodes.append(_orphan(key, lval, DiffType.REMOVED, depth, config))

    for key, rval in right.index.items():
        if key not in left.index:
            nodes.append(_orphan(key, rval, DiffType.ADDED, depth, config))

    return nodes


# ═══════════════════════════════════════════════════════════════════
#  SEQUENCE DIFF
# ═══════════════════════════════════════════════════════════════════

def token(val: YVal) -> str:
    """
    Canonical comparison token of a value.

    Structurally equal values produce identical tokens: mappings are
    written in canonical-key order and scalars carry their type, so
    `1`, `1.0`, `"1"` and `true` all differ.  Not a display form.
    """
    if isinstance(val, YScalar):
        v = val.val
        if isinstance(v, float):
            v = v + 0.0  # folds -0.0 into 0.0
        return f"{type(val.val).__name__}:{v!r}"
    if isinstance(val, YSeq):
        return "[" + ",".join(token(item) for item in val.items) + "]"
    if isinstance(val, YMap):
        return "{" + ",".join(f"{k!r}:{token(v)}" for k, v in sorted(val.index.items())) + "}"
    return "~"


def align(left_tokens: list[str], right_tokens: list[str]) -> list[tuple[str, int, int, int, int]]:
    """
    Exact alignment of two token lists.

    Returns (tag, i1, i2, j1, j2) runs with tag one of "equal",
    "delete", "insert", "replace", covering both lists left to right
    exactly once.
    """
    matcher = SequenceMatcher(None, left_tokens, right_tokens, autojunk=False)
    return matcher.get_opcodes()


def _seq_diff(left: YSeq, right: YSeq, depth: int, config: DiffConfig) -> list[DiffNode]:
    """
    Align two sequences element by element.

    Output keys count positions in the merged sequence, so they run
    0, 1, 2, ... in emission order regardless of which side an element
    came from.
    """
    litems, ritems = left.items, right.items
    n, m = len(litems), len(ritems)
    nodes: list[DiffNode] = []

    if n * m > config.align_threshold:
        logger.debug("Sequence of %d x %d elements exceeds alignment threshold, "
                     "pairing by position", n, m)
        for i in range(max(n, m)):
            key = str(i)
            if i < n and i < m:
                nodes.append(_pair(key, litems[i], ritems[i], depth, config))
            elif i < n:
                nodes.append(_orphan(key, litems[i], DiffType.REMOVED, depth, config))
            else:
                nodes.append(_orphan(key, ritems[i], DiffType.ADDED, depth, config))
        return nodes

    opcodes = align([token(v) for v in litems], [token(v) for v in ritems])
    for tag, i1, i2, j1, j2 in opcodes:
        if tag == "delete":
            for i in range(i1, i2):
                nodes.append(_orphan(str(len(nodes)), litems[i], DiffType.REMOVED, depth, config))
            continue

        if tag == "insert":
            for j in range(j1, j2):
                nodes.append(_orphan(str(len(nodes)), ritems[j], DiffType.ADDED, depth, config))
            continue

        # "equal" runs have matching lengths; "replace" runs are paired
        # positionally and the surplus on either side is one-sided
        paired = min(i2 - i1, j2 - j1)
        for offset in range(paired):
            nodes.append(_pair(str(len(nodes)), litems[i1 + offset], ritems[j1 + offset],
                               depth, config))
        for i in range(i1 + paired, i2):
            nodes.append(_orphan(str(len(nodes)), litems[i], DiffType.REMOVED, depth, config))
        for j in range(j1 + paired, j2):
            nodes.append(_orphan(str(len(nodes)), ritems[j], DiffType.ADDED, depth, config))

    return nodes


# ═══════════════════════════════════════════════════════════════════
#  DISPATCH
# ═══════════════════════════════════════════════════════════════════

def dispatch(left: YVal, right: YVal, depth: int = 0,
             config: DiffConfig = DEFAULT_CONFIG) -> list[DiffNode]:
    """
    Diff a pair of values at the given recursion depth.

    Both mappings → mapping diff, both sequences → sequence diff,
    anything else → a single unkeyed leaf node.  This is the only
    recursive entry point; the differs call back into it for every
    paired child.
    """
    if depth > config.max_depth:
        raise DepthExceeded(config.max_depth)

    if isinstance(left, YMap) and isinstance(right, YMap):
        return _map_diff(left, right, depth, config)
    if isinstance(left, YSeq) and isinstance(right, YSeq):
        return _seq_diff(left, right, depth, config)
    return [_scalar_diff(left, right)]


def diff_values(left: YVal, right: YVal, config: DiffConfig = DEFAULT_CONFIG) -> list[DiffNode]:
    """
    Diff two whole documents.

    Checks the nesting depth of both sides before diffing anything,
    so an over-deep document fails as a whole rather than part way.
    """
    check_depth(left, config)
    check_depth(right, config)
    return dispatch(left, right, 0, config)


def diff_entry(key: str, left: Optional[YVal], right: Optional[YVal], depth: int = 0,
               config: DiffConfig = DEFAULT_CONFIG) -> DiffNode:
    """
    Diff a single mapping entry; None marks the side it is missing from.

    Produces exactly the node the mapping diff emits for `key`, one-sided
    entries included (expanded into full subtrees).
    """
    if left is None and right is None:
        raise ValueError(f"entry {key!r} is missing on both sides")
    if right is None:
        return _orphan(key, left, DiffType.REMOVED, depth, config)
    if left is None:
        return _orphan(key, right, DiffType.ADDED, depth, config)
    return _pair(key, left, right, depth, config)


# ═══════════════════════════════════════════════════════════════════
#  INSPECTION
# ═══════════════════════════════════════════════════════════════════

@dataclass
class DiffSummary:
    """Leaf-level change counts of a diff tree."""
    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0

    @property
    def total_changes(self) -> int:
        return self.added + self.removed + self.modified

    def __repr__(self) -> str:
        return (f"DiffSummary(+{self.added} -{self.removed} "
                f"~{self.modified} ={self.unchanged})")


def summarize(nodes: Iterable[DiffNode]) -> DiffSummary:
    """Count the leaves of a diff tree by classification."""
    summary = DiffSummary()
    stack = list(nodes)
    while stack:
        node = stack.pop()
        if node.children:
            stack.extend(node.children)
            continue
        if node.diff_type is DiffType.ADDED:
            summary.added += 1
        elif node.diff_type is DiffType.REMOVED:
            summary.removed += 1
        elif node.diff_type is DiffType.MODIFIED:
            summary.modified += 1
        else:
            summary.unchanged += 1
    return summary


def iter_changes(nodes: Iterable[DiffNode],
                 path: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], DiffNode]]:
    """
    Yield (path, node) for every node with a difference, depth first.

    `path` is the tuple of keys from the root down to the node.
    """
    for node in nodes:
        if not node.has_diff:
            continue
        node_path = path + (node.key,) if node.key is not None else path
        yield node_path, node
        yield from iter_changes(node.children, node_path)

"""
yamldiff
========

Structural diff of YAML documents, as an expandable tree.

    diff("a: 1\\nb: 2", "a: 1\\nb: 3")
        → [UNCHANGED at a, MODIFIED at b: YScalar(2) → YScalar(3)]

    diff("x: [1, 2, 3]", "x: [1, 3]")
        → [MODIFIED at x: ... [3 children]]
             0: UNCHANGED  1 → 1
             1: REMOVED    2
             2: UNCHANGED  3 → 3

Documents are compared as parsed trees, not as text:
  • Mappings are aligned by key (key order does not matter)
  • Sequences are aligned element by element with an exact
    matcher, falling back to positional pairing for huge lists
  • Whatever exists on one side only is expanded into a full
    ADDED / REMOVED subtree
  • Large documents can be diffed one top-level key at a time
    through a DiffSession
"""

from yamldiff.core import (
    # Values
    YVal,
    YNull,
    YScalar,
    YSeq,
    YMap,
    canonical_key,
    # Diff tree
    DiffType,
    DiffNode,
    DiffSummary,
    # Configuration
    MAX_DEPTH,
    ALIGN_THRESHOLD,
    DiffConfig,
    # Diffing
    dispatch,
    diff_values,
    diff_entry,
    expand_orphan,
    summarize,
    iter_changes,
)
from yamldiff.documents import diff, load_documents
from yamldiff.errors import (
    Side,
    YamlDiffError,
    InputError, EmptyInputError, ParseError, CombinedInputError,
    DepthExceeded, SerializationError,
    SessionError, NoSessionError, NotAMappingError, KeyNotFoundError,
    StateAccessConflict,
)
from yamldiff.formats import (
    from_yaml, from_python, to_python, node_to_python, to_json,
)
from yamldiff.session import DiffSession

__version__ = "0.1.0"
__all__ = [
    "YVal", "YNull", "YScalar", "YSeq", "YMap", "canonical_key",
    "DiffType", "DiffNode", "DiffSummary",
    "MAX_DEPTH", "ALIGN_THRESHOLD", "DiffConfig",
    "dispatch", "diff_values", "diff_entry", "expand_orphan",
    "summarize", "iter_changes",
    "diff", "load_documents", "DiffSession",
    "from_yaml", "from_python", "to_python", "node_to_python", "to_json",
    "Side", "YamlDiffError",
    "InputError", "EmptyInputError", "ParseError", "CombinedInputError",
    "DepthExceeded", "SerializationError",
    "SessionError", "NoSessionError", "NotAMappingError", "KeyNotFoundError",
    "StateAccessConflict",
]

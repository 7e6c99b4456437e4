"""
yamldiff.session — Incremental, per-key diffing of large documents.

A viewer showing a large document collapsed only needs the diff of
the top-level keys the user actually expands.  A DiffSession parses
both documents once and then answers per-key requests:

    session = DiffSession()
    keys = session.init(left_text, right_text)   # ["server", "database", ...]
    node = session.diff_key("server")             # diff of that key only
    session.cleanup()

Sessions are plain objects; any number can live side by side.  A
single session is not shareable between concurrent callers: entering
it while another call is inside raises StateAccessConflict instead of
waiting.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from .core import (
    DEFAULT_CONFIG, DiffConfig, DiffNode, YMap, YVal,
    canonical_key, diff_entry, diff_values, nesting_depth,
)
from .documents import load_documents
from .errors import (
    DepthExceeded, KeyNotFoundError, NoSessionError, NotAMappingError,
    Side, StateAccessConflict,
)

logger = logging.getLogger(__name__)


class DiffSession:
    """Two parsed documents retained for repeated diffing."""

    def __init__(self, config: DiffConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._left: Optional[YVal] = None
        self._right: Optional[YVal] = None
        self._lock = threading.Lock()

    def __enter__(self) -> "DiffSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise StateAccessConflict()
        try:
            yield
        finally:
            self._lock.release()

    @property
    def active(self) -> bool:
        return self._left is not None

    def _roots(self) -> tuple[YVal, YVal]:
        if self._left is None or self._right is None:
            raise NoSessionError()
        return self._left, self._right

    # ───────────────────────────────────────────────────────────────
    #  lifecycle
    # ───────────────────────────────────────────────────────────────

    def init(self, left_text: str, right_text: str) -> list[str]:
        """
        Parse both documents and make them the session state.

        Returns the union of top-level keys (left order, then right-only
        keys in right order) when both documents are mappings, else an
        empty list: use diff_all() for those.  On failure any previous
        state is left untouched.
        """
        with self._exclusive():
            left, right = load_documents(left_text, right_text, self.config)
            self._left, self._right = left, right

            if not (isinstance(left, YMap) and isinstance(right, YMap)):
                logger.debug("Session initialised with non-mapping documents")
                return []

            keys = left.keys() + [k for k in right.keys() if k not in left.index]
            logger.debug("Session initialised with %d top-level keys", len(keys))
            return keys

    def cleanup(self) -> None:
        """Release the documents; further diff calls raise NoSessionError."""
        with self._exclusive():
            self._left = self._right = None
            logger.debug("Session released")

    # ───────────────────────────────────────────────────────────────
    #  diffing
    # ───────────────────────────────────────────────────────────────

    def diff_all(self) -> list[DiffNode]:
        """Diff the two whole documents, whatever their shape."""
        with self._exclusive():
            left, right = self._roots()
            return diff_values(left, right, self.config)

    def diff_key(self, key, missing_ok: bool = False) -> Optional[DiffNode]:
        """
        Diff one top-level key.

        The key is matched by canonical form, so 1 and "1" are the same
        key.  The returned node is identical to the corresponding node
        of diff_all().  A key on neither side raises KeyNotFoundError,
        or returns None when `missing_ok` is set.
        """
        with self._exclusive():
            return self._diff_key(key, missing_ok)

    def diff_key_error_if_missing(self, key) -> DiffNode:
        """Diff one top-level key; raises KeyNotFoundError if it is on neither side."""
        with self._exclusive():
            return self._diff_key(key, missing_ok=False)

    def _diff_key(self, key, missing_ok: bool) -> Optional[DiffNode]:
        left, right = self._roots()
        if not isinstance(left, YMap):
            raise NotAMappingError(Side.LEFT)
        if not isinstance(right, YMap):
            raise NotAMappingError(Side.RIGHT)

        ckey = canonical_key(key)
        lval = left.index.get(ckey)
        rval = right.index.get(ckey)
        if lval is None and rval is None:
            if missing_ok:
                return None
            raise KeyNotFoundError(ckey)

        # One level is spent on the root mapping itself
        for val in (lval, rval):
            if val is not None and nesting_depth(val) >= self.config.max_depth:
                raise DepthExceeded(self.config.max_depth)

        return diff_entry(ckey, lval, rval, 0, self.config)

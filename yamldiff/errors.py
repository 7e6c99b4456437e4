"""
yamldiff.errors — Exception hierarchy.

Every failure surfaced by the library derives from YamlDiffError.
Document input problems (empty or unparsable text) carry the side
they belong to, so a caller can show each message next to the
document that caused it.
"""

from enum import Enum
from typing import Optional


class Side(Enum):
    """Which input document an error refers to."""
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"

    @property
    def label(self) -> str:
        if self is Side.LEFT:
            return "[YAML ONE]"
        if self is Side.RIGHT:
            return "[YAML TWO]"
        return "[YAML ONE][YAML TWO]"


class YamlDiffError(Exception):
    """Base exception for all yamldiff errors."""


# ═══════════════════════════════════════════════════════════════════
#  INPUT ERRORS
# ═══════════════════════════════════════════════════════════════════

class InputError(YamlDiffError):
    """Base exception for errors in the input documents."""

    def __init__(self, side: Side, message: str) -> None:
        self.side = side
        super().__init__(message)


class EmptyInputError(InputError):
    """Raised when a document is empty or whitespace only."""

    MESSAGES = {
        Side.LEFT: "[YAML ONE] Error: document is empty",
        Side.RIGHT: "[YAML TWO] Error: document is empty",
        Side.BOTH: "Both documents are empty, nothing to compare",
    }

    def __init__(self, side: Side) -> None:
        super().__init__(side, self.MESSAGES[side])


class ParseError(InputError):
    """Raised when a document cannot be parsed."""

    def __init__(self, side: Side, message: str, line: Optional[int] = None) -> None:
        self.message = message
        self.line = line
        if line is not None:
            text = f"{side.label} Error: {message} at line: {line}"
        else:
            text = f"{side.label} Error: {message}"
        super().__init__(side, text)


class CombinedInputError(InputError):
    """Raised when both documents fail; one message line per side."""

    def __init__(self, errors: list[InputError]) -> None:
        self.errors = list(errors)
        super().__init__(Side.BOTH, "\n".join(str(e) for e in self.errors))


# ═══════════════════════════════════════════════════════════════════
#  DIFF ERRORS
# ═══════════════════════════════════════════════════════════════════

class DepthExceeded(YamlDiffError):
    """Raised when documents nest deeper than the recursion ceiling."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Maximum nesting depth of {limit} exceeded")


class SerializationError(YamlDiffError):
    """Raised when a value cannot cross the host marshalling boundary."""


# ═══════════════════════════════════════════════════════════════════
#  SESSION ERRORS
# ═══════════════════════════════════════════════════════════════════

class SessionError(YamlDiffError):
    """Base exception for incremental session errors."""


class NoSessionError(SessionError):
    """Raised when a session operation is used before init or after cleanup."""

    def __init__(self) -> None:
        super().__init__("No diff session, call init() first")


class NotAMappingError(SessionError):
    """Raised when a per-key operation is used on a non-mapping document."""

    def __init__(self, side: Side) -> None:
        self.side = side
        super().__init__(f"{side.label} Error: top-level value is not a mapping")


class KeyNotFoundError(SessionError):
    """Raised when a top-level key exists in neither document."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Key not found in either document: {key!r}")


class StateAccessConflict(SessionError):
    """Raised when a session is entered while another call is using it."""

    def __init__(self) -> None:
        super().__init__("Diff session is already in use by another call")

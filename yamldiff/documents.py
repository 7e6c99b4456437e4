"""
yamldiff.documents — Whole-document entry point.

    diff("a: 1\\nb: 2", "a: 1\\nb: 3")  →  [UNCHANGED at a, MODIFIED at b: 2 → 3]

Input validation happens in a fixed order:
    1. Emptiness of both texts (before any parsing).
    2. Parsing of each non-empty text.
    3. Depth check of both parsed documents.
Failures of both sides are reported together.
"""

import logging

from .core import DEFAULT_CONFIG, DiffConfig, DiffNode, YVal, diff_values
from .errors import CombinedInputError, EmptyInputError, InputError, Side
from .formats import from_yaml

logger = logging.getLogger(__name__)


def load_documents(left_text: str, right_text: str,
                   config: DiffConfig = DEFAULT_CONFIG) -> tuple[YVal, YVal]:
    """
    Validate and parse both documents.

    Raises:
        EmptyInputError     one or both texts are empty / whitespace
        ParseError          exactly one text fails to parse
        CombinedInputError  both sides fail (empty + unparsable, or
                            both unparsable)
    """
    left_empty = not left_text or not left_text.strip()
    right_empty = not right_text or not right_text.strip()
    if left_empty and right_empty:
        raise EmptyInputError(Side.BOTH)

    errors: list[InputError] = []
    parsed: dict[Side, YVal] = {}
    for side, text, empty in ((Side.LEFT, left_text, left_empty),
                              (Side.RIGHT, right_text, right_empty)):
        if empty:
            errors.append(EmptyInputError(side))
            continue
        try:
            parsed[side] = from_yaml(text, side, config.max_depth)
        except InputError as exc:
            errors.append(exc)

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise CombinedInputError(errors)

    return parsed[Side.LEFT], parsed[Side.RIGHT]


def diff(left_text: str, right_text: str, config: DiffConfig = DEFAULT_CONFIG) -> list[DiffNode]:
    """Diff two YAML documents given as text."""
    left, right = load_documents(left_text, right_text, config)
    nodes = diff_values(left, right, config)
    logger.debug("Diffed documents into %d top-level nodes", len(nodes))
    return nodes

"""
yamldiff.formats — Conversion at the edges of the library.

Supported conversions:
    • YAML text → YVal                          (parsing, via PyYAML)
    • Python objects (dict, list, str, ...) ↔ YVal
    • DiffNode → plain dict / JSON               (host representation)

The differs only ever see YVal trees; everything that touches native
Python or JSON values lives here.
"""

import base64
import datetime
import json
from typing import Any, Iterable

import yaml

from .core import MAX_DEPTH, DiffNode, YMap, YNull, YScalar, YSeq, YVal
from .errors import DepthExceeded, ParseError, SerializationError, Side

_SCALAR_TYPES = (str, bool, int, float, bytes, datetime.date, datetime.datetime)


# ═══════════════════════════════════════════════════════════════════
#  YAML TEXT → VALUES
# ═══════════════════════════════════════════════════════════════════

class DocumentLoader(yaml.SafeLoader):
    """
    SafeLoader that builds mappings as YMap from the raw key list.

    A plain dict would merge `1`, `1.0` and `true` into one key before
    they are canonicalized; YMap sees every key in source order.
    """


def _construct_mapping(loader: DocumentLoader, node: yaml.MappingNode) -> YMap:
    loader.flatten_mapping(node)  # resolves `<<` merge keys
    pairs = []
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=True)
        pairs.append((key, from_python(loader.construct_object(value_node, deep=True))))
    return YMap(pairs)


DocumentLoader.add_constructor("tag:yaml.org,2002:map", _construct_mapping)


def from_yaml(text: str, side: Side = Side.LEFT, max_depth: int = MAX_DEPTH) -> YVal:
    """
    Parse one YAML document into a value.

    Raises ParseError tagged with `side`, carrying the 1-based line of
    the problem when the parser reports one.
    """
    try:
        data = yaml.load(text, Loader=DocumentLoader)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        message = " ".join(part for part in (exc.context, exc.problem) if part) or str(exc)
        raise ParseError(side, message, mark.line + 1 if mark is not None else None) from exc
    except yaml.YAMLError as exc:
        raise ParseError(side, str(exc)) from exc
    except RecursionError as exc:
        # The parser itself recurses per nesting level
        raise DepthExceeded(max_depth) from exc
    return from_python(data)


# ═══════════════════════════════════════════════════════════════════
#  PYTHON OBJECTS ↔ VALUES
# ═══════════════════════════════════════════════════════════════════

def from_python(obj: Any) -> YVal:
    """
    Convert a Python object to a value.

    Mapping:
        None            → YNull()
        str/int/float/
        bool/bytes/date → YScalar
        list/tuple      → YSeq
        dict            → YMap (keys kept as-is, canonicalized by YMap)
        set             → YMap with null values (YAML !!set)

    Anything else raises SerializationError.
    """
    if isinstance(obj, YVal):
        return obj
    if obj is None:
        return YNull()
    if isinstance(obj, _SCALAR_TYPES):
        return YScalar(obj)
    if isinstance(obj, (list, tuple)):
        return YSeq(tuple(from_python(item) for item in obj))
    if isinstance(obj, dict):
        return YMap([(key, from_python(value)) for key, value in obj.items()])
    if isinstance(obj, (set, frozenset)):
        return YMap([(key, YNull()) for key in obj])
    raise SerializationError(f"Cannot convert {type(obj).__name__} to a document value")


def to_python(val: YVal) -> Any:
    """
    Convert a value back to a plain Python object.

    Inverse of from_python for dict/list/scalar input:
        to_python(from_python(obj)) == obj
    """
    if isinstance(val, YNull):
        return None
    if isinstance(val, YScalar):
        return val.val
    if isinstance(val, YSeq):
        return [to_python(item) for item in val.items]
    if isinstance(val, YMap):
        return {key: to_python(value) for key, value in val.entries}
    raise SerializationError(f"Unknown value type: {type(val).__name__}")


# ═══════════════════════════════════════════════════════════════════
#  DIFF TREE → HOST REPRESENTATION
# ═══════════════════════════════════════════════════════════════════

def node_to_python(node: DiffNode) -> dict[str, Any]:
    """
    Plain-dict form of a diff node, recursively.

    A side that is missing is None, never omitted.
    """
    return {
        "key": node.key,
        "left_value": None if node.left is None else to_python(node.left),
        "right_value": None if node.right is None else to_python(node.right),
        "diff_type": node.diff_type.value,
        "has_diff": node.has_diff,
        "children": [node_to_python(child) for child in node.children],
    }


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime.date, datetime.datetime)):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return base64.b64encode(obj).decode("ascii")
    raise SerializationError(f"Cannot serialize {type(obj).__name__} to JSON")


def to_json(nodes: Iterable[DiffNode], **kwargs) -> str:
    """Render a diff as a JSON list of node dicts."""
    try:
        return json.dumps([node_to_python(node) for node in nodes],
                          default=_json_default, **kwargs)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc

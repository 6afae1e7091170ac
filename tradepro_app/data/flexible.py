"""
Schema-less decoding of JSON values into FlexibleValue trees.

Analysis documents carry side-data whose keys and value types vary per
document. This module decodes such nodes structurally: every node is tried
against the variants string, int, float, bool, list and map in that order
and committed to the first that fits. Open maps decode every key they
contain and drop (with a log line) the keys whose values do not decode, so
one malformed sub-field never discards the rest of a document.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from ..errors import DecodeError
from ..logging import get_logger, log_skipped_record
from .models import FlexibleValue, FlexKind

logger = get_logger(__name__)

OpenMap = dict[str, FlexibleValue]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _child_path(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}"


def _try_string(node: Any) -> Optional[FlexibleValue]:
    if isinstance(node, str):
        return FlexibleValue(FlexKind.STRING, node)
    return None


def _try_int(node: Any) -> Optional[FlexibleValue]:
    # bool is an int subclass in Python but a distinct JSON type
    if isinstance(node, bool):
        return None
    if isinstance(node, int):
        if INT64_MIN <= node <= INT64_MAX:
            return FlexibleValue(FlexKind.INT, node)
        return None
    if isinstance(node, float) and math.isfinite(node) and node.is_integer():
        as_int = int(node)
        if INT64_MIN <= as_int <= INT64_MAX:
            return FlexibleValue(FlexKind.INT, as_int)
    return None


def _try_float(node: Any) -> Optional[FlexibleValue]:
    if isinstance(node, bool):
        return None
    if isinstance(node, (int, float)):
        value = float(node)
        if math.isfinite(value):
            return FlexibleValue(FlexKind.FLOAT, value)
    return None


def _try_bool(node: Any) -> Optional[FlexibleValue]:
    if isinstance(node, bool):
        return FlexibleValue(FlexKind.BOOL, node)
    return None


def _try_list(node: Any, path: str) -> Optional[FlexibleValue]:
    if not isinstance(node, (list, tuple)):
        return None
    items = tuple(decode_flexible(item, _child_path(path, i)) for i, item in enumerate(node))
    return FlexibleValue(FlexKind.LIST, items)


def _try_map(node: Any, path: str) -> Optional[FlexibleValue]:
    if not isinstance(node, Mapping):
        return None
    entries = {}
    for key, value in node.items():
        if not isinstance(key, str):
            raise DecodeError(f"Map key must be a string, got {type(key).__name__}",
                              path=_child_path(path, key))
        entries[key] = decode_flexible(value, _child_path(path, key))
    return FlexibleValue(FlexKind.MAP, entries)


def decode_flexible(node: Any, path: str = "$") -> FlexibleValue:
    """
    Decode a parsed JSON node into a FlexibleValue.

    Variants are tried in the fixed order string, int, float, bool, list,
    map; the first that fits wins. A number without a fractional part is
    an INT even when it was written as ``42.0``, and ``true``/``false`` are
    never read as integers. Lists and nested maps are strict: a child that
    does not decode fails the whole node.

    Args:
        node: Value produced by a JSON parser
        path: JSON path of ``node``, used in error messages

    Returns:
        Decoded FlexibleValue

    Raises:
        DecodeError: If the node (or any child) matches no variant, e.g. null
    """
    for attempt in (_try_string, _try_int, _try_float, _try_bool):
        decoded = attempt(node)
        if decoded is not None:
            return decoded

    decoded = _try_list(node, path)
    if decoded is not None:
        return decoded

    decoded = _try_map(node, path)
    if decoded is not None:
        return decoded

    raise DecodeError(f"Cannot decode {type(node).__name__} as a flexible value", path=path)


def encode_flexible(value: FlexibleValue) -> Any:
    """
    Encode a FlexibleValue back into plain JSON-compatible Python values.

    The tag decides the output type: INT encodes as int and FLOAT as float.
    """
    kind = value.kind
    if kind is FlexKind.STRING:
        return str(value.value)
    if kind is FlexKind.INT:
        return int(value.value)
    if kind is FlexKind.FLOAT:
        return float(value.value)
    if kind is FlexKind.BOOL:
        return bool(value.value)
    if kind is FlexKind.LIST:
        return [encode_flexible(item) for item in value.value]
    if kind is FlexKind.MAP:
        return {key: encode_flexible(item) for key, item in value.value.items()}
    raise DecodeError(f"Unknown flexible value kind: {kind!r}")


def decode_open_map(obj: Any, path: str = "$") -> OpenMap:
    """
    Decode a JSON object whose key set is not known ahead of time.

    Every key present is decoded with ``decode_flexible``. Keys whose value
    fails to decode are logged and dropped; the remaining keys keep their
    original order.

    Args:
        obj: Parsed JSON object
        path: JSON path of ``obj``

    Returns:
        Ordered mapping of key to FlexibleValue

    Raises:
        DecodeError: If ``obj`` itself is not a JSON object
    """
    if not isinstance(obj, Mapping):
        raise DecodeError(f"Expected an object, got {type(obj).__name__}", path=path)

    result: OpenMap = {}
    for key, raw_value in obj.items():
        key_path = _child_path(path, key)
        if not isinstance(key, str):
            log_skipped_record(logger, "open_map_key", "non-string key", {"path": key_path})
            continue
        try:
            result[key] = decode_flexible(raw_value, key_path)
        except DecodeError as e:
            log_skipped_record(logger, "open_map_key", str(e), {"path": e.path})

    return result


def encode_open_map(entries: Mapping[str, FlexibleValue]) -> dict[str, Any]:
    """Encode an open map, keeping every retained key in order."""
    return {key: encode_flexible(value) for key, value in entries.items()}


def decode_optional_named_blocks(
    obj: Any,
    names: Iterable[str],
    path: str = "$",
) -> dict[str, Optional[OpenMap]]:
    """
    Pick a fixed list of named sub-blocks out of a JSON object.

    Each recognized name appears in the result. A name that is absent, or
    whose value is not an object, maps to None; neither is an error.

    Args:
        obj: Parsed JSON object holding the blocks
        names: Block names to look for
        path: JSON path of ``obj``

    Returns:
        Mapping of each name to its decoded open map, or None
    """
    blocks: dict[str, Optional[OpenMap]] = {}
    source = obj if isinstance(obj, Mapping) else {}

    for name in names:
        raw_block = source.get(name)
        if raw_block is None:
            blocks[name] = None
            continue
        if not isinstance(raw_block, Mapping):
            log_skipped_record(logger, "named_block", "block is not an object",
                               {"path": _child_path(path, name)})
            blocks[name] = None
            continue
        blocks[name] = decode_open_map(raw_block, _child_path(path, name))

    return blocks


def to_python(value: Optional[FlexibleValue]) -> Any:
    """Plain Python view of a FlexibleValue; None passes through."""
    if value is None:
        return None
    return encode_flexible(value)

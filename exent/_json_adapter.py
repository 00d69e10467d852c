"""JSON import adapter.

Converts raw JSON bytes or text into the EXENT value model so existing
JSON documents can be re-emitted as EXENT or B-EXENT.

Type mapping:
    JSON object  → Object (dict, key order preserved, last duplicate wins)
    JSON array   → Array  (list)
    JSON string  → String
    JSON true    → Bool
    JSON integer → Int    (any magnitude, never BigInt)
    JSON float   → Float
    JSON null    → Null

JSON has no anchors, so the result is always a tree.  NaN and Infinity
are not JSON and are rejected even though Python's json module accepts
them by default.
"""

from __future__ import annotations

import json
from typing import Any, Union

from ._constants import DEFAULT_MAX_DEPTH
from ._errors import (
    ERR_INVALID_UTF8,
    ERR_MAX_DEPTH,
    ERR_UNEXPECTED_TOKEN,
    ExentError,
)


def _reject_constant(name: str) -> Any:
    raise ExentError(ERR_UNEXPECTED_TOKEN, "JSON constant {} not allowed".format(name))


def json_parse(raw: Union[bytes, str]) -> Any:
    """Parse JSON text.  A leading UTF-8 BOM is tolerated."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ExentError(ERR_INVALID_UTF8, "invalid UTF-8 in JSON input")
    else:
        text = raw

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ExentError(ERR_UNEXPECTED_TOKEN, "JSON parse error: {}".format(e.msg), e.pos)
    except RecursionError:
        # json.loads recurses once per nesting level.
        raise ExentError(ERR_MAX_DEPTH, "JSON nesting exceeds the interpreter recursion limit")


def json_to_value(x: Any, max_depth: int = DEFAULT_MAX_DEPTH, depth: int = 0) -> Any:
    """Check a parsed JSON tree against the depth limit.

    json.loads already produces the right Python types; what it does not
    do is bound nesting the way the EXENT parser does.
    """
    if isinstance(x, (dict, list)):
        if depth + 1 > max_depth:
            raise ExentError(ERR_MAX_DEPTH, "nesting depth exceeds {}".format(max_depth))
        children = x.values() if isinstance(x, dict) else x
        for child in children:
            json_to_value(child, max_depth, depth + 1)
    return x


def from_json(raw: Union[bytes, str], *, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Parse JSON into an EXENT value graph."""
    value = json_parse(raw)
    try:
        return json_to_value(value, max_depth)
    except RecursionError:
        raise ExentError(ERR_MAX_DEPTH, "nesting depth exceeds {}".format(max_depth))

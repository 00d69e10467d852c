"""EXENT serializer: value graph to text.

Two passes over the graph:

  1. detect_anchors() walks every Array/Object, tracking identity with
     id().  The first time a node is reached a second time it gets the
     next anchor name (a0, a1, ...).  Already-seen nodes are not entered
     again, which is what keeps cyclic graphs finite.
  2. _Serializer emits text.  An anchored node prints "&name " before its
     body the first time and only "*name" every time after that.

Tuples are written as arrays but never anchored: they are immutable and
CPython shares equal tuples freely, so their identity carries no meaning.
"""

from __future__ import annotations

import decimal
import logging
import math
import re
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, Optional, Set, Union

from ._constants import DEFAULT_INDENT, KEYWORDS
from ._errors import ERR_UNSUPPORTED_TYPE, ExentError
from ._types import BigInt, DecimalNumber, format_iso_date, object_items

logger = logging.getLogger(__name__)

_BARE_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")

Indent = Union[int, str, None]


def is_anchorable(val: Any) -> bool:
    return isinstance(val, (dict, list, SimpleNamespace))


def _children(val: Any):
    if isinstance(val, (list, tuple)):
        return val
    if isinstance(val, dict):
        return val.values()
    if isinstance(val, SimpleNamespace):
        return vars(val).values()
    return ()


def detect_anchors(root: Any) -> Dict[int, str]:
    """Return {id(node): anchor name} for every node reachable twice."""
    seen: Set[int] = set()
    anchors: Dict[int, str] = {}

    def walk(val: Any) -> None:
        if is_anchorable(val):
            key = id(val)
            if key in seen:
                if key not in anchors:
                    anchors[key] = "a{}".format(len(anchors))
                return
            seen.add(key)
        for child in _children(val):
            walk(child)

    walk(root)
    if anchors:
        logger.debug("assigned %d anchor(s) over %d container(s)", len(anchors), len(seen))
    return anchors


# ── Scalar formatting ─────────────────────────────────────────

def _quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_key(key: Any) -> str:
    if not isinstance(key, str):
        raise ExentError(ERR_UNSUPPORTED_TYPE,
                         "object key must be a string, got {}".format(type(key).__name__))
    if _BARE_RE.fullmatch(key) and key not in KEYWORDS:
        return key
    return _quote(key)


def format_string(s: str) -> str:
    if "\n" in s and "`" not in s:
        return "`" + s + "`"
    return format_key(s)


def format_decimal(val: Any) -> str:
    """Positional digits for a Decimal payload (no exponent, ``d`` suffix)."""
    if isinstance(val, decimal.Decimal):
        if not val.is_finite():
            raise ExentError(ERR_UNSUPPORTED_TYPE, "non-finite decimal {}".format(val))
        text = format(val, "f")
    else:
        f = float(val)
        if not math.isfinite(f):
            raise ExentError(ERR_UNSUPPORTED_TYPE, "non-finite decimal {}".format(f))
        text = repr(f)
        if "e" in text:
            text = format(decimal.Decimal(text), "f")
    return text + "d"


def format_scalar(val: Any) -> str:
    # bool before int: isinstance(True, int) is True.
    if val is None:
        return "null"
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, BigInt):
        return str(int(val)) + "n"
    if isinstance(val, int):
        return str(int(val))
    if isinstance(val, (DecimalNumber, decimal.Decimal)):
        return format_decimal(val)
    if isinstance(val, float):
        if not math.isfinite(val):
            raise ExentError(ERR_UNSUPPORTED_TYPE,
                             "{!r} has no EXENT text form".format(val))
        return repr(val)
    if isinstance(val, str):
        return format_string(val)
    if isinstance(val, datetime):
        return "@" + format_iso_date(val)
    raise ExentError(ERR_UNSUPPORTED_TYPE,
                     "unsupported type: {}".format(type(val).__name__))


# ── Containers ────────────────────────────────────────────────

class _Serializer:
    def __init__(self, anchors: Dict[int, str], indent: Indent) -> None:
        self.anchors = anchors
        self.written: Set[int] = set()
        if isinstance(indent, bool) or not indent:
            self.unit, self.newline = "", " "
        elif isinstance(indent, int):
            self.unit, self.newline = (" " * indent, "\n") if indent > 0 else ("", " ")
        else:
            self.unit, self.newline = indent, "\n"

    def emit(self, val: Any, indent: str) -> str:
        prefix = ""
        name: Optional[str] = self.anchors.get(id(val)) if is_anchorable(val) else None
        if name is not None:
            if id(val) in self.written:
                return "*" + name
            self.written.add(id(val))
            prefix = "&" + name + " "

        if isinstance(val, (list, tuple)):
            if not val:
                return prefix + "[]"
            inner = indent + self.unit
            parts = [inner + self.emit(item, inner) for item in val]
            return prefix + self._wrap("[", parts, "]", indent)

        if isinstance(val, (dict, SimpleNamespace)):
            items = object_items(val)
            if not items:
                return prefix + "{}"
            inner = indent + self.unit
            parts = [inner + format_key(k) + ": " + self.emit(v, inner) for k, v in items]
            return prefix + self._wrap("{", parts, "}", indent)

        return prefix + format_scalar(val)

    def _wrap(self, opener: str, parts, closer: str, indent: str) -> str:
        nl = self.newline
        return opener + nl + ("," + nl).join(parts) + nl + indent + closer


def stringify(value: Any, indent: Indent = DEFAULT_INDENT) -> str:
    """Serialize a value graph to EXENT text.

    ``indent`` is spaces per level (int), a literal indent unit (str), or
    0 / "" / None for single-line output.
    """
    return _Serializer(detect_anchors(value), indent).emit(value, "")

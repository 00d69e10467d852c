"""B-EXENT: tagged binary encoding of the EXENT value model.

Every value is one tag byte followed by a fixed or length-prefixed
payload.  All multi-byte numbers are big-endian.

    NULL     (0x00)  (no payload)
    TRUE     (0x01)  (no payload)
    FALSE    (0x02)  (no payload)
    INT32    (0x03)  int32
    FLOAT64  (0x04)  double
    BIGINT64 (0x05)  int64
    STRING   (0x06)  u32 length + UTF-8 bytes
    DATE     (0x07)  double, milliseconds since the Unix epoch
    ARRAY    (0x08)  u32 count + values
    OBJECT   (0x09)  u32 count + (u32 key length + UTF-8 key + value)*
    DECIMAL  (0x0A)  double
    REF      (0x0B)  u32 index into the reference table

The reference table is implicit: every ARRAY and OBJECT takes the next
index at the moment its tag is written (or read), before any of its
children.  That ordering is what lets a child point back at a parent that
is still being filled in.  Encoder and decoder must agree on it exactly,
so tuples consume an index too even though they are never looked up.
"""

from __future__ import annotations

import decimal
import logging
import struct
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, List, Tuple

from ._constants import (
    DEFAULT_MAX_DEPTH,
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    TAG_ARRAY,
    TAG_BIGINT64,
    TAG_DATE,
    TAG_DECIMAL,
    TAG_FALSE,
    TAG_FLOAT64,
    TAG_INT32,
    TAG_NULL,
    TAG_OBJECT,
    TAG_REF,
    TAG_STRING,
    TAG_TRUE,
    U32_MAX,
)
from ._errors import (
    ERR_DANGLING_REFERENCE,
    ERR_INVALID_UTF8,
    ERR_MAX_DEPTH,
    ERR_PRECISION_LOSS,
    ERR_TRAILING_INPUT,
    ERR_TRUNCATED,
    ERR_UNKNOWN_TAG,
    ERR_UNSUPPORTED_TYPE,
    ExentError,
)
from ._types import (
    BigInt,
    DecimalNumber,
    date_to_millis,
    millis_to_date,
    object_items,
)

logger = logging.getLogger(__name__)

_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")
_F64 = struct.Struct(">d")


# ── Encode ────────────────────────────────────────────────────

def _u32be(n: int) -> bytes:
    if n < 0 or n > U32_MAX:
        raise ExentError(ERR_UNSUPPORTED_TYPE, "length {} does not fit in u32".format(n))
    return _U32.pack(n)


def _encode_str(s: str) -> bytes:
    try:
        raw = s.encode("utf-8")
    except UnicodeEncodeError:
        raise ExentError(ERR_INVALID_UTF8, "string contains a lone surrogate")
    return _u32be(len(raw)) + raw


def _int64(val: int) -> bytes:
    if val < INT64_MIN or val > INT64_MAX:
        raise ExentError(ERR_PRECISION_LOSS,
                         "integer {} does not fit in BIGINT64".format(val))
    return bytes([TAG_BIGINT64]) + _I64.pack(val)


class _Packer:
    def __init__(self) -> None:
        self.parts: List[bytes] = []
        self.refs: Dict[int, int] = {}
        self.count = 0

    def encode(self, val: Any) -> None:
        out = self.parts

        if val is None:
            out.append(bytes([TAG_NULL]))
            return

        # bool before int: True is an int in Python.
        if isinstance(val, bool):
            out.append(bytes([TAG_TRUE if val else TAG_FALSE]))
            return

        # BigInt always takes the 64-bit slot so its tag survives the trip.
        if isinstance(val, BigInt):
            out.append(_int64(int(val)))
            return

        if isinstance(val, int):
            if INT32_MIN <= val <= INT32_MAX:
                out.append(bytes([TAG_INT32]) + _I32.pack(val))
            else:
                out.append(_int64(int(val)))
            return

        if isinstance(val, (DecimalNumber, decimal.Decimal)):
            out.append(bytes([TAG_DECIMAL]) + _F64.pack(float(val)))
            return

        if isinstance(val, float):
            out.append(bytes([TAG_FLOAT64]) + _F64.pack(val))
            return

        if isinstance(val, str):
            out.append(bytes([TAG_STRING]) + _encode_str(val))
            return

        if isinstance(val, datetime):
            out.append(bytes([TAG_DATE]) + _F64.pack(float(date_to_millis(val))))
            return

        if isinstance(val, (list, tuple, dict, SimpleNamespace)):
            if not isinstance(val, tuple):
                idx = self.refs.get(id(val))
                if idx is not None:
                    out.append(bytes([TAG_REF]) + _U32.pack(idx))
                    return
                self.refs[id(val)] = self.count
            self.count += 1

            if isinstance(val, (list, tuple)):
                out.append(bytes([TAG_ARRAY]) + _u32be(len(val)))
                for item in val:
                    self.encode(item)
                return

            items = object_items(val)
            out.append(bytes([TAG_OBJECT]) + _u32be(len(items)))
            for k, v in items:
                if not isinstance(k, str):
                    raise ExentError(ERR_UNSUPPORTED_TYPE,
                                     "object key must be a string, got {}".format(
                                         type(k).__name__))
                out.append(_encode_str(k))
                self.encode(v)
            return

        raise ExentError(ERR_UNSUPPORTED_TYPE,
                         "unsupported type: {}".format(type(val).__name__))


def pack(value: Any) -> bytes:
    """Encode a value graph as B-EXENT bytes."""
    packer = _Packer()
    packer.encode(value)
    data = b"".join(packer.parts)
    logger.debug("packed %d bytes, %d container(s)", len(data), packer.count)
    return data


# ── Decode ────────────────────────────────────────────────────

class _Unpacker:
    def __init__(self, buf: bytes, max_depth: int, associative: bool) -> None:
        self.buf = buf
        self.max_depth = max_depth
        self.associative = associative
        self.refs: List[Any] = []

    def _need(self, off: int, n: int, what: str) -> None:
        if off + n > len(self.buf):
            raise ExentError(ERR_TRUNCATED, "truncated {}".format(what), off)

    def _u32(self, off: int, what: str) -> Tuple[int, int]:
        self._need(off, 4, what)
        return _U32.unpack_from(self.buf, off)[0], off + 4

    def _f64(self, off: int, what: str) -> Tuple[float, int]:
        self._need(off, 8, what)
        return _F64.unpack_from(self.buf, off)[0], off + 8

    def _text(self, off: int, what: str) -> Tuple[str, int]:
        n, off = self._u32(off, what + " length")
        self._need(off, n, what)
        try:
            s = self.buf[off:off + n].decode("utf-8")
        except UnicodeDecodeError:
            raise ExentError(ERR_INVALID_UTF8, "invalid UTF-8 in " + what, off)
        return s, off + n

    def _enter(self, depth: int, off: int) -> None:
        if depth + 1 > self.max_depth:
            raise ExentError(ERR_MAX_DEPTH,
                             "nesting depth exceeds {}".format(self.max_depth), off)

    def decode(self, off: int, depth: int) -> Tuple[Any, int]:
        buf = self.buf
        if off >= len(buf):
            raise ExentError(ERR_TRUNCATED, "truncated tag", off)
        tag = buf[off]
        off += 1

        if tag == TAG_NULL:
            return None, off
        if tag == TAG_TRUE:
            return True, off
        if tag == TAG_FALSE:
            return False, off

        if tag == TAG_INT32:
            self._need(off, 4, "int32 payload")
            return _I32.unpack_from(buf, off)[0], off + 4

        if tag == TAG_BIGINT64:
            self._need(off, 8, "bigint64 payload")
            return BigInt(_I64.unpack_from(buf, off)[0]), off + 8

        if tag == TAG_FLOAT64:
            return self._f64(off, "float64 payload")

        if tag == TAG_DECIMAL:
            val, off = self._f64(off, "decimal payload")
            return DecimalNumber(val), off

        if tag == TAG_DATE:
            ms, end = self._f64(off, "date payload")
            return millis_to_date(ms, off), end

        if tag == TAG_STRING:
            return self._text(off, "string")

        if tag == TAG_REF:
            idx, end = self._u32(off, "ref index")
            # Never recurse into the target; hand back the known instance.
            if idx >= len(self.refs):
                raise ExentError(ERR_DANGLING_REFERENCE,
                                 "reference {} with only {} container(s) defined".format(
                                     idx, len(self.refs)),
                                 off - 1)
            return self.refs[idx], end

        if tag == TAG_ARRAY:
            self._enter(depth, off - 1)
            count, off = self._u32(off, "array count")
            arr: List[Any] = []
            self.refs.append(arr)
            for _ in range(count):
                item, off = self.decode(off, depth + 1)
                arr.append(item)
            return arr, off

        if tag == TAG_OBJECT:
            self._enter(depth, off - 1)
            count, off = self._u32(off, "object count")
            obj: Any = {} if self.associative else SimpleNamespace()
            self.refs.append(obj)
            for _ in range(count):
                key, off = self._text(off, "object key")
                val, off = self.decode(off, depth + 1)
                if self.associative:
                    obj[key] = val
                else:
                    vars(obj)[key] = val
            return obj, off

        raise ExentError(ERR_UNKNOWN_TAG, "unknown B-EXENT tag 0x{:02x}".format(tag), off - 1)


def unpack(data: bytes, *,
           max_depth: int = DEFAULT_MAX_DEPTH,
           associative: bool = True) -> Any:
    """Decode B-EXENT bytes back into a value graph."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ExentError(ERR_UNSUPPORTED_TYPE,
                         "unpack expects bytes, got {}".format(type(data).__name__))
    unpacker = _Unpacker(bytes(data), max_depth, associative)
    value, end = unpacker.decode(0, 0)
    if end != len(unpacker.buf):
        raise ExentError(ERR_TRAILING_INPUT,
                         "{} trailing byte(s) after root value".format(len(unpacker.buf) - end),
                         end)
    logger.debug("unpacked %d bytes, %d container(s)", end, len(unpacker.refs))
    return value

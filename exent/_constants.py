"""EXENT constants: B-EXENT tag table, integer bounds, and default limits."""

from __future__ import annotations

__format_version__ = "1.0"

# ── B-EXENT tags (single byte each) ──────────────────────────
TAG_NULL: int = 0x00
TAG_TRUE: int = 0x01
TAG_FALSE: int = 0x02
TAG_INT32: int = 0x03      # payload: int32 big-endian
TAG_FLOAT64: int = 0x04    # payload: IEEE-754 double big-endian
TAG_BIGINT64: int = 0x05   # payload: int64 big-endian
TAG_STRING: int = 0x06     # payload: u32be length + UTF-8 bytes
TAG_DATE: int = 0x07       # payload: double, milliseconds since Unix epoch
TAG_ARRAY: int = 0x08      # payload: u32be count + values
TAG_OBJECT: int = 0x09     # payload: u32be count + (u32be klen, key, value)*
TAG_DECIMAL: int = 0x0A    # payload: IEEE-754 double big-endian
TAG_REF: int = 0x0B        # payload: u32be reference-table index

# ── Integer ranges ───────────────────────────────────────────
# Python ints are arbitrary-precision, so the binary path range-checks
# explicitly before choosing INT32 / BIGINT64.
INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1
U32_MAX: int = 0xFFFFFFFF

# ── Defaults ─────────────────────────────────────────────────
# Depth counts nested Array/Object bodies on the current path.  Exactly
# DEFAULT_MAX_DEPTH levels are accepted; one more is ERR_MAX_DEPTH.
DEFAULT_MAX_DEPTH: int = 200
DEFAULT_INDENT: int = 4

# Text keywords.  Strings equal to one of these must be quoted on output.
KEYWORDS = {"true": True, "false": False, "null": None}

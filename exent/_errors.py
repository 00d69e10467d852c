"""EXENT error codes and the exception class.

Every failure in the tokenizer, parser, serializer and binary codec is an
``ExentError``.  Errors are terminal: nothing is returned for a document that
fails part-way.  The ``.code`` attribute is one of the ERR_* strings below and
is what callers (and the conformance vectors) compare against.
"""

from __future__ import annotations

from typing import Optional

# ── Text errors ──────────────────────────────────────────────
ERR_UNTERMINATED_STRING: str = "ERR_UNTERMINATED_STRING"
ERR_UNTERMINATED_MULTILINE_STRING: str = "ERR_UNTERMINATED_MULTILINE_STRING"
ERR_UNTERMINATED_OBJECT: str = "ERR_UNTERMINATED_OBJECT"
ERR_UNTERMINATED_ARRAY: str = "ERR_UNTERMINATED_ARRAY"
ERR_INVALID_ESCAPE: str = "ERR_INVALID_ESCAPE"
ERR_INVALID_DATE: str = "ERR_INVALID_DATE"
ERR_UNDEFINED_REFERENCE: str = "ERR_UNDEFINED_REFERENCE"
ERR_UNEXPECTED_TOKEN: str = "ERR_UNEXPECTED_TOKEN"

# ── Binary errors ────────────────────────────────────────────
ERR_DANGLING_REFERENCE: str = "ERR_DANGLING_REFERENCE"
ERR_UNKNOWN_TAG: str = "ERR_UNKNOWN_TAG"
ERR_TRUNCATED: str = "ERR_TRUNCATED"
ERR_INVALID_UTF8: str = "ERR_INVALID_UTF8"

# ── Shared ───────────────────────────────────────────────────
ERR_MAX_DEPTH: str = "ERR_MAX_DEPTH"
ERR_TRAILING_INPUT: str = "ERR_TRAILING_INPUT"

# ── Encoding side ────────────────────────────────────────────
ERR_UNSUPPORTED_TYPE: str = "ERR_UNSUPPORTED_TYPE"
ERR_PRECISION_LOSS: str = "ERR_PRECISION_LOSS"   # int outside int64 in B-EXENT


class ExentError(Exception):
    """Exception for EXENT / B-EXENT processing errors.

    ``pos`` is the character offset (text) or byte offset (binary) where the
    problem was detected, when one is known.
    """

    def __init__(self, code: str, msg: str = "", pos: Optional[int] = None) -> None:
        if pos is not None:
            msg = "{} at position {}".format(msg or code, pos)
        super().__init__(msg or code)
        self.code = code
        self.pos = pos

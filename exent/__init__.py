"""exent: EXENT text notation and B-EXENT binary encoding.

EXENT is a forgiving, human-writable superset of JSON's data model:
optional commas and key quotes, comments, backtick multiline strings,
``123n`` big integers, ``1.5d`` decimals, ``@2025-01-01T00:00:00Z`` dates,
and ``&anchor`` / ``*ref`` for shared and cyclic structure.  B-EXENT
carries the same model as tagged bytes.

Quick start:
    >>> from exent import parse, stringify
    >>> doc = parse('{ role: &r { name: admin }, users: [ { role: *r } ] }')
    >>> doc["users"][0]["role"] is doc["role"]
    True
    >>> o = {}
    >>> o["self"] = o
    >>> stringify(o, indent=0)
    '&a0 { self: *a0 }'
"""

from __future__ import annotations

from typing import Any

from ._binary import pack, unpack
from ._constants import DEFAULT_INDENT, DEFAULT_MAX_DEPTH
from ._errors import (
    ERR_DANGLING_REFERENCE,
    ERR_INVALID_DATE,
    ERR_INVALID_ESCAPE,
    ERR_INVALID_UTF8,
    ERR_MAX_DEPTH,
    ERR_PRECISION_LOSS,
    ERR_TRAILING_INPUT,
    ERR_TRUNCATED,
    ERR_UNDEFINED_REFERENCE,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNKNOWN_TAG,
    ERR_UNSUPPORTED_TYPE,
    ERR_UNTERMINATED_ARRAY,
    ERR_UNTERMINATED_MULTILINE_STRING,
    ERR_UNTERMINATED_OBJECT,
    ERR_UNTERMINATED_STRING,
    ExentError,
)
from ._json_adapter import from_json
from ._parser import parse_tokens
from ._stringify import stringify
from ._tokenizer import Token, tokenize
from ._types import BigInt, DecimalNumber

__version__ = "1.0.0"

__all__ = [
    # Text
    "parse",
    "parse_tokens",
    "tokenize",
    "stringify",
    # Binary
    "pack",
    "unpack",
    # Import
    "from_json",
    # Types
    "BigInt",
    "DecimalNumber",
    "Token",
    # Exception
    "ExentError",
    # Error codes
    "ERR_UNTERMINATED_STRING",
    "ERR_UNTERMINATED_MULTILINE_STRING",
    "ERR_UNTERMINATED_OBJECT",
    "ERR_UNTERMINATED_ARRAY",
    "ERR_INVALID_ESCAPE",
    "ERR_INVALID_DATE",
    "ERR_UNDEFINED_REFERENCE",
    "ERR_UNEXPECTED_TOKEN",
    "ERR_DANGLING_REFERENCE",
    "ERR_UNKNOWN_TAG",
    "ERR_TRUNCATED",
    "ERR_INVALID_UTF8",
    "ERR_MAX_DEPTH",
    "ERR_TRAILING_INPUT",
    "ERR_UNSUPPORTED_TYPE",
    "ERR_PRECISION_LOSS",
    # Defaults
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_INDENT",
]


def parse(text: str, *,
          max_depth: int = DEFAULT_MAX_DEPTH,
          associative: bool = True) -> Any:
    """Parse EXENT text into a value graph.

    Objects become dicts, or ``types.SimpleNamespace`` instances when
    ``associative`` is False.  Shared ``&anchor`` / ``*ref`` nodes come back
    as the same Python object, including self-references.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError:
            raise ExentError(ERR_INVALID_UTF8, "EXENT text is not valid UTF-8")
    return parse_tokens(tokenize(text), max_depth=max_depth, associative=associative)

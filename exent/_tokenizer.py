"""EXENT tokenizer: raw text to a flat list of typed tokens.

Whitespace and comments are dropped here, so the parser only ever sees
meaningful tokens.  Scalar classification (keyword, BigInt, Decimal, Int,
Float, bare identifier) is decided once, at this stage, and carried on the
token as a Python value of the right type.

Token kinds:

    punct             one of { } [ ] : ,
    string            "..." or '...' with escapes resolved
    multiline_string  `...` raw, no escapes
    date              @ISO-8601, already a UTC datetime
    anchor / ref      &name / *name
    literal           true / false / null
    bigint            digits + n      -> BigInt
    decimal           digits + d      -> DecimalNumber
    number            int or float
    identifier        any other bare word, kept as str
"""

from __future__ import annotations

import re
from typing import Any, List, NamedTuple, Tuple

from ._constants import KEYWORDS
from ._errors import (
    ERR_INVALID_ESCAPE,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNTERMINATED_MULTILINE_STRING,
    ERR_UNTERMINATED_STRING,
    ExentError,
)
from ._types import BigInt, DecimalNumber, parse_iso_date

T_PUNCT = "punct"
T_STRING = "string"
T_MULTILINE_STRING = "multiline_string"
T_DATE = "date"
T_ANCHOR = "anchor"
T_REF = "ref"
T_LITERAL = "literal"
T_BIGINT = "bigint"
T_DECIMAL = "decimal"
T_NUMBER = "number"
T_IDENTIFIER = "identifier"


class Token(NamedTuple):
    kind: str
    value: Any
    pos: int


_WHITESPACE = " \t\n\r\f\v"
_PUNCT = "{}[]:,"

_WORD_RE = re.compile(r"[a-zA-Z0-9._+-]+")
_NAME_RE = re.compile(r"[a-zA-Z0-9_-]+")
_DATE_RE = re.compile(r"[0-9\-T:Z.+]*")
_HEX4_RE = re.compile(r"[0-9a-fA-F]{4}")

# Plain runs inside a quoted string: everything up to the quote or a backslash.
_QUOTED_RUN = {
    '"': re.compile(r'[^"\\]+'),
    "'": re.compile(r"[^'\\]+"),
}

_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
}

# Classification order matters: BigInt and Decimal are checked before the
# plain number patterns because "12d" and "12n" would otherwise be words.
_BIGINT_RE = re.compile(r"-?[0-9]+n")
_DECIMAL_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?d")
_INT_RE = re.compile(r"-?[0-9]+")
_FLOAT_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?")


def classify_word(word: str) -> Tuple[str, Any]:
    """Map a bare word to its token kind and Python value."""
    if word in KEYWORDS:
        return T_LITERAL, KEYWORDS[word]
    if _BIGINT_RE.fullmatch(word):
        return T_BIGINT, BigInt(int(word[:-1]))
    if _DECIMAL_RE.fullmatch(word):
        return T_DECIMAL, DecimalNumber(float(word[:-1]))
    if _INT_RE.fullmatch(word):
        return T_NUMBER, int(word)
    if _FLOAT_RE.fullmatch(word):
        return T_NUMBER, float(word)
    return T_IDENTIFIER, word


def _join_surrogates(s: str) -> str:
    r"""Combine \uXXXX surrogate pairs into real code points.

    \u escapes are UTF-16 code units, so a non-BMP character arrives as two
    halves.  A lone half cannot be represented in UTF-8 and becomes U+FFFD.
    """
    return s.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.length = len(text)

    def skip_ignorable(self) -> None:
        text = self.text
        while self.pos < self.length:
            ch = text[self.pos]
            if ch in _WHITESPACE:
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos + 2)
                self.pos = self.length if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                # Non-nesting.  An unclosed block comment swallows the rest
                # of the input without error.
                end = text.find("*/", self.pos + 2)
                self.pos = self.length if end < 0 else end + 2
            else:
                return

    def tokens(self) -> List[Token]:
        out: List[Token] = []
        text = self.text
        while True:
            self.skip_ignorable()
            if self.pos >= self.length:
                return out
            start = self.pos
            ch = text[start]

            if ch in _PUNCT:
                self.pos += 1
                out.append(Token(T_PUNCT, ch, start))
            elif ch == '"' or ch == "'":
                out.append(Token(T_STRING, self.read_quoted(), start))
            elif ch == "`":
                out.append(Token(T_MULTILINE_STRING, self.read_multiline(), start))
            elif ch == "@":
                m = _DATE_RE.match(text, start + 1)
                self.pos = m.end()
                out.append(Token(T_DATE, parse_iso_date(m.group(), start), start))
            elif ch == "&" or ch == "*":
                m = _NAME_RE.match(text, start + 1)
                if not m:
                    raise ExentError(ERR_UNEXPECTED_TOKEN,
                                     "expected a name after {!r}".format(ch), start)
                self.pos = m.end()
                kind = T_ANCHOR if ch == "&" else T_REF
                out.append(Token(kind, m.group(), start))
            else:
                m = _WORD_RE.match(text, start)
                if not m:
                    raise ExentError(ERR_UNEXPECTED_TOKEN,
                                     "unexpected character {!r}".format(ch), start)
                self.pos = m.end()
                kind, value = classify_word(m.group())
                out.append(Token(kind, value, start))

    def read_quoted(self) -> str:
        text = self.text
        start = self.pos
        quote = text[start]
        run = _QUOTED_RUN[quote]
        self.pos += 1
        parts: List[str] = []
        saw_unicode_escape = False

        while self.pos < self.length:
            m = run.match(text, self.pos)
            if m:
                parts.append(m.group())
                self.pos = m.end()
                continue
            ch = text[self.pos]
            self.pos += 1
            if ch == quote:
                s = "".join(parts)
                return _join_surrogates(s) if saw_unicode_escape else s
            # Backslash escape.
            if self.pos >= self.length:
                break
            esc = text[self.pos]
            self.pos += 1
            if esc == "u":
                hexdigits = text[self.pos:self.pos + 4]
                if not _HEX4_RE.fullmatch(hexdigits):
                    raise ExentError(ERR_INVALID_ESCAPE,
                                     "\\u must be followed by 4 hex digits",
                                     self.pos - 2)
                parts.append(chr(int(hexdigits, 16)))
                self.pos += 4
                saw_unicode_escape = True
            else:
                # \" \\ \' and any unknown escape pass the character through.
                parts.append(_ESCAPES.get(esc, esc))

        raise ExentError(ERR_UNTERMINATED_STRING, "unterminated string", start)

    def read_multiline(self) -> str:
        start = self.pos
        end = self.text.find("`", start + 1)
        if end < 0:
            raise ExentError(ERR_UNTERMINATED_MULTILINE_STRING,
                             "unterminated multiline string", start)
        self.pos = end + 1
        return self.text[start + 1:end]


def tokenize(text: str) -> List[Token]:
    """Split EXENT text into tokens.  Raises ExentError on lexical errors."""
    return _Scanner(text).tokens()

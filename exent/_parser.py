"""EXENT parser: recursive descent over the token list.

Grammar (commas are optional filler, so newlines separate members too):

    Value  := Anchor? (Object | Array | Scalar | Ref)
    Object := '{' (Key ':' Value ','*)* '}'
    Array  := '[' (Value ','*)* ']'
    Key    := identifier | string | true | false | null

Anchors are registered *before* a container's members are parsed, so a
member may refer back to its own (still incomplete) parent.  There is no
second pass: a ``*ref`` must appear after its ``&anchor``.
"""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from ._constants import DEFAULT_MAX_DEPTH
from ._errors import (
    ERR_MAX_DEPTH,
    ERR_TRAILING_INPUT,
    ERR_UNDEFINED_REFERENCE,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNTERMINATED_ARRAY,
    ERR_UNTERMINATED_OBJECT,
    ExentError,
)
from ._tokenizer import (
    T_ANCHOR,
    T_BIGINT,
    T_DATE,
    T_DECIMAL,
    T_IDENTIFIER,
    T_LITERAL,
    T_MULTILINE_STRING,
    T_NUMBER,
    T_PUNCT,
    T_REF,
    T_STRING,
    Token,
)

logger = logging.getLogger(__name__)

_SCALAR_KINDS = frozenset([
    T_STRING, T_MULTILINE_STRING, T_NUMBER, T_BIGINT,
    T_DECIMAL, T_DATE, T_LITERAL, T_IDENTIFIER,
])

# Keyword keys are coerced back to their spelling: {true: 1} has key "true".
_LITERAL_KEYS = {True: "true", False: "false", None: "null"}


class _Parser:
    def __init__(self, tokens: List[Token], max_depth: int, associative: bool) -> None:
        self.tokens = tokens
        self.pos = 0
        self.depth = 0
        self.max_depth = max_depth
        self.associative = associative
        self.anchors: Dict[str, Any] = {}

    def _peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _is_punct(self, tok: Optional[Token], ch: str) -> bool:
        return tok is not None and tok.kind == T_PUNCT and tok.value == ch

    def parse(self) -> Any:
        value = self._value()
        tok = self._peek()
        if tok is not None:
            raise ExentError(ERR_TRAILING_INPUT,
                             "unexpected {} token after document".format(tok.kind),
                             tok.pos)
        if self.anchors:
            logger.debug("resolved %d anchor(s)", len(self.anchors))
        return value

    def _enter(self, tok: Token) -> None:
        self.depth += 1
        if self.depth > self.max_depth:
            raise ExentError(ERR_MAX_DEPTH,
                             "nesting depth exceeds {}".format(self.max_depth),
                             tok.pos)

    def _value(self) -> Any:
        anchor: Optional[str] = None
        tok = self._peek()
        if tok is not None and tok.kind == T_ANCHOR:
            anchor = tok.value
            self.pos += 1
            tok = self._peek()
        if tok is None:
            raise ExentError(ERR_UNEXPECTED_TOKEN, "unexpected end of input")

        if tok.kind == T_PUNCT and tok.value in "{[":
            container: Any
            if tok.value == "{":
                container = {} if self.associative else SimpleNamespace()
            else:
                container = []
            # Register before descending so self-references resolve.
            if anchor is not None:
                self.anchors[anchor] = container
            self._enter(tok)
            if tok.value == "{":
                self._object(container)
            else:
                self._array(container)
            self.depth -= 1
            return container

        if tok.kind in _SCALAR_KINDS:
            self.pos += 1
            value = tok.value
        elif tok.kind == T_REF:
            self.pos += 1
            if tok.value not in self.anchors:
                raise ExentError(ERR_UNDEFINED_REFERENCE,
                                 "undefined reference *{}".format(tok.value),
                                 tok.pos)
            value = self.anchors[tok.value]
        else:
            raise ExentError(ERR_UNEXPECTED_TOKEN,
                             "unexpected {} {!r}".format(tok.kind, tok.value),
                             tok.pos)

        if anchor is not None:
            self.anchors[anchor] = value
        return value

    def _skip_commas(self) -> None:
        while self._is_punct(self._peek(), ","):
            self.pos += 1

    def _object(self, obj: Any) -> None:
        opener = self.tokens[self.pos]
        self.pos += 1
        while True:
            self._skip_commas()
            tok = self._peek()
            if tok is None:
                raise ExentError(ERR_UNTERMINATED_OBJECT, "unterminated object", opener.pos)
            if self._is_punct(tok, "}"):
                self.pos += 1
                return

            if tok.kind == T_IDENTIFIER or tok.kind == T_STRING:
                key = tok.value
            elif tok.kind == T_LITERAL:
                key = _LITERAL_KEYS[tok.value]
            else:
                raise ExentError(ERR_UNEXPECTED_TOKEN,
                                 "expected identifier or string as object key, "
                                 "got {} {!r}".format(tok.kind, tok.value),
                                 tok.pos)
            self.pos += 1

            colon = self._peek()
            if colon is None:
                raise ExentError(ERR_UNTERMINATED_OBJECT, "unterminated object", opener.pos)
            if not self._is_punct(colon, ":"):
                raise ExentError(ERR_UNEXPECTED_TOKEN,
                                 "expected ':' after key {!r}".format(key), colon.pos)
            self.pos += 1
            if self._peek() is None:
                raise ExentError(ERR_UNTERMINATED_OBJECT, "unterminated object", opener.pos)

            value = self._value()
            # Duplicate keys: last write wins.
            if isinstance(obj, dict):
                obj[key] = value
            else:
                vars(obj)[key] = value

    def _array(self, arr: list) -> None:
        opener = self.tokens[self.pos]
        self.pos += 1
        while True:
            self._skip_commas()
            tok = self._peek()
            if tok is None:
                raise ExentError(ERR_UNTERMINATED_ARRAY, "unterminated array", opener.pos)
            if self._is_punct(tok, "]"):
                self.pos += 1
                return
            arr.append(self._value())


def parse_tokens(tokens: List[Token], *,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 associative: bool = True) -> Any:
    """Build a value graph from a token list produced by tokenize()."""
    return _Parser(tokens, max_depth, associative).parse()

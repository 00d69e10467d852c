"""Tokenizer tests: token kinds, scalar classification, strings and comments."""

from __future__ import annotations

import os
import sys
import unittest
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from exent import (
    BigInt,
    DecimalNumber,
    ERR_INVALID_DATE,
    ERR_INVALID_ESCAPE,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNTERMINATED_MULTILINE_STRING,
    ERR_UNTERMINATED_STRING,
    ExentError,
    tokenize,
)


def kinds(text):
    return [t.kind for t in tokenize(text)]


def values(text):
    return [t.value for t in tokenize(text)]


# ── Punctuation, whitespace, comments ─────────────────────────

class TestStructure(unittest.TestCase):
    def test_punctuation(self):
        toks = tokenize("{ } [ ] : ,")
        self.assertEqual([t.kind for t in toks], ["punct"] * 6)
        self.assertEqual([t.value for t in toks], list("{}[]:,"))

    def test_positions(self):
        toks = tokenize("  [ab]")
        self.assertEqual([t.pos for t in toks], [2, 3, 5])

    def test_line_comment(self):
        self.assertEqual(values("1 // two\n3"), [1, 3])

    def test_line_comment_at_end(self):
        self.assertEqual(values("1 // trailing"), [1])

    def test_block_comment(self):
        self.assertEqual(values("1 /* 2\n 2 */ 3"), [1, 3])

    def test_block_comments_do_not_nest(self):
        # The first */ closes the comment; what follows is ordinary input.
        self.assertEqual(values("/* a /* b */ c"), ["c"])

    def test_unclosed_block_comment_consumes_rest(self):
        self.assertEqual(values("1 /* 2 3"), [1])

    def test_empty_input(self):
        self.assertEqual(tokenize(""), [])
        self.assertEqual(tokenize("  \n\t // nothing"), [])

    def test_unexpected_character(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize("[1, #]")
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_TOKEN)
        self.assertEqual(ctx.exception.pos, 4)

    def test_lone_slash_is_unexpected(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize("1 / 2")
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_TOKEN)


# ── Bare words ────────────────────────────────────────────────

class TestClassification(unittest.TestCase):
    def test_keywords(self):
        toks = tokenize("true false null")
        self.assertEqual([t.kind for t in toks], ["literal"] * 3)
        self.assertEqual([t.value for t in toks], [True, False, None])

    def test_plain_int(self):
        tok = tokenize("123")[0]
        self.assertEqual(tok.kind, "number")
        self.assertEqual(tok.value, 123)
        self.assertIs(type(tok.value), int)

    def test_negative_int(self):
        self.assertEqual(values("-7"), [-7])

    def test_float_forms(self):
        self.assertEqual(values("1.5 -2.25 1e3 2.5E-2"), [1.5, -2.25, 1000.0, 0.025])
        for v in values("1.5 1e3"):
            self.assertIs(type(v), float)

    def test_bigint(self):
        tok = tokenize("12345678901234567890n")[0]
        self.assertEqual(tok.kind, "bigint")
        self.assertIsInstance(tok.value, BigInt)
        self.assertEqual(tok.value, 12345678901234567890)

    def test_negative_bigint(self):
        tok = tokenize("-5n")[0]
        self.assertEqual(tok.kind, "bigint")
        self.assertEqual(tok.value, -5)

    def test_decimal(self):
        tok = tokenize("123.45d")[0]
        self.assertEqual(tok.kind, "decimal")
        self.assertIsInstance(tok.value, DecimalNumber)
        self.assertEqual(tok.value, 123.45)

    def test_decimal_without_fraction(self):
        tok = tokenize("7d")[0]
        self.assertEqual(tok.kind, "decimal")
        self.assertEqual(tok.value, 7.0)

    def test_identifier(self):
        toks = tokenize("hello_world some-thing v1.2.3 +5")
        self.assertEqual([t.kind for t in toks], ["identifier"] * 4)
        self.assertEqual([t.value for t in toks], ["hello_world", "some-thing", "v1.2.3", "+5"])

    def test_suffix_on_float_is_identifier(self):
        """1e5n is neither BigInt nor Decimal nor number."""
        self.assertEqual(kinds("1e5n 1.5n"), ["identifier", "identifier"])

    def test_keyword_prefix_is_identifier(self):
        self.assertEqual(tokenize("trueish")[0].kind, "identifier")


# ── Quoted strings ────────────────────────────────────────────

class TestQuotedStrings(unittest.TestCase):
    def test_double_and_single_quotes(self):
        self.assertEqual(values('"a b" \'c d\''), ["a b", "c d"])

    def test_other_quote_is_literal(self):
        self.assertEqual(values('"it\'s" \'say "hi"\''), ["it's", 'say "hi"'])

    def test_escapes(self):
        self.assertEqual(values(r'"\n\r\t\b\f\"\\"'), ["\n\r\t\b\f\"\\"])

    def test_unknown_escape_passes_through(self):
        self.assertEqual(values(r'"\q\/"'), ["q/"])

    def test_unicode_escape(self):
        self.assertEqual(values(r'"caf\u00e9"'), ["caf\u00e9"])

    def test_surrogate_pair(self):
        self.assertEqual(values(r'"\ud83d\ude00"'), ["\U0001F600"])

    def test_lone_surrogate_replaced(self):
        self.assertEqual(values(r'"\ud83d"'), ["\ufffd"])

    def test_short_unicode_escape(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize(r'"\u12"')
        self.assertEqual(ctx.exception.code, ERR_INVALID_ESCAPE)

    def test_non_hex_unicode_escape(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize(r'"\uzzzz"')
        self.assertEqual(ctx.exception.code, ERR_INVALID_ESCAPE)

    def test_unterminated(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize('  "abc')
        self.assertEqual(ctx.exception.code, ERR_UNTERMINATED_STRING)
        self.assertEqual(ctx.exception.pos, 2)

    def test_unterminated_after_backslash(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize('"abc\\')
        self.assertEqual(ctx.exception.code, ERR_UNTERMINATED_STRING)

    def test_raw_newline_allowed(self):
        self.assertEqual(values('"a\nb"'), ["a\nb"])


# ── Multiline strings ─────────────────────────────────────────

class TestMultilineStrings(unittest.TestCase):
    def test_raw_content(self):
        tok = tokenize("`line 1\n  line \\n 2`")[0]
        self.assertEqual(tok.kind, "multiline_string")
        self.assertEqual(tok.value, "line 1\n  line \\n 2")

    def test_empty(self):
        self.assertEqual(values("``"), [""])

    def test_unterminated(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize("`abc")
        self.assertEqual(ctx.exception.code, ERR_UNTERMINATED_MULTILINE_STRING)


# ── Dates, anchors, references ────────────────────────────────

class TestSigils(unittest.TestCase):
    def test_date_utc(self):
        tok = tokenize("@2025-03-04T05:06:07.891Z")[0]
        self.assertEqual(tok.kind, "date")
        self.assertEqual(tok.value,
                         datetime(2025, 3, 4, 5, 6, 7, 891000, tzinfo=timezone.utc))

    def test_reduced_precision_dates(self):
        self.assertEqual(values("@2025 @2025-06"),
                         [datetime(2025, 1, 1, tzinfo=timezone.utc),
                          datetime(2025, 6, 1, tzinfo=timezone.utc)])

    def test_reduced_precision_month_checked(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize("@2025-13")
        self.assertEqual(ctx.exception.code, ERR_INVALID_DATE)

    def test_date_only(self):
        self.assertEqual(values("@2025-03-04")[0],
                         datetime(2025, 3, 4, tzinfo=timezone.utc))

    def test_date_offset_normalized(self):
        self.assertEqual(values("@2025-03-04T10:00:00-05:00")[0],
                         datetime(2025, 3, 4, 15, 0, tzinfo=timezone.utc))

    def test_date_truncates_to_millis(self):
        self.assertEqual(values("@2025-03-04T00:00:00.123456Z")[0].microsecond, 123000)

    def test_date_stops_at_delimiter(self):
        self.assertEqual(kinds("[@2025-03-04,1]"), ["punct", "date", "punct", "number", "punct"])

    def test_invalid_date(self):
        for text in ["@", "@2025-02-30", "@yesterday", "@2025-01-01T25:00:00Z", "@12:00"]:
            with self.subTest(text=text):
                with self.assertRaises(ExentError) as ctx:
                    tokenize(text)
                self.assertEqual(ctx.exception.code, ERR_INVALID_DATE)

    def test_anchor_and_ref(self):
        toks = tokenize("&node-1 *node_2")
        self.assertEqual([(t.kind, t.value) for t in toks],
                         [("anchor", "node-1"), ("ref", "node_2")])

    def test_anchor_without_name(self):
        with self.assertRaises(ExentError) as ctx:
            tokenize("& x")
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_TOKEN)


if __name__ == "__main__":
    unittest.main()

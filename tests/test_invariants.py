"""Property tests over randomly generated value graphs.

Graphs are built with shared and cyclic containers: whenever a container
is needed, an existing one (possibly an ancestor still being filled) is
reused with some probability.  Every graph is pushed through both codecs
and compared structurally *and* by identity layout.

Environment:
    EXENT_SEED     random seed (default 1337)
    EXENT_TRIALS   graphs per test (default 200)
"""

from __future__ import annotations

import os
import random
import sys
import unittest
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from exent import BigInt, DecimalNumber, pack, parse, stringify, unpack

SEED = int(os.environ.get("EXENT_SEED", "1337"))
TRIALS = int(os.environ.get("EXENT_TRIALS", "200"))
MAX_GEN_DEPTH = 5
MAX_ITEMS = 5
MAX_STR = 16

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ── Generation ────────────────────────────────────────────────

def rand_string(rng: random.Random) -> str:
    out = []
    for _ in range(rng.randint(0, MAX_STR)):
        r = rng.random()
        if r < 0.70:
            out.append(chr(rng.randint(0x20, 0x7E)))
        elif r < 0.80:
            out.append(rng.choice("\n\t`\\\"'"))
        elif r < 0.95:
            out.append(chr(rng.randint(0xA0, 0xD7FF)))
        else:
            out.append(chr(rng.randint(0x10000, 0x10FFFF)))
    return "".join(out)


def rand_scalar(rng: random.Random) -> Any:
    r = rng.random()
    if r < 0.05:
        return None
    if r < 0.10:
        return rng.random() < 0.5
    if r < 0.25:
        return rng.randint(-2 ** 31, 2 ** 31 - 1)
    if r < 0.35:
        return BigInt(rng.randint(-2 ** 63, 2 ** 63 - 1))
    if r < 0.45:
        return rng.uniform(-1e9, 1e9)
    if r < 0.50:
        return DecimalNumber(round(rng.uniform(-1e6, 1e6), 3))
    if r < 0.55:
        return EPOCH + timedelta(milliseconds=rng.randint(-10 ** 12, 10 ** 13))
    if r < 0.65:
        return rng.choice(["true", "null", "plain", "with space", "", "12", "x_1"])
    return rand_string(rng)


class GraphBuilder:
    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.pool: List[Any] = []

    def value(self, depth: int) -> Any:
        rng = self.rng
        if self.pool and rng.random() < 0.15:
            return rng.choice(self.pool)
        if depth >= MAX_GEN_DEPTH or rng.random() < 0.45:
            return rand_scalar(rng)
        if rng.random() < 0.5:
            obj: Dict[str, Any] = {}
            self.pool.append(obj)
            for _ in range(rng.randint(0, MAX_ITEMS)):
                obj[rand_string(rng)] = self.value(depth + 1)
            return obj
        arr: List[Any] = []
        self.pool.append(arr)
        for _ in range(rng.randint(0, MAX_ITEMS)):
            arr.append(self.value(depth + 1))
        return arr

    def root(self) -> Any:
        return self.value(0)


# ── Comparison ────────────────────────────────────────────────

def graph_equal(a: Any, b: Any, fwd: Optional[Dict[int, Any]] = None,
                back: Optional[Dict[int, Any]] = None) -> bool:
    """Structural equality that also requires the same sharing layout.

    Each container in ``a`` must map to exactly one container in ``b`` and
    vice versa, so a shared node cannot come back as two copies (or two
    copies collapse into one).
    """
    if fwd is None:
        fwd, back = {}, {}
    if isinstance(a, (dict, list)):
        if type(a) is not type(b):
            return False
        if id(a) in fwd or id(b) in back:
            return fwd.get(id(a)) is b and back.get(id(b)) is a
        fwd[id(a)] = b
        back[id(b)] = a
        if len(a) != len(b):
            return False
        if isinstance(a, dict):
            if list(a) != list(b):
                return False
            return all(graph_equal(a[k], b[k], fwd, back) for k in a)
        return all(graph_equal(x, y, fwd, back) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


# ── Invariants ────────────────────────────────────────────────

class TestInvariants(unittest.TestCase):
    def graphs(self):
        rng = random.Random(SEED)
        for _ in range(TRIALS):
            yield GraphBuilder(rng).root()

    def test_graph_equal_detects_lost_sharing(self):
        shared = [1]
        self.assertFalse(graph_equal([shared, shared], [[1], [1]]))
        self.assertFalse(graph_equal([[1], [1]], [shared, shared]))

    def test_text_round_trip(self):
        for i, val in enumerate(self.graphs()):
            with self.subTest(trial=i):
                self.assertTrue(graph_equal(val, parse(stringify(val))))

    def test_compact_text_round_trip(self):
        for i, val in enumerate(self.graphs()):
            with self.subTest(trial=i):
                self.assertTrue(graph_equal(val, parse(stringify(val, indent=0))))

    def test_binary_round_trip(self):
        for i, val in enumerate(self.graphs()):
            with self.subTest(trial=i):
                self.assertTrue(graph_equal(val, unpack(pack(val))))

    def test_stringify_idempotent(self):
        for i, val in enumerate(self.graphs()):
            with self.subTest(trial=i):
                text = stringify(val)
                self.assertEqual(stringify(parse(text)), text)

    def test_pack_deterministic(self):
        for i, val in enumerate(self.graphs()):
            with self.subTest(trial=i):
                data = pack(val)
                self.assertEqual(pack(unpack(data)), data)

    def test_codecs_agree(self):
        for i, val in enumerate(self.graphs()):
            with self.subTest(trial=i):
                self.assertEqual(stringify(unpack(pack(val)), indent=0),
                                 stringify(parse(stringify(val)), indent=0))


if __name__ == "__main__":
    unittest.main()

"""Unit tests for normalize and partition."""
from __future__ import annotations

import math
import random

import pytest

from trade_chart.data.normalizer import normalize
from trade_chart.data.partitioner import partition
from trade_chart.types import TradeRecord


def _records(rows: list[list]) -> list[TradeRecord]:
    return [TradeRecord(*row) for row in rows]


EXAMPLE = _records([[3, 10, "sell"], [1, 9, "buy"], [2, 9.5, "buy"], [1, 8, "sell"]])


# ── normalize ─────────────────────────────────────────────────────────────────

def test_normalize_example_keeps_tie_order():
    assert normalize(EXAMPLE) == _records([[1, 9, "buy"], [1, 8, "sell"], [2, 9.5, "buy"], [3, 10, "sell"]])


def test_normalize_does_not_mutate_input():
    before = list(EXAMPLE)
    normalize(EXAMPLE)
    assert EXAMPLE == before


def test_normalize_random_is_sorted_and_stable():
    rng = random.Random(42)
    # price doubles as the received position so stability is checkable
    records = [TradeRecord(rng.randint(0, 20), i, rng.choice(["buy", "sell"])) for i in range(500)]
    out = normalize(records)
    assert len(out) == len(records)
    for a, b in zip(out, out[1:]):
        assert a.timestamp <= b.timestamp
        if a.timestamp == b.timestamp:
            assert a.price < b.price


def test_normalize_empty():
    assert normalize([]) == []


def test_normalize_passes_unorderable_timestamps_through():
    records = _records([[None, 1, "buy"], [5, 2, "buy"], ["x", 3, "sell"], [float("nan"), 4, "buy"], [1, 5, "sell"]])
    out = normalize(records)
    assert len(out) == 5
    assert [r.price for r in out] == [5, 2, 1, 3, 4]


# ── partition ─────────────────────────────────────────────────────────────────

def test_partition_example():
    result = partition(normalize(EXAMPLE))
    assert result.buy == [(1, 9), (2, 9.5)]
    assert result.sell == [(1, 8), (3, 10)]
    assert result.rejected_count == 0


def test_partition_rejects_unknown_side(caplog):
    dataset = normalize(_records([[1, 9, "buy"], [2, 9, "hold"], [3, 9, "sell"]]))
    result = partition(dataset)
    assert result.rejected_count == 1
    assert result.rejected[0].index == 1
    assert "hold" in result.rejected[0].reason
    assert (2, 9) not in result.buy + result.sell
    assert "invalid side" in caplog.text


@pytest.mark.parametrize("side", ["BUY", "", None, 1, ["buy"]])
def test_partition_rejects_odd_tags(side):
    result = partition([TradeRecord(1, 1.0, side)])
    assert result.buy == [] and result.sell == []
    assert result.rejected_count == 1


def test_partition_conservation_and_order():
    rng = random.Random(7)
    sides = ["buy", "sell", "hold", "Buy"]
    dataset = normalize([TradeRecord(rng.randint(0, 50), rng.random(), rng.choice(sides)) for _ in range(300)])
    result = partition(dataset)
    assert len(result.buy) + len(result.sell) + result.rejected_count == len(dataset)
    for series in (result.buy, result.sell):
        timestamps = [ts for ts, _ in series]
        assert timestamps == sorted(timestamps)


def test_partition_default_skips_numeric_checks():
    result = partition(_records([[-1, float("inf"), "buy"], ["t", "p", "sell"]]))
    assert result.buy == [(-1, float("inf"))]
    assert result.sell == [("t", "p")]


def test_partition_strict_rejects_bad_numbers():
    dataset = _records(
        [
            [1, 9.0, "buy"],
            [-1, 9.0, "buy"],
            [1.5, 9.0, "sell"],
            [True, 9.0, "sell"],
            [2, -0.1, "buy"],
            [2, math.nan, "sell"],
            [2, "9", "buy"],
            [3, 0, "sell"],
        ]
    )
    result = partition(dataset, strict=True)
    assert result.buy == [(1, 9.0)]
    assert result.sell == [(3, 0)]
    assert result.rejected_count == 6
    assert len(result) == len(dataset)


# ── huge numbers ──────────────────────────────────────────────────────────────

def test_normalize_orders_ints_beyond_float_range():
    records = _records([[10**400, 1, "buy"], [1, 2, "sell"], [float("inf"), 3, "buy"], [2.5, 4, "sell"]])
    out = normalize(records)
    assert [r.price for r in out] == [2, 4, 1, 3]


def test_partition_strict_rejects_price_beyond_float_range():
    result = partition(_records([[1, 10**400, "buy"], [10**400, 1.0, "sell"]]), strict=True)
    assert result.buy == []
    assert result.sell == [(10**400, 1.0)]
    assert "price out of range" in result.rejected[0].reason

"""Chronological ordering of a raw dataset."""
from __future__ import annotations

import math
from numbers import Real

from trade_chart.types import TradeRecord


def _sort_key(record: TradeRecord) -> tuple[int, Real]:
    ts = record.timestamp
    if isinstance(ts, Real) and not isinstance(ts, bool):
        # ints compare exactly with floats, however large; only floats can be nan/inf
        if isinstance(ts, int) or math.isfinite(ts):
            return (0, ts)
    # unorderable timestamps go last, in received order
    return (1, 0)


def normalize(records: list[TradeRecord]) -> list[TradeRecord]:
    """Return *records* sorted ascending by timestamp.

    The sort is stable: trades sharing a timestamp keep the order in which
    they were received. Nothing is dropped or modified.
    """
    return sorted(records, key=_sort_key)

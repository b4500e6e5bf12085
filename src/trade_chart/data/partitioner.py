"""Split a normalized dataset into buy and sell series."""
from __future__ import annotations

import logging
import math
from numbers import Real

from trade_chart.types import MalformedRecord, PartitionedDataset, TradeRecord, TradeSide

log = logging.getLogger(__name__)


def _numeric_problem(record: TradeRecord) -> str | None:
    ts, price = record.timestamp, record.price
    if isinstance(ts, bool) or not isinstance(ts, int) or ts < 0:
        return f"invalid timestamp: {ts!r}"
    if isinstance(price, bool) or not isinstance(price, Real) or price < 0:
        return f"invalid price: {price!r}"
    try:
        if not math.isfinite(price):
            return f"invalid price: {price!r}"
    except OverflowError:
        return f"price out of range: {price!r}"
    return None


def partition(dataset: list[TradeRecord], strict: bool = False) -> PartitionedDataset:
    """Route each record to the buy or sell series by its side tag.

    Records with any other tag are rejected, logged and counted; they never
    abort the partition. With ``strict`` set, records with a negative or
    non-integer timestamp, or a negative or non-finite price, are rejected
    the same way. Series keep the order of *dataset*.
    """
    result = PartitionedDataset()
    for i, record in enumerate(dataset):
        side = TradeSide.parse(record.side)
        reason = None if side is not None else f"invalid side: {record.side!r}"
        if reason is None and strict:
            reason = _numeric_problem(record)
        if reason is not None:
            log.warning("Skipping trade #%d %s: %s", i, record, reason)
            result.rejected.append(MalformedRecord(i, record, reason))
            continue
        series = result.buy if side is TradeSide.BUY else result.sell
        series.append((record.timestamp, record.price))

    if result.rejected:
        log.warning("Rejected %d of %d trades", result.rejected_count, len(dataset))
    return result

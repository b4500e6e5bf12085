from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from numbers import Real
from typing import Any, Iterable

import pandas as pd


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"

    @classmethod
    def parse(cls, tag: Any) -> TradeSide | None:
        """Return the side for a wire tag, or None when the tag is not recognised."""
        try:
            return cls(tag)
        except ValueError:
            return None


@dataclass(frozen=True)
class TradeRecord:
    """One trade as received. Values are kept uninterpreted."""

    timestamp: Any  # epoch ms
    price: Any
    side: Any


Point = tuple[Any, Any]  # (timestamp, price)

# datetime64[ns] bounds in epoch ms
_MIN_MS = pd.Timestamp.min.value // 1_000_000 + 1
_MAX_MS = pd.Timestamp.max.value // 1_000_000


def _float_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    try:
        return float(value)
    except OverflowError:
        return None


def epoch_ms_to_utc(values: Iterable[Any]) -> pd.Series:
    """Epoch milliseconds → UTC datetimes. Non-numbers and out-of-range values become NaT."""
    ms = [
        v if not isinstance(v, bool) and isinstance(v, Real) and _MIN_MS <= v <= _MAX_MS else None
        for v in values
    ]
    return pd.to_datetime(pd.Series(ms, dtype="float64"), unit="ms", utc=True, errors="coerce")


def prices_to_float(values: Iterable[Any]) -> pd.Series:
    """Prices as float64; anything not representable becomes NaN."""
    return pd.Series([_float_or_none(v) for v in values], dtype="float64")


@dataclass(frozen=True)
class MalformedRecord:
    index: int
    record: TradeRecord
    reason: str


@dataclass
class PartitionedDataset:
    buy: list[Point] = field(default_factory=list)
    sell: list[Point] = field(default_factory=list)
    rejected: list[MalformedRecord] = field(default_factory=list)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    def __len__(self) -> int:
        return len(self.buy) + len(self.sell) + len(self.rejected)

    def to_frame(self) -> pd.DataFrame:
        """Buy and sell points as one DataFrame: time (UTC), price, side."""
        points = [(ts, px, TradeSide.BUY.value) for ts, px in self.buy]
        points += [(ts, px, TradeSide.SELL.value) for ts, px in self.sell]
        return pd.DataFrame(
            {
                "time":  epoch_ms_to_utc(p[0] for p in points),
                "price": prices_to_float(p[1] for p in points),
                "side":  pd.Series([p[2] for p in points], dtype="object"),
            }
        )

    def summarize(self) -> pd.DataFrame:
        """Per-side statistics indexed by side: trades, first, last, min, max."""
        df = self.to_frame()
        grouped = df.groupby("side")
        summary = pd.DataFrame(
            {
                "trades": grouped.size(),
                "first":  grouped["time"].min(),
                "last":   grouped["time"].max(),
                "min":    grouped["price"].min(),
                "max":    grouped["price"].max(),
            }
        )
        return summary.reindex([s.value for s in TradeSide]).fillna({"trades": 0}).astype(
            {"trades": "int64"}
        )


# ── Lookup key ────────────────────────────────────────────────────────────────


def latest_complete_day(today: date | None = None) -> date:
    """Yesterday relative to *today* (local date by default): the freshest complete day."""
    return (today or date.today()) - timedelta(days=1)


@dataclass(frozen=True)
class LookupKey:
    exchange: str
    pair: str
    date: date

    def __post_init__(self) -> None:
        for name in ("exchange", "pair"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string")
        if not isinstance(self.date, date) or isinstance(self.date, datetime):
            raise ValueError(f"date must be a calendar date, got {self.date!r}")

    def check_available(self, today: date | None = None) -> None:
        """Raise ValueError if the date is later than the latest complete day."""
        latest = latest_complete_day(today)
        if self.date > latest:
            raise ValueError(
                f"no dataset for {self.date.isoformat()}: latest available day is {latest.isoformat()}"
            )

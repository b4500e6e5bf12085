"""Lookup orchestration: fetch → normalize → partition → present.

Runs on an asyncio loop. The blocking fetch is the only suspension point;
each lookup takes a sequence number and only the newest initiated lookup
is ever presented. Superseded fetches are not cancelled, their results are
dropped when they arrive.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Protocol

from trade_chart.chart import ChartPresenter
from trade_chart.data.client import DatasetClient
from trade_chart.data.normalizer import normalize
from trade_chart.data.partitioner import partition
from trade_chart.errors import DatasetError
from trade_chart.types import LookupKey, PartitionedDataset, latest_complete_day

log = logging.getLogger(__name__)


class LookupState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RENDERED = "rendered"
    FAILED = "failed"


class LookupView(Protocol):
    """The rendering surface the controller drives."""

    def show_loading(self, key: LookupKey) -> None: ...

    def show_drawing(self, key: LookupKey) -> None: ...

    def show_chart(self, key: LookupKey, chart: Any, dataset: PartitionedDataset) -> None: ...

    def show_error(self, message: str) -> None: ...


@dataclass(frozen=True)
class LookupOutcome:
    key: LookupKey | None
    state: LookupState
    dataset: PartitionedDataset | None = None
    error: str | None = None


class LookupController:
    def __init__(
        self,
        client: DatasetClient,
        presenter: ChartPresenter,
        view: LookupView,
        strict: bool = False,
        today: date | None = None,
    ) -> None:
        self._client = client
        self._presenter = presenter
        self._view = view
        self._strict = strict
        self._today = today
        self._seq = itertools.count(1)
        self._latest = 0
        self.state = LookupState.IDLE
        self.dataset: PartitionedDataset | None = None
        self.default_date = latest_complete_day(today)

    @property
    def max_date(self) -> date:
        return latest_complete_day(self._today)

    def _is_stale(self, seq: int) -> bool:
        return seq != self._latest

    def _fail(self, key: LookupKey | None, message: str) -> LookupOutcome:
        self._view.show_error(message)
        self.state = LookupState.FAILED
        return LookupOutcome(key, LookupState.FAILED, error=message)

    async def submit(self, exchange: str, pair: str, day: date | None = None) -> LookupOutcome | None:
        """Build a fresh key from raw input and look it up."""
        try:
            key = LookupKey(exchange.strip(), pair.strip(), day or self.default_date)
        except ValueError as exc:
            self._latest = next(self._seq)
            self.dataset = None
            return self._fail(None, str(exc))
        return await self.lookup(key)

    async def lookup(self, key: LookupKey) -> LookupOutcome | None:
        """Run one lookup. Returns None when a newer lookup superseded this one."""
        seq = self._latest = next(self._seq)
        self.state = LookupState.LOADING
        self.dataset = None
        self._view.show_loading(key)
        log.debug("Lookup #%d %s", seq, key)

        try:
            key.check_available(self._today)
        except ValueError as exc:
            return self._fail(key, str(exc))

        loop = asyncio.get_running_loop()
        try:
            records = await loop.run_in_executor(
                None, self._client.fetch, key.exchange, key.pair, key.date
            )
        except DatasetError as exc:
            if self._is_stale(seq):
                log.debug("Dropping failure of stale lookup #%d: %s", seq, exc.message)
                return None
            return self._fail(key, exc.message)

        if self._is_stale(seq):
            log.debug("Dropping stale lookup #%d (latest is #%d)", seq, self._latest)
            return None

        dataset = partition(normalize(records), strict=self._strict)
        self._view.show_drawing(key)
        # let the surface show the placeholder before the draw
        await asyncio.sleep(0)
        if self._is_stale(seq):
            log.debug("Dropping stale lookup #%d before draw", seq)
            return None

        try:
            chart = self._presenter.build(dataset, title=key.pair)
            self._view.show_chart(key, chart, dataset)
        except Exception as exc:
            log.exception("Could not draw %s", key)
            return self._fail(key, f"could not draw chart: {exc}")
        self.dataset = dataset
        self.state = LookupState.RENDERED
        log.info(
            "%s %s %s: %d buy, %d sell, %d rejected",
            key.exchange, key.pair, key.date, len(dataset.buy), len(dataset.sell), dataset.rejected_count,
        )
        return LookupOutcome(key, LookupState.RENDERED, dataset=dataset)

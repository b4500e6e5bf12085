"""Dataset backend REST client.

One GET per lookup against ``/dataset/{exchange}/{pair}/{date}``. No retries,
no caching: a failed lookup is retried by issuing another lookup.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any
from urllib.parse import quote

import requests

from trade_chart.errors import DecodeError, ServerError, TransportError
from trade_chart.types import TradeRecord

log = logging.getLogger(__name__)

_DATASET_PATH = "/dataset"
_DEFAULT_TIMEOUT = 30  # seconds
_FIELDS = ("timestamp", "price", "side")


def _segment(value: str) -> str:
    """Percent-encode one path segment, separators included."""
    return quote(str(value), safe="")


def _parse_record(raw: Any) -> TradeRecord:
    """Wire record → TradeRecord.

    Canonical shape is the positional triple ``[timestamp, price, side]``;
    the object form ``{"timestamp", "price", "side"}`` is accepted as well.
    """
    if isinstance(raw, (list, tuple)) and len(raw) >= 3:
        return TradeRecord(timestamp=raw[0], price=raw[1], side=raw[2])
    if isinstance(raw, dict) and all(k in raw for k in _FIELDS):
        return TradeRecord(timestamp=raw["timestamp"], price=raw["price"], side=raw["side"])
    raise DecodeError(f"unexpected trade record: {raw!r}")


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"HTTP {resp.status_code}"


class DatasetClient:
    """Thin wrapper around the dataset backend."""

    def __init__(
        self,
        base_url: str = "",
        timeout: int = _DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "trade-chart/0.1", "Accept": "application/json"})

    def dataset_url(self, exchange: str, pair: str, day: date) -> str:
        return "/".join(
            [
                f"{self._base}{_DATASET_PATH}",
                _segment(exchange),
                _segment(pair),
                _segment(day.isoformat()),
            ]
        )

    def fetch(self, exchange: str, pair: str, day: date) -> list[TradeRecord]:
        """Fetch the raw dataset for one (exchange, pair, date).

        Raises TransportError when no response arrives, ServerError on a
        non-2xx status (message taken from the ``error`` envelope) and
        DecodeError when a 2xx body is not a JSON array of trade records.
        """
        url = self.dataset_url(exchange, pair, day)
        log.debug("GET %s", url)
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            log.warning("Request failed: %s", exc)
            raise TransportError(f"could not reach dataset server: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            message = _error_message(resp)
            log.warning("Dataset %s/%s/%s: HTTP %d %s", exchange, pair, day, resp.status_code, message)
            raise ServerError(resp.status_code, message)

        try:
            body = resp.json()
        except ValueError as exc:
            raise DecodeError(f"response is not valid JSON: {exc}") from exc
        if not isinstance(body, list):
            raise DecodeError(f"expected a JSON array of trades, got {type(body).__name__}")

        records = [_parse_record(r) for r in body]
        log.debug("Received %d trades for %s/%s/%s", len(records), exchange, pair, day)
        return records

"""trade-chart CLI: chart one day of trades from the dataset server.

Usage:
    trade-chart binance BTCUSDT --date 2024-03-01 --out btc.html --open
    trade-chart olx BTC-PLN
    trade-chart --interactive --api http://127.0.0.1:2137
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import webbrowser
from datetime import date
from functools import partial
from pathlib import Path

import pandas as pd
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from trade_chart.chart import ChartConfig, PlotlyPresenter
from trade_chart.controller import LookupController, LookupState
from trade_chart.data.client import DatasetClient
from trade_chart.types import LookupKey, PartitionedDataset, latest_complete_day

console = Console()

_DEFAULT_API = "http://127.0.0.1:2137"
_DEFAULT_OUT = "chart.html"


class ConsoleView:
    """Renders lookup progress to the terminal and the chart to an HTML file."""

    def __init__(self, out: Path, open_browser: bool = False) -> None:
        self.out = out
        self.open_browser = open_browser

    def show_loading(self, key: LookupKey) -> None:
        console.print(f"[cyan]loading[/] {key.exchange} {key.pair} {key.date.isoformat()} …")

    def show_drawing(self, key: LookupKey) -> None:
        console.print("[cyan]drawing chart…[/]")

    def show_chart(self, key: LookupKey, chart, dataset: PartitionedDataset) -> None:
        self.out.parent.mkdir(parents=True, exist_ok=True)
        chart.write_html(str(self.out), include_plotlyjs="cdn")
        console.print(summary_table(key, dataset))
        console.print(f"[green]chart written to[/] {self.out}")
        if self.open_browser:
            webbrowser.open(self.out.resolve().as_uri())

    def show_error(self, message: str) -> None:
        console.print(f"[red]error:[/] {message}")


def _clock(ts) -> str:
    return "-" if pd.isna(ts) else ts.strftime("%H:%M:%S")


def summary_table(key: LookupKey, dataset: PartitionedDataset) -> Table:
    stats = dataset.summarize()
    tbl = Table(title=f"{key.pair} — {key.exchange} {key.date.isoformat()}", show_header=True)
    for col in ("Side", "Trades", "First", "Last", "Min", "Max"):
        tbl.add_column(col, style="cyan" if col == "Side" else "white")
    for side, row in stats.iterrows():
        if row["trades"] == 0:
            tbl.add_row(str(side), "0", "-", "-", "-", "-")
            continue
        tbl.add_row(
            str(side),
            f"{row['trades']:,}",
            _clock(row["first"]),
            _clock(row["last"]),
            f"{row['min']:g}",
            f"{row['max']:g}",
        )
    if dataset.rejected_count:
        tbl.caption = f"{dataset.rejected_count} malformed trade(s) skipped"
    return tbl


def _parse_date(s: str) -> date:
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}") from None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Chart buy/sell trades for one exchange, pair and day",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Latest available day: {latest_complete_day().isoformat()}",
    )
    p.add_argument("exchange", nargs="?", help="Exchange id, e.g. binance")
    p.add_argument("pair", nargs="?", help="Coin pair, e.g. BTCUSDT")
    p.add_argument("--date", type=_parse_date, default=None, help="Day YYYY-MM-DD (default: yesterday)")
    p.add_argument(
        "--api",
        default=os.environ.get("TRADE_CHART_API", _DEFAULT_API),
        help=f"Dataset server base URL (default: $TRADE_CHART_API or {_DEFAULT_API})",
    )
    p.add_argument("--timeout", type=int, default=30, help="HTTP timeout in seconds")
    p.add_argument("--out", type=Path, default=Path(_DEFAULT_OUT), help=f"HTML output (default: {_DEFAULT_OUT})")
    p.add_argument("--open", action="store_true", help="Open the chart in a browser")
    p.add_argument("--subtitle", default=None)
    p.add_argument("--strict", action="store_true", help="Also reject trades with invalid timestamp/price")
    p.add_argument("-i", "--interactive", action="store_true", help="Prompt for lookups until an empty exchange")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


async def _ask(label: str, default: str | None) -> str | None:
    """Prompt on a worker thread so the event loop keeps running."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(Prompt.ask, label, default=default, console=console))


async def _interactive(controller: LookupController) -> None:
    exchange, pair = "", ""
    while True:
        exchange = await _ask("exchange", exchange or None)
        if not exchange:
            return
        pair = await _ask("pair", pair or None) or ""
        raw_date = await _ask("date", controller.default_date.isoformat())
        try:
            day = date.fromisoformat(raw_date)
        except ValueError:
            console.print(f"[red]error:[/] expected YYYY-MM-DD, got {raw_date!r}")
            continue
        await controller.submit(exchange, pair, day)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        handlers=[RichHandler(console=console, show_path=False)],
    )
    if not args.interactive and not (args.exchange and args.pair):
        parser.error("exchange and pair are required unless --interactive is given")

    controller = LookupController(
        DatasetClient(args.api, timeout=args.timeout),
        PlotlyPresenter(ChartConfig(subtitle=args.subtitle)),
        ConsoleView(args.out, open_browser=args.open),
        strict=args.strict,
    )

    if args.interactive:
        asyncio.run(_interactive(controller))
        return 0

    outcome = asyncio.run(controller.submit(args.exchange, args.pair, args.date))
    return 0 if outcome is not None and outcome.state is LookupState.RENDERED else 1


if __name__ == "__main__":
    raise SystemExit(main())

"""Interactive buy/sell price chart (Plotly).

The theme is part of ``ChartConfig`` and applied per figure; nothing is
registered in ``plotly.io.templates``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import pandas as pd
import plotly.graph_objs as go
from plotly.subplots import make_subplots

from trade_chart.types import PartitionedDataset, Point, TradeSide, epoch_ms_to_utc, prices_to_float

# ── Theme ─────────────────────────────────────────────────────────────────────
PALETTE = ["#8087E8", "#A3EDBA", "#F19E53", "#6699A1", "#E1D369", "#87B4E7", "#DA6D85", "#BBBAC5"]
_BACKGROUND = "#121212"
_TEXT = "#fff"
_GRID = "#707073"
_MINOR_GRID = "#505053"


def dark_theme() -> go.layout.Template:
    """Build a fresh copy of the dark template."""
    axis = dict(
        gridcolor=_GRID,
        linecolor=_GRID,
        tickcolor=_GRID,
        tickfont=dict(color=_TEXT, size=12),
        title=dict(font=dict(color=_TEXT)),
        minor=dict(gridcolor=_MINOR_GRID),
        zeroline=False,
    )
    return go.layout.Template(
        layout=go.Layout(
            colorway=PALETTE,
            paper_bgcolor=_BACKGROUND,
            plot_bgcolor=_BACKGROUND,
            font=dict(color=_TEXT),
            title=dict(font=dict(size=22, color=_TEXT)),
            legend=dict(bgcolor="rgba(0,0,0,0)", font=dict(size=12, color=_TEXT)),
            hoverlabel=dict(bgcolor="#f0f0f0", font=dict(color="#000")),
            xaxis=dict(
                axis,
                rangeselector=dict(
                    bgcolor="#46465C",
                    activecolor="#1f1836",
                    bordercolor="#BBBAC5",
                    borderwidth=1,
                    font=dict(color=_TEXT),
                ),
            ),
            yaxis=dict(axis, ticks="outside", tickwidth=1),
        )
    )


# ── Config ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RangePreset:
    label: str
    step: str  # "minute" | "hour" | "all"
    count: int = 1

    def span(self) -> pd.Timedelta | None:
        if self.step == "all":
            return None
        return pd.Timedelta(**{f"{self.step}s": self.count})

    def button(self) -> dict[str, Any]:
        if self.step == "all":
            return dict(label=self.label, step="all")
        return dict(label=self.label, step=self.step, count=self.count, stepmode="backward")


RANGE_PRESETS: tuple[RangePreset, ...] = (
    RangePreset("1m", "minute", 1),
    RangePreset("2m", "minute", 2),
    RangePreset("3m", "minute", 3),
    RangePreset("10m", "minute", 10),
    RangePreset("1h", "hour", 1),
    RangePreset("2h", "hour", 2),
    RangePreset("6h", "hour", 6),
    RangePreset("12h", "hour", 12),
    RangePreset("All", "all"),
)


@dataclass(frozen=True, eq=False)
class ChartConfig:
    """Everything the presenter needs besides the data.

    Series are drawn point for point; there is no automatic grouping or
    resampling. The overview pane under the main plot shows ``navigator_series``.
    """

    range_presets: tuple[RangePreset, ...] = RANGE_PRESETS
    selected_range: str = "All"
    navigator_series: TradeSide = TradeSide.BUY
    subtitle: str | None = None
    show_legend: bool = True
    height: int = 700
    theme: go.layout.Template = field(default_factory=dark_theme)

    def selected_preset(self) -> RangePreset:
        for preset in self.range_presets:
            if preset.label == self.selected_range:
                return preset
        labels = [p.label for p in self.range_presets]
        raise ValueError(f"unknown range preset {self.selected_range!r}; choose from {labels}")


# ── Presenter ─────────────────────────────────────────────────────────────────


class ChartPresenter(Protocol):
    """Anything that turns a partitioned dataset into a drawable chart."""

    def build(self, dataset: PartitionedDataset, title: str) -> Any: ...


def _series_frame(points: list[Point]) -> pd.DataFrame:
    """(epoch ms, price) points → DataFrame with UTC datetimes; unparsable values become NaT/NaN."""
    return pd.DataFrame(
        {
            "time":  epoch_ms_to_utc(ts for ts, _ in points),
            "price": prices_to_float(px for _, px in points),
        }
    )


class PlotlyPresenter:
    """Builds a two-row figure: buy/sell lines on top, overview pane below.

    The overview pane is display-only: it always shows the whole day and is
    not linked to the main x axis. Zooming and range presets act on the top
    row alone.
    """

    def __init__(self, config: ChartConfig | None = None) -> None:
        self.config = config or ChartConfig()

    def build(self, dataset: PartitionedDataset, title: str) -> go.Figure:
        cfg = self.config
        fig = make_subplots(rows=2, cols=1, row_heights=[0.85, 0.15], vertical_spacing=0.06)

        frames = {TradeSide.BUY: _series_frame(dataset.buy), TradeSide.SELL: _series_frame(dataset.sell)}
        for side, df in frames.items():
            fig.add_trace(
                go.Scatter(x=df["time"], y=df["price"], mode="lines", name=side.value),
                row=1,
                col=1,
            )

        nav = frames[cfg.navigator_series]
        fig.add_trace(
            go.Scatter(
                x=nav["time"],
                y=nav["price"],
                mode="lines",
                name=f"{cfg.navigator_series.value} (overview)",
                showlegend=False,
                hoverinfo="skip",
                line=dict(color=PALETTE[1], width=1),
            ),
            row=2,
            col=1,
        )

        text = title if cfg.subtitle is None else f"{title}<br><sup>{cfg.subtitle}</sup>"
        fig.update_layout(
            template=cfg.theme,
            title=dict(text=text, x=0, xanchor="left"),
            showlegend=cfg.show_legend,
            dragmode="zoom",
            hovermode="x",
            height=cfg.height,
            margin=dict(l=40, r=20, t=80, b=30),
        )
        fig.update_xaxes(
            type="date",
            rangeselector=dict(buttons=[p.button() for p in cfg.range_presets]),
            row=1,
            col=1,
        )
        # "all" is plotly's autorange; other presets open on the trailing window
        span = cfg.selected_preset().span()
        end = pd.concat([df["time"] for df in frames.values()]).max()
        if span is not None and not pd.isna(end):
            fig.update_xaxes(range=[end - span, end], row=1, col=1)
        fig.update_yaxes(fixedrange=True, row=1, col=1)
        fig.update_xaxes(type="date", fixedrange=True, row=2, col=1)
        fig.update_yaxes(fixedrange=True, showticklabels=False, row=2, col=1)
        return fig

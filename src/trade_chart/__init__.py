from .chart import ChartConfig, PlotlyPresenter, dark_theme
from .controller import LookupController, LookupOutcome, LookupState
from .data import DatasetClient, normalize, partition
from .errors import DatasetError, DecodeError, ServerError, TransportError
from .types import (
    LookupKey,
    MalformedRecord,
    PartitionedDataset,
    TradeRecord,
    TradeSide,
    latest_complete_day,
)

__all__ = [
    # Pipeline
    "DatasetClient",
    "normalize",
    "partition",
    # Orchestration
    "LookupController",
    "LookupOutcome",
    "LookupState",
    # Chart
    "ChartConfig",
    "PlotlyPresenter",
    "dark_theme",
    # Errors
    "DatasetError",
    "TransportError",
    "ServerError",
    "DecodeError",
    # Types
    "TradeRecord",
    "TradeSide",
    "MalformedRecord",
    "PartitionedDataset",
    "LookupKey",
    "latest_complete_day",
]

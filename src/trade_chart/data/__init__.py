"""Data layer: dataset fetching, ordering, and side partitioning."""
from .client import DatasetClient
from .normalizer import normalize
from .partitioner import partition

__all__ = ["DatasetClient", "normalize", "partition"]

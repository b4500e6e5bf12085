"""Failures of a single dataset lookup. None of them are fatal to the process."""
from __future__ import annotations


class DatasetError(RuntimeError):
    """Base class: the lookup is aborted and ``message`` is shown in place of the chart."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(DatasetError):
    """No response was received (offline, DNS failure, timeout)."""


class ServerError(DatasetError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(DatasetError):
    """The response body is not JSON or not the expected shape."""

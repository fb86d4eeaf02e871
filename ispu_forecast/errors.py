"""
Failures raised inside a fetch cycle.

Each carries an ErrorKind; the pipeline turns it into an Error state with a
localized message. None of them is retried.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    HISTORY_FETCH_FAILED = "history_fetch_failed"
    INSUFFICIENT_HISTORY = "insufficient_history"
    PREDICTION_FAILED = "prediction_failed"
    CYCLE_ABORTED = "cycle_aborted"

    @property
    def message_key(self) -> str:
        return "empty" if self is ErrorKind.INSUFFICIENT_HISTORY else "error"


class ForecastError(Exception):
    kind: ErrorKind = ErrorKind.HISTORY_FETCH_FAILED

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.detail = detail


class TransportError(ForecastError):
    """Network failure or timeout before any HTTP status was received."""


class HistoryFetchFailed(ForecastError):
    kind = ErrorKind.HISTORY_FETCH_FAILED

    def __init__(self, status: Optional[int], detail: Optional[str] = None) -> None:
        super().__init__(f"History request failed (status={status})", detail)
        self.status = status


class InsufficientHistory(ForecastError):
    kind = ErrorKind.INSUFFICIENT_HISTORY

    def __init__(self, count: int, required: int) -> None:
        super().__init__(f"Need at least {required} historical samples, got {count}")
        self.count = count
        self.required = required


class PredictionFetchFailed(ForecastError):
    kind = ErrorKind.PREDICTION_FAILED

    def __init__(self, status: Optional[int], detail: Optional[str] = None) -> None:
        super().__init__(detail or "Prediction service did not respond", detail)
        self.status = status


class CycleAborted(ForecastError):
    """The cycle ended on an unexpected exception or cancellation."""

    kind = ErrorKind.CYCLE_ABORTED

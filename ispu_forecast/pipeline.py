"""
Forecast pipelines.

ForecastPipeline:
- Fetches the last 72h of hourly samples from the historical backend
- Gates on a minimum sample count before calling the ML service
- Sends the (defaulted) history to /predict and keeps the returned predictions

HourlyForecastFeed:
- Fetches the next hours of weather for the 24h trend chart

Both are re-entrant state machines (Idle -> Loading -> Ready | Error). Every
cycle carries a generation number; only the latest cycle may commit state, so
a slow response from a superseded cycle is dropped.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Mapping, Optional, Protocol, Tuple, Union

from ispu_forecast.aqi import POLLUTANTS, PM25
from ispu_forecast.client import Response
from ispu_forecast.config import Settings
from ispu_forecast.errors import (
    CycleAborted,
    ErrorKind,
    ForecastError,
    HistoryFetchFailed,
    InsufficientHistory,
    PredictionFetchFailed,
    TransportError,
)
from ispu_forecast.messages import DEFAULT_LANGUAGE, text
from ispu_forecast.models import HourlyWeather, PollutantReading, PollutantSample, PredictionPoint


logger = logging.getLogger(__name__)

HOURLY_DISPLAY_COUNT = 12


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Error:
    kind: ErrorKind
    message: str
    detail: Optional[str] = None


@dataclass(frozen=True)
class Ready:
    predictions: Tuple[PredictionPoint, ...]

    @property
    def is_empty(self) -> bool:
        return not self.predictions


@dataclass(frozen=True)
class HourlyReady:
    hours: Tuple[HourlyWeather, ...]


PipelineState = Union[Idle, Loading, Error, Ready]
HourlyState = Union[Idle, Loading, Error, HourlyReady]


@dataclass(frozen=True)
class ForecastInputs:
    """Everything a fetch cycle depends on; changing any of it triggers a new cycle."""

    city: str
    token: Optional[str] = None
    pollutant: str = PM25
    language: str = DEFAULT_LANGUAGE

    def __post_init__(self) -> None:
        if self.pollutant not in POLLUTANTS:
            raise ValueError(f"Unknown pollutant: {self.pollutant!r} (expected one of {POLLUTANTS})")


class ForecastSource(Protocol):
    async def fetch_hourly(self, city: str, hours: int, token: Optional[str] = None) -> Response: ...

    async def predict(self, pollutant: str, history: List[dict]) -> Response: ...


def _hourly_rows(body: Any) -> List[Mapping[str, Any]]:
    data = body.get("data") if isinstance(body, Mapping) else None
    rows = data.get("hourly") if isinstance(data, Mapping) else None
    if not isinstance(rows, list):
        return []
    # A non-object row still counts as a sample; every field falls back to its default.
    return [r if isinstance(r, Mapping) else {} for r in rows]


def _error_detail(body: Any) -> Optional[str]:
    detail = body.get("detail") if isinstance(body, Mapping) else None
    if detail is None or detail == "":
        return None
    if isinstance(detail, str):
        return detail
    # FastAPI validation errors: [{"loc": [...], "msg": "...", "type": "..."}]
    items = detail if isinstance(detail, list) else [detail]
    messages = [str(item.get("msg")) for item in items if isinstance(item, Mapping) and item.get("msg")]
    return "; ".join(messages) if messages else str(detail)


class _ReactiveLoader(abc.ABC):
    def __init__(self, source: ForecastSource, settings: Settings, inputs: Optional[ForecastInputs] = None) -> None:
        self.source = source
        self.settings = settings
        self._inputs = inputs or ForecastInputs(city=settings.city, language=settings.language)
        self._state: Any = Idle()
        self._generation = 0
        self._listeners: List[Callable[[Any], None]] = []

    @property
    def state(self) -> Any:
        return self._state

    @property
    def inputs(self) -> ForecastInputs:
        return self._inputs

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Register a callback for every committed state; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: Any) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def update(self, **changes: Any) -> bool:
        """Apply input changes; start a new cycle only if something actually changed."""
        new_inputs = replace(self._inputs, **changes)
        if new_inputs == self._inputs:
            return False
        self._inputs = new_inputs
        await self.refresh()
        return True

    async def refresh(self) -> Any:
        self._generation += 1
        generation = self._generation
        inputs = self._inputs

        try:
            self._set_state(Loading())
            state = await self._run(inputs, generation)
        except ForecastError as e:
            logger.warning("Cycle %d for %s failed: %s", generation, inputs.city, e)
            state = self._error_state(e, inputs)
        except asyncio.CancelledError:
            if self._is_current(generation):
                self._set_state(self._error_state(CycleAborted("cancelled", "cancelled"), inputs))
            raise
        except Exception as e:
            logger.exception("Cycle %d for %s aborted", generation, inputs.city)
            state = self._error_state(CycleAborted(str(e), str(e) or type(e).__name__), inputs)

        if not self._is_current(generation):
            logger.debug("Discarding stale result of cycle %d (latest is %d)", generation, self._generation)
            return self._state
        self._set_state(state)
        return state

    @abc.abstractmethod
    async def _run(self, inputs: ForecastInputs, generation: int) -> Any:
        """One fetch cycle; returns the state to commit, or None once superseded."""

    def _error_state(self, error: ForecastError, inputs: ForecastInputs) -> Error:
        return Error(kind=error.kind, message=text(inputs.language, error.kind.message_key), detail=error.detail)


class ForecastPipeline(_ReactiveLoader):
    """48h AQI prediction for one city and pollutant."""

    def __init__(self, source: ForecastSource, settings: Settings, inputs: Optional[ForecastInputs] = None) -> None:
        super().__init__(source, settings, inputs)
        self._current_reading: Optional[PollutantReading] = None

    @property
    def current_reading(self) -> Optional[PollutantReading]:
        """Newest historical row of the latest cycle, as measured (no defaults filled in)."""
        return self._current_reading

    async def _run(self, inputs: ForecastInputs, generation: int) -> Optional[PipelineState]:
        logger.info("Cycle %d: %s / %s", generation, inputs.city, inputs.pollutant)
        # Runs synchronously at cycle start, so this cycle is still the latest.
        self._current_reading = None

        try:
            history_res = await self.source.fetch_hourly(inputs.city, self.settings.history_hours, inputs.token)
        except TransportError as e:
            raise HistoryFetchFailed(None, str(e)) from e
        if not history_res.ok:
            raise HistoryFetchFailed(history_res.status, _error_detail(history_res.body))

        rows = _hourly_rows(history_res.body)
        logger.info("Cycle %d: %d historical samples", generation, len(rows))
        if len(rows) < self.settings.min_history:
            raise InsufficientHistory(len(rows), self.settings.min_history)

        samples = [PollutantSample.from_payload(r) for r in rows]
        if not self._is_current(generation):
            return None
        self._current_reading = PollutantReading.from_payload(rows[-1])

        payload = [s.to_request() for s in samples]
        logger.info("Cycle %d: sending %d samples to /predict", generation, len(payload))
        try:
            ml_res = await self.source.predict(inputs.pollutant, payload)
        except TransportError as e:
            raise PredictionFetchFailed(None) from e
        if not ml_res.ok:
            raise PredictionFetchFailed(ml_res.status, _error_detail(ml_res.body))

        raw = ml_res.body.get("predictions") if isinstance(ml_res.body, Mapping) else None
        if not isinstance(raw, list):
            raw = []
        points = (PredictionPoint.from_payload(r) for r in raw if isinstance(r, Mapping))
        predictions = tuple(p for p in points if p is not None)
        logger.info("Cycle %d: %d predictions received", generation, len(predictions))
        return Ready(predictions=predictions)


class HourlyForecastFeed(_ReactiveLoader):
    """Hourly weather for the 24h trend chart (first 12 hours are kept for display)."""

    async def _run(self, inputs: ForecastInputs, generation: int) -> HourlyState:
        try:
            res = await self.source.fetch_hourly(inputs.city, self.settings.forecast_hours, inputs.token)
        except TransportError as e:
            raise HistoryFetchFailed(None, str(e)) from e
        if not res.ok:
            raise HistoryFetchFailed(res.status, _error_detail(res.body))

        rows = _hourly_rows(res.body)[:HOURLY_DISPLAY_COUNT]
        return HourlyReady(hours=tuple(HourlyWeather.from_payload(r) for r in rows))

    def _error_state(self, error: ForecastError, inputs: ForecastInputs) -> Error:
        status = getattr(error, "status", None)
        message = f"HTTP {status}" if status is not None else text(inputs.language, "hourly_error")
        return Error(kind=error.kind, message=message, detail=error.detail)

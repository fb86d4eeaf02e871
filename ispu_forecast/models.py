"""
Records exchanged with the historical-data and prediction services.

Parsing is tolerant: a malformed field is replaced with a default instead of
rejecting the whole record.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from ispu_forecast.aqi import Category, classify_category


logger = logging.getLogger(__name__)

NEUTRAL_DENSITY = 20.0

Instant = Union[datetime, str, None]


def parse_instant(raw: Any) -> Instant:
    """ISO-8601 text (with optional trailing Z) -> aware/naive datetime; otherwise keep raw."""
    if raw is None or isinstance(raw, datetime):
        return raw
    text = str(raw)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text


def format_instant(value: Instant) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def format_density(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.1f}"


def _number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _measured(row: Mapping[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        value = _number(row.get(key))
        if value is not None and value >= 0:
            return value
    return None


def _density(row: Mapping[str, Any], *keys: str) -> float:
    value = _measured(row, *keys)
    return NEUTRAL_DENSITY if value is None else value


@dataclass(frozen=True)
class PollutantReading:
    """A historical row as measured; absent or malformed densities stay None."""

    timestamp: Instant
    pm25_density: Optional[float]
    pm10_density: Optional[float]

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> "PollutantReading":
        return cls(
            timestamp=parse_instant(row.get("timestamp") or row.get("datetime")),
            pm25_density=_measured(row, "pm25_density", "pm25"),
            pm10_density=_measured(row, "pm10_density", "pm10"),
        )


@dataclass(frozen=True)
class PollutantSample:
    timestamp: Instant
    pm25_density: float
    pm10_density: float

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> "PollutantSample":
        return cls(
            timestamp=parse_instant(row.get("timestamp") or row.get("datetime")),
            pm25_density=_density(row, "pm25_density", "pm25"),
            pm10_density=_density(row, "pm10_density", "pm10"),
        )

    def to_request(self) -> Dict[str, Any]:
        return {
            "timestamp": format_instant(self.timestamp),
            "pm25_density": self.pm25_density,
            "pm10_density": self.pm10_density,
        }


@dataclass(frozen=True)
class PredictionPoint:
    timestamp: Instant
    predicted_aqi: float
    pm25_density: Optional[float] = None
    pm10_density: Optional[float] = None

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> Optional["PredictionPoint"]:
        aqi = _number(row.get("predicted_aqi"))
        if aqi is None:
            logger.warning("Dropping prediction without numeric predicted_aqi: %r", row)
            return None
        return cls(
            timestamp=parse_instant(row.get("timestamp")),
            predicted_aqi=aqi,
            pm25_density=_number(row.get("pm25_density")),
            pm10_density=_number(row.get("pm10_density")),
        )

    @property
    def category(self) -> Category:
        return classify_category(self.predicted_aqi)


@dataclass(frozen=True)
class HourlyWeather:
    timestamp: Instant
    temperature: float
    precipitation_probability: float
    wind_speed: float
    condition: str

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> "HourlyWeather":
        weather = row.get("weather")
        condition = weather.get("main") if isinstance(weather, Mapping) else None
        return cls(
            timestamp=parse_instant(row.get("datetime") or row.get("timestamp")),
            temperature=_number(row.get("temperature")) or 0.0,
            precipitation_probability=_number(row.get("precipitation_probability")) or 0.0,
            wind_speed=_number(row.get("wind_speed")) or 0.0,
            condition=condition or "Cloudy",
        )

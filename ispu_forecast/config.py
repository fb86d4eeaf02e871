"""
Runtime settings.

Built once by the entry point (from the environment or a local .env file) and
passed explicitly to the client and pipelines.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from ispu_forecast.messages import LANGUAGES


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:8000"
    ml_api_url: str = "http://localhost:8001"
    request_timeout: float = 15.0
    history_hours: int = 72
    min_history: int = 49
    forecast_hours: int = 24
    city: str = "Bandung"
    language: str = "id"

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.min_history < 1:
            raise ValueError("min_history must be at least 1")
        if self.history_hours < self.min_history:
            raise ValueError("history_hours must cover min_history")
        if self.forecast_hours < 1:
            raise ValueError("forecast_hours must be at least 1")
        if self.language not in LANGUAGES:
            raise ValueError(f"language must be one of {LANGUAGES}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        if environ is None:
            load_dotenv()  # only affects local dev
            environ = os.environ
        defaults = cls()
        return cls(
            api_base_url=environ.get("ISPU_API_BASE_URL", defaults.api_base_url).rstrip("/"),
            ml_api_url=environ.get("ISPU_ML_API_URL", defaults.ml_api_url).rstrip("/"),
            request_timeout=float(environ.get("ISPU_REQUEST_TIMEOUT", defaults.request_timeout)),
            history_hours=int(environ.get("ISPU_HISTORY_HOURS", defaults.history_hours)),
            min_history=int(environ.get("ISPU_MIN_HISTORY", defaults.min_history)),
            forecast_hours=int(environ.get("ISPU_FORECAST_HOURS", defaults.forecast_hours)),
            city=environ.get("ISPU_CITY", defaults.city),
            language=environ.get("ISPU_LANGUAGE", defaults.language),
        )

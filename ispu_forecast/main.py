"""
Command line runner.

Runs one prediction cycle (optionally repeating every --interval seconds)
against the configured backends and logs the outcome.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from ispu_forecast.aqi import POLLUTANTS, PM25
from ispu_forecast.client import ForecastClient
from ispu_forecast.config import Settings
from ispu_forecast.messages import LANGUAGES
from ispu_forecast.models import format_density
from ispu_forecast.pipeline import Error, ForecastInputs, ForecastPipeline, HourlyForecastFeed, HourlyReady, Ready
from ispu_forecast.report import milestones, summarize


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="AQI (ISPU) 48h prediction runner")
    p.add_argument("--city", default=None, help="City name (default: ISPU_CITY)")
    p.add_argument("--pollutant", choices=POLLUTANTS, default=PM25, help="Pollutant to predict")
    p.add_argument("--language", choices=LANGUAGES, default=None, help="Message language")
    p.add_argument("--token", default=None, help="Bearer token for the historical backend")
    p.add_argument("--hourly", action="store_true", help="Also fetch the 24h weather trend")
    p.add_argument("--interval", type=float, default=0.0, help="Repeat every N seconds (0 = run once)")
    return p.parse_args(argv)


def log_prediction(pipeline: ForecastPipeline) -> None:
    state = pipeline.state
    reading = pipeline.current_reading
    if reading is not None:
        logging.info(
            "Current reading %s | PM2.5=%s PM10=%s",
            reading.timestamp,
            format_density(reading.pm25_density),
            format_density(reading.pm10_density),
        )

    if isinstance(state, Error):
        logging.error("Prediction failed: %s (%s)", state.message, state.detail or state.kind.value)
        return
    if not isinstance(state, Ready) or state.is_empty:
        logging.info("No predictions to display.")
        return

    summary = summarize([p.predicted_aqi for p in state.predictions])
    logging.info(
        "%d predictions | current=%.0f avg=%.0f peak=%.0f",
        len(state.predictions),
        summary.current,
        summary.average,
        summary.peak,
    )
    for m in milestones(state.predictions):
        logging.info("+%02dh %s AQI=%.0f (%s)", m.offset_hours, m.point.timestamp, m.point.predicted_aqi, m.category.label)


def log_hourly(feed: HourlyForecastFeed) -> None:
    state = feed.state
    if isinstance(state, Error):
        logging.error("Hourly forecast failed: %s", state.message)
    elif isinstance(state, HourlyReady):
        for h in state.hours:
            logging.info(
                "%s %.0fC rain=%.0f%% wind=%.1fm/s %s",
                h.timestamp,
                h.temperature,
                h.precipitation_probability,
                h.wind_speed,
                h.condition,
            )


async def run(args: argparse.Namespace, settings: Settings) -> None:
    inputs = ForecastInputs(
        city=args.city or settings.city,
        token=args.token,
        pollutant=args.pollutant,
        language=args.language or settings.language,
    )
    async with ForecastClient(settings) as client:
        pipeline = ForecastPipeline(client, settings, inputs)
        feed = HourlyForecastFeed(client, settings, inputs) if args.hourly else None
        while True:
            await pipeline.refresh()
            log_prediction(pipeline)
            if feed is not None:
                await feed.refresh()
                log_hourly(feed)
            if args.interval <= 0:
                break
            await asyncio.sleep(max(0.1, float(args.interval)))


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    settings = Settings.from_env()

    logging.info("History -> %s | ML -> %s", settings.api_base_url, settings.ml_api_url)
    try:
        asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        logging.info("Stopped.")


if __name__ == "__main__":
    main()

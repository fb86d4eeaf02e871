"""
Streamlit dashboard:
- 48h AQI (ISPU) prediction chart with summary and milestone cards
- 24h weather trend chart

Run:
  streamlit run ispu_forecast/dashboard.py
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Tuple

import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from ispu_forecast.aqi import POLLUTANTS, Category
from ispu_forecast.client import ForecastClient
from ispu_forecast.config import Settings
from ispu_forecast.geometry import HOURLY_SPAN, PREDICTION_SPAN, area_path, hover_point, line_path, project
from ispu_forecast.messages import LANGUAGES, text
from ispu_forecast.models import format_density
from ispu_forecast.pipeline import Error, ForecastInputs, ForecastPipeline, HourlyForecastFeed, HourlyReady, Ready
from ispu_forecast.report import milestones, summarize


st.set_page_config(page_title="AQI (ISPU) Forecast", layout="wide")

CATEGORY_COLORS = {
    Category.GOOD: "#2ecc71",
    Category.MODERATE: "#f1c40f",
    Category.UNHEALTHY_SENSITIVE: "#e67e22",
    Category.UNHEALTHY: "#e74c3c",
    Category.VERY_UNHEALTHY: "#8e44ad",
    Category.HAZARDOUS: "#7f0000",
}


def _load(settings: Settings, inputs: ForecastInputs) -> Tuple[ForecastPipeline, HourlyForecastFeed]:
    async def _run() -> Tuple[ForecastPipeline, HourlyForecastFeed]:
        async with ForecastClient(settings) as client:
            pipeline = ForecastPipeline(client, settings, inputs)
            feed = HourlyForecastFeed(client, settings, inputs)
            await asyncio.gather(pipeline.refresh(), feed.refresh())
            return pipeline, feed

    return asyncio.run(_run())


def _series_chart(
    values: Sequence[float],
    labels: List[str],
    span: float,
    color: str,
    pointer: Optional[float] = None,
    height: int = 300,
) -> go.Figure:
    coords = project(values, span)
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=[c.x for c in coords],
            y=[c.y for c in coords],
            mode="markers",
            marker=dict(size=6, color=color, opacity=0.0),
            text=labels,
            hoverinfo="text",
            showlegend=False,
        )
    )
    shapes = [
        dict(type="line", x0=0, x1=100, y0=v, y1=v, line=dict(color="#f3f4f6", width=1))
        for v in (0, 25, 50, 75, 100)
    ]
    if len(coords) > 1:
        shapes.append(dict(type="path", path=area_path(coords), fillcolor=color, opacity=0.15, line=dict(width=0)))
        shapes.append(dict(type="path", path=line_path(coords), line=dict(color=color, width=3)))
    if pointer is not None:
        hp = hover_point(values, pointer, span)
        shapes.append(
            dict(type="line", x0=hp.coordinate.x, x1=hp.coordinate.x, y0=0, y1=100, line=dict(color=color, dash="dot"))
        )
        fig.add_trace(
            go.Scatter(
                x=[hp.coordinate.x],
                y=[hp.coordinate.y],
                mode="markers+text",
                marker=dict(size=12, color="white", line=dict(color=color, width=3)),
                text=[labels[hp.index]],
                textposition="top center",
                showlegend=False,
            )
        )
    fig.update_layout(
        shapes=shapes,
        height=height,
        margin=dict(l=10, r=10, t=30, b=10),
        xaxis=dict(range=[0, 100], showticklabels=False, showgrid=False, zeroline=False),
        yaxis=dict(range=[100, 0], showticklabels=False, showgrid=False, zeroline=False),
    )
    return fig


settings = Settings.from_env()

with st.sidebar:
    st.header("Settings")
    city = st.text_input("City", value=settings.city)
    pollutant = st.selectbox("Pollutant", POLLUTANTS)
    language = st.selectbox("Language", LANGUAGES, index=LANGUAGES.index(settings.language))
    token = st.text_input("Bearer token", value="", type="password") or None
    auto = st.toggle("Auto refresh", value=False)
    refresh_mins = st.slider("Refresh minutes", min_value=5, max_value=60, value=15, step=5)
    if auto:
        st_autorefresh(interval=refresh_mins * 60 * 1000, key="refresh")

inputs = ForecastInputs(city=city, token=token, pollutant=pollutant, language=language)
with st.spinner(text(language, "loading")):
    pipeline, feed = _load(settings, inputs)

st.title(text(language, "title"))
state = pipeline.state

if isinstance(state, Error):
    st.error(state.message)
    if state.detail:
        st.caption(state.detail)
elif isinstance(state, Ready) and not state.is_empty:
    preds = state.predictions
    values = [p.predicted_aqi for p in preds]
    summary = summarize(values)

    chart_col, card_col = st.columns([2, 1])
    with chart_col:
        m1, m2, m3 = st.columns(3)
        m1.metric("Current AQI", f"{summary.current:.0f}")
        m2.metric("Avg", f"{summary.average:.0f}")
        m3.metric("Peak", f"{summary.peak:.0f}")
        pointer = st.slider("Inspect", min_value=0.0, max_value=1.0, value=0.0, step=0.01)
        labels = [f"{p.timestamp} | {p.predicted_aqi:.0f} {p.category.label}" for p in preds]
        color = CATEGORY_COLORS[preds[0].category]
        st.plotly_chart(_series_chart(values, labels, PREDICTION_SPAN, color, pointer), use_container_width=True)

    with card_col:
        st.subheader("Timely Insight")
        cards = pd.DataFrame(
            [
                {
                    "Offset": text(language, "now") if m.offset_hours == 0 else f"+{m.offset_hours}H",
                    "Time": pd.to_datetime(m.point.timestamp, errors="coerce"),
                    "AQI": round(m.point.predicted_aqi),
                    "Status": m.category.label,
                }
                for m in milestones(preds)
            ]
        )
        st.dataframe(cards, use_container_width=True, hide_index=True)

reading = pipeline.current_reading
if reading is not None:
    st.caption(f"Last reading {reading.timestamp}: PM2.5 {format_density(reading.pm25_density)} | PM10 {format_density(reading.pm10_density)}")

st.subheader(text(language, "hourly_title"))
hourly = feed.state
if isinstance(hourly, Error):
    st.error(hourly.message)
elif isinstance(hourly, HourlyReady) and hourly.hours:
    temps = [h.temperature for h in hourly.hours]
    labels = [f"{h.timestamp} | {h.temperature:.0f}C" for h in hourly.hours]
    st.plotly_chart(_series_chart(temps, labels, HOURLY_SPAN, "#6366f1", height=220), use_container_width=True)
    st.dataframe(
        pd.DataFrame(
            {
                "Time": [h.timestamp for h in hourly.hours],
                "Condition": [h.condition for h in hourly.hours],
                "Temp (C)": temps,
                "Rain (%)": [h.precipitation_probability for h in hourly.hours],
                "Wind (m/s)": [round(h.wind_speed, 1) for h in hourly.hours],
            }
        ),
        use_container_width=True,
        hide_index=True,
    )

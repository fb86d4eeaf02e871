"""
Chart coordinate engine.

Maps an ordered numeric series onto a 0..100 plotting surface (SVG viewBox
"0 0 100 100", y grows downward) and resolves a pointer position back to the
nearest sample.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Sized

import numpy as np


BASELINE = 90.0
PREDICTION_SPAN = 80.0
HOURLY_SPAN = 70.0


@dataclass(frozen=True)
class ChartCoordinate:
    x: float
    y: float


@dataclass(frozen=True)
class HoverPoint:
    index: int
    coordinate: ChartCoordinate


def project(values: Sequence[float], span: float = PREDICTION_SPAN) -> List[ChartCoordinate]:
    """
    Project a series onto plot coordinates, preserving order.

    x is spread uniformly over 0..100; a single sample sits at x=0.
    y = 90 - (value - min) / range * span, with range forced to 1 for a flat series.
    """
    arr = np.asarray(values, dtype=float)
    n = arr.size
    if n == 0:
        raise ValueError("Cannot project an empty series.")

    if n > 1:
        xs = np.arange(n, dtype=float) / (n - 1) * 100.0
    else:
        xs = np.zeros(1)

    lo = float(arr.min())
    value_range = float(arr.max()) - lo or 1.0
    ys = BASELINE - (arr - lo) / value_range * float(span)

    return [ChartCoordinate(x=float(x), y=float(y)) for x, y in zip(xs, ys)]


def nearest_sample(series: Sized, pointer_fraction: float) -> int:
    """
    Index of the sample closest to a horizontal pointer fraction (0..1).

    The x mapping is uniform, so this is a rounding, not a search.
    """
    n = len(series)
    if n == 0:
        raise ValueError("Cannot resolve a pointer over an empty series.")
    # Half-up rounding, same as the browser's Math.round.
    idx = math.floor(float(pointer_fraction) * (n - 1) + 0.5)
    return max(0, min(n - 1, idx))


def hover_point(values: Sequence[float], pointer_fraction: float, span: float = PREDICTION_SPAN) -> HoverPoint:
    idx = nearest_sample(values, pointer_fraction)
    return HoverPoint(index=idx, coordinate=project(values, span)[idx])


def line_path(coords: Sequence[ChartCoordinate]) -> str:
    if len(coords) < 2:
        return ""
    return "M " + " L ".join(f"{c.x:g} {c.y:g}" for c in coords)


def area_path(coords: Sequence[ChartCoordinate]) -> str:
    """Closed path filling the area between the line and the bottom edge."""
    if len(coords) < 2:
        return ""
    body = " L ".join(f"{c.x:g} {c.y:g}" for c in coords)
    return f"M 0 100 L {body} L 100 100 Z"

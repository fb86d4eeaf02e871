"""
Summary figures for the prediction card: current / average / peak values and
the milestone list (now, +6h, +12h, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ispu_forecast.aqi import Category
from ispu_forecast.models import PredictionPoint


MILESTONE_OFFSETS = (0, 6, 12, 24, 36, 48)


@dataclass(frozen=True)
class SeriesSummary:
    current: float
    average: float
    peak: float
    minimum: float


@dataclass(frozen=True)
class Milestone:
    offset_hours: int
    point: PredictionPoint

    @property
    def category(self) -> Category:
        return self.point.category


def summarize(values: Sequence[float]) -> SeriesSummary:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise ValueError("Cannot summarize an empty series.")
    return SeriesSummary(
        current=float(arr[0]),
        average=float(arr.mean()),
        peak=float(arr.max()),
        minimum=float(arr.min()),
    )


def milestones(predictions: Sequence[PredictionPoint], offsets: Sequence[int] = MILESTONE_OFFSETS) -> List[Milestone]:
    """
    One card per hour offset; offsets past the horizon fall back to the last point.
    """
    if not predictions:
        return []
    last = len(predictions) - 1
    return [Milestone(offset_hours=int(o), point=predictions[min(last, int(o))]) for o in offsets]

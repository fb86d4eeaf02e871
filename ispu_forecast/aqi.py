"""
AQI (ISPU) calculation utilities.

Converts PM2.5 / PM10 concentrations into an index value using fixed
breakpoint tables and piecewise linear interpolation, then maps the index
onto six ordered health categories.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Tuple


PM25 = "pm25"
PM10 = "pm10"
POLLUTANTS = (PM25, PM10)

# (concentration breaks, index breaks); segment k spans breaks[k]..breaks[k+1].
_TABLES: Dict[str, Tuple[Tuple[float, ...], Tuple[float, ...]]] = {
    PM25: ((0.0, 15.5, 55.4, 150.4, 250.4, 500.0), (0, 50, 100, 200, 300, 500)),
    PM10: ((0.0, 50.0, 150.0, 350.0, 420.0, 10000.0), (0, 50, 100, 200, 300, 500)),
}


def _segments(conc: Tuple[float, ...], index: Tuple[float, ...]) -> List[Tuple[float, float, float, float]]:
    return [
        (conc[k], conc[k + 1], float(index[k]), float(index[k + 1]))
        for k in range(len(conc) - 1)
    ]


BREAKPOINTS: Dict[str, List[Tuple[float, float, float, float]]] = {
    name: _segments(conc, index) for name, (conc, index) in _TABLES.items()
}


class Category(IntEnum):
    """Health band; the integer value is the severity rank (0-5)."""

    GOOD = 0
    MODERATE = 1
    UNHEALTHY_SENSITIVE = 2
    UNHEALTHY = 3
    VERY_UNHEALTHY = 4
    HAZARDOUS = 5

    @property
    def rank(self) -> int:
        return int(self)

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Category.GOOD: "Good",
    Category.MODERATE: "Moderate",
    Category.UNHEALTHY_SENSITIVE: "Unhealthy (Sensitive)",
    Category.UNHEALTHY: "Unhealthy",
    Category.VERY_UNHEALTHY: "Very Unhealthy",
    Category.HAZARDOUS: "Hazardous",
}

# Inclusive upper bounds; anything above the last one is HAZARDOUS.
_CATEGORY_BOUNDS = (
    (50, Category.GOOD),
    (100, Category.MODERATE),
    (150, Category.UNHEALTHY_SENSITIVE),
    (200, Category.UNHEALTHY),
    (300, Category.VERY_UNHEALTHY),
)


def compute_index(concentration: float, pollutant: str = PM25) -> float:
    """
    Convert a concentration to an index value via piecewise linear interpolation.

    Concentrations past the table's last upper bound clamp to the maximum index.
    """
    table = BREAKPOINTS.get(pollutant)
    if table is None:
        raise ValueError(f"Unknown pollutant: {pollutant!r} (expected one of {POLLUTANTS})")
    c = float(concentration)
    if c < 0:
        raise ValueError(f"Concentration must be >= 0, got {c}")

    for c_lo, c_hi, i_lo, i_hi in table:
        if c_lo <= c <= c_hi:
            # Ratio first so that c == c_hi lands exactly on i_hi.
            return (i_hi - i_lo) * ((c - c_lo) / (c_hi - c_lo)) + i_lo
    return max(i_hi for _, _, _, i_hi in table)


def classify_category(index: float) -> Category:
    value = float(index)
    for upper, category in _CATEGORY_BOUNDS:
        if value <= upper:
            return category
    return Category.HAZARDOUS


def calculate_aqi(concentration: float, pollutant: str = PM25) -> Tuple[float, Category]:
    index = compute_index(concentration, pollutant)
    return index, classify_category(index)

"""Short user-facing strings, per language (Indonesian is the fallback)."""

from __future__ import annotations

from typing import Dict


DEFAULT_LANGUAGE = "id"

UI_TEXT: Dict[str, Dict[str, str]] = {
    "id": {
        "loading": "Memproses prediksi ML...",
        "error": "Gagal memuat prediksi",
        "empty": "Data historis tidak mencukupi untuk prediksi",
        "hourly_loading": "Memproses prakiraan...",
        "hourly_error": "Gagal memuat data",
        "title": "Prediksi AQI (ISPU) 48 Jam",
        "hourly_title": "Tren Prakiraan 24 Jam",
        "now": "Sekarang",
    },
    "en": {
        "loading": "Processing ML prediction...",
        "error": "Failed to load prediction",
        "empty": "Insufficient history for prediction",
        "hourly_loading": "Processing forecast...",
        "hourly_error": "Failed to load data",
        "title": "48H AQI Prediction",
        "hourly_title": "24H Forecast Trend",
        "now": "Now",
    },
    "su": {
        "loading": "Ngolah prediksi ML...",
        "error": "Gagal ngamuat prediksi",
        "empty": "Data historis teu cekap",
        "hourly_loading": "Ngolah prakiraan...",
        "hourly_error": "Gagal ngamuat data",
        "title": "Prediksi AQI 48 Jam",
        "hourly_title": "Tren Prakiraan 24 Jam",
        "now": "Ayeuna",
    },
}

LANGUAGES = tuple(UI_TEXT)


def text(language: str, key: str) -> str:
    table = UI_TEXT.get(language) or UI_TEXT[DEFAULT_LANGUAGE]
    return table[key]

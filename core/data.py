from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd


logger = logging.getLogger(__name__)

DATA_PATH = Path(os.getenv("AIRQUALITY_DATA_PATH", Path(__file__).resolve().parent / "airquality.csv"))

SOURCE_COLUMNS = {
    "Ozone": "ozone",
    "Temp": "temperature",
    "Temperature": "temperature",
    "Wind": "wind",
    "Month": "month",
    "Day": "day",
}
RECORD_COLUMNS = ["ozone", "temperature", "wind", "month", "day"]


@dataclass(frozen=True)
class Record:
    ozone: Optional[float]
    temperature: float
    wind: float
    month: int
    day: int


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.rename(columns={c: SOURCE_COLUMNS.get(str(c).strip(), str(c).strip()) for c in df.columns})
    missing = [c for c in RECORD_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Air quality table is missing columns: {', '.join(missing)}")
    df = df[RECORD_COLUMNS].copy()
    for col in ["ozone", "temperature", "wind"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    for col in ["month", "day"]:
        df[col] = pd.to_numeric(df[col], errors="raise").astype(int)
    return df.reset_index(drop=True)


@lru_cache(maxsize=4)
def _load_air_quality_cached(path: str) -> pd.DataFrame:
    df = pd.read_csv(path, na_values=["NA"])
    df = normalize_columns(df)
    logger.info("Loaded %d air quality records from %s", len(df), path)
    return df


def load_air_quality(path: Optional[Path] = None) -> pd.DataFrame:
    """Return the fixed measurement table; callers get their own copy."""
    return _load_air_quality_cached(str(path or DATA_PATH)).copy()


def frame_from_records(records: Iterable[Record]) -> pd.DataFrame:
    rows = [
        {"ozone": r.ozone, "temperature": r.temperature, "wind": r.wind, "month": r.month, "day": r.day}
        for r in records
    ]
    return normalize_columns(pd.DataFrame(rows, columns=RECORD_COLUMNS))


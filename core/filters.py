from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Mapping, Optional

import pandas as pd


logger = logging.getLogger(__name__)

MONTH_MIN = 5
MONTH_MAX = 9

MONTH_NAMES = {5: "May", 6: "June", 7: "July", 8: "August", 9: "September"}
TRUE_STRINGS = {"1", "true", "yes", "on"}


class InvalidRangeInput(UserWarning):
    """A month bound fell outside the dataset's month range and was clamped."""


class PlotMode(str, Enum):
    TEMPERATURE_VS_OZONE = "temperature_vs_ozone"
    WIND_VS_OZONE = "wind_vs_ozone"
    TIME_SERIES = "time_series"

    @property
    def label(self) -> str:
        return PLOT_MODE_LABELS[self]

    @classmethod
    def from_value(cls, value: object) -> "PlotMode":
        if isinstance(value, PlotMode):
            return value
        text = str(value or "").strip()
        for mode in cls:
            if text in (mode.value, mode.name, mode.label):
                return mode
        raise ValueError(f"Unknown plot mode: {value!r}")


PLOT_MODE_LABELS = {
    PlotMode.TEMPERATURE_VS_OZONE: "Temperature vs Ozone",
    PlotMode.WIND_VS_OZONE: "Wind vs Ozone",
    PlotMode.TIME_SERIES: "Ozone over time",
}


@dataclass(frozen=True)
class FilterParams:
    month_min: int = MONTH_MIN
    month_max: int = MONTH_MAX

    @property
    def months(self) -> List[int]:
        return list(range(self.month_min, self.month_max + 1))


@dataclass(frozen=True)
class ViewParams:
    mode: PlotMode = PlotMode.TEMPERATURE_VS_OZONE
    show_trend: bool = False
    filter: FilterParams = field(default_factory=FilterParams)

    @property
    def trend_applicable(self) -> bool:
        return self.mode is not PlotMode.TIME_SERIES


def clamp_month(value: object, default: int) -> int:
    try:
        month = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if month < MONTH_MIN or month > MONTH_MAX:
        clamped = max(MONTH_MIN, min(MONTH_MAX, month))
        warnings.warn(
            f"Month bound {month} outside [{MONTH_MIN}, {MONTH_MAX}]; using {clamped}",
            InvalidRangeInput,
            stacklevel=3,
        )
        logger.info("Clamped month bound %s to %s", month, clamped)
        return clamped
    return month


def normalize_filters(raw: Optional[Mapping[str, object]] = None) -> FilterParams:
    """Build a :class:`FilterParams` from widget or request values.

    Missing bounds fall back to the full range and out-of-range bounds are
    clamped. Reversed bounds are kept as given; they select nothing.
    """
    raw = raw or {}
    month_min = raw.get("month_min")
    month_max = raw.get("month_max")
    return FilterParams(
        month_min=clamp_month(month_min, MONTH_MIN) if month_min is not None else MONTH_MIN,
        month_max=clamp_month(month_max, MONTH_MAX) if month_max is not None else MONTH_MAX,
    )


def as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def normalize_view(raw: Optional[Mapping[str, object]] = None) -> ViewParams:
    raw = raw or {}
    mode_value = raw.get("mode")
    mode = PlotMode.from_value(mode_value) if mode_value else PlotMode.TEMPERATURE_VS_OZONE
    return ViewParams(
        mode=mode,
        show_trend=as_bool(raw.get("show_trend", False)),
        filter=normalize_filters(raw),
    )


def filter_by_month(records: pd.DataFrame, params: FilterParams) -> pd.DataFrame:
    """Keep rows whose month lies in ``[month_min, month_max]``, in source order."""
    if records.empty or "month" not in records.columns:
        return records.iloc[0:0].copy()
    mask = (records["month"] >= params.month_min) & (records["month"] <= params.month_max)
    return records.loc[mask].copy()


def month_range_label(months: Iterable[int]) -> str:
    months = sorted(months)
    if not months:
        return "No months"
    first, last = MONTH_NAMES.get(months[0], str(months[0])), MONTH_NAMES.get(months[-1], str(months[-1]))
    return first if first == last else f"{first}–{last}"

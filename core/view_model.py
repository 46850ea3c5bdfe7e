from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

from core.data import round_half_up
from core.filters import FilterParams, PlotMode, ViewParams, filter_by_month, normalize_filters
from core.smoothing import SmoothCurve, loess


logger = logging.getLogger(__name__)

REFERENCE_YEAR = 1973
SUMMARY_DECIMALS = 1
POINT_OPACITY = 0.6

OZONE_TITLE = "Ozone (ppb)"
SCATTER_SETTINGS = {
    PlotMode.TEMPERATURE_VS_OZONE: {"x_field": "temperature", "x_title": "Temperature (°F)", "color": "steelblue"},
    PlotMode.WIND_VS_OZONE: {"x_field": "wind", "x_title": "Wind Speed (mph)", "color": "darkgreen"},
}
TIME_SERIES_COLOR = "steelblue"

SUMMARY_FIELDS = {
    "avg_ozone": "ozone",
    "avg_temp": "temperature",
    "avg_wind": "wind",
}
SUMMARY_UNITS = {"avg_ozone": "ppb", "avg_temp": "°F", "avg_wind": "mph"}


class EmptyMeanError(ValueError):
    """Mean requested over no values (empty selection or only missing values)."""

    def __init__(self, field_name: str = "") -> None:
        self.field_name = field_name
        super().__init__(f"No values to average{f' for {field_name}' if field_name else ''}")


def rounded_mean(values: pd.Series, ndigits: int = SUMMARY_DECIMALS, *, field_name: str = "") -> float:
    clean = pd.to_numeric(values, errors="coerce").dropna()
    if clean.empty:
        raise EmptyMeanError(field_name)
    return round_half_up(float(clean.mean()), ndigits)  # type: ignore[return-value]


@dataclass(frozen=True)
class SummaryStats:
    avg_ozone: Optional[float] = None
    avg_temp: Optional[float] = None
    avg_wind: Optional[float] = None
    undefined: Tuple[str, ...] = ()

    def require(self, name: str) -> float:
        if name in self.undefined:
            raise EmptyMeanError(SUMMARY_FIELDS.get(name, name))
        return getattr(self, name)


@dataclass(frozen=True)
class ScatterSpec:
    x_field: str
    y_field: str
    color: str
    x_title: str
    y_title: str
    opacity: float = POINT_OPACITY
    smooth: Optional[SmoothCurve] = None
    points: List[Dict[str, Any]] = field(default_factory=list)
    kind: str = "scatter"


@dataclass(frozen=True)
class TimeSeriesSpec:
    date_field: str
    y_field: str
    x_title: str
    y_title: str
    color: str = TIME_SERIES_COLOR
    points: List[Dict[str, Any]] = field(default_factory=list)
    kind: str = "time_series"


ChartSpec = Union[ScatterSpec, TimeSeriesSpec]


@dataclass(frozen=True)
class ViewModel:
    filter: FilterParams
    filtered: pd.DataFrame = field(compare=False)
    summary: SummaryStats
    chart: ChartSpec


def compute_summary(filtered: pd.DataFrame) -> SummaryStats:
    values: Dict[str, Optional[float]] = {}
    undefined: List[str] = []
    for name, col in SUMMARY_FIELDS.items():
        series = filtered[col] if col in filtered.columns else pd.Series(dtype=float)
        try:
            values[name] = rounded_mean(series, field_name=col)
        except EmptyMeanError:
            values[name] = None
            undefined.append(name)
    if undefined:
        logger.info("Undefined averages for %d rows: %s", len(filtered), ", ".join(undefined))
    return SummaryStats(undefined=tuple(undefined), **values)


def _points(df: pd.DataFrame, cols: List[str]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for rec in df[cols].to_dict(orient="records"):
        out.append({k: (None if pd.isna(v) else v) for k, v in rec.items()})
    return out


def with_dates(filtered: pd.DataFrame, year: int = REFERENCE_YEAR) -> pd.DataFrame:
    df = filtered.copy()
    if df.empty:
        df["date"] = pd.Series(dtype="datetime64[ns]")
        return df
    parts = pd.DataFrame({"year": year, "month": df["month"], "day": df["day"]}, index=df.index)
    df["date"] = pd.to_datetime(parts, errors="coerce")
    return df


def build_scatter_spec(filtered: pd.DataFrame, mode: PlotMode, show_trend: bool) -> ScatterSpec:
    settings = SCATTER_SETTINGS[mode]
    x_field = settings["x_field"]
    smooth = None
    if show_trend:
        smooth = loess(filtered[x_field].tolist(), filtered["ozone"].tolist())
    return ScatterSpec(
        x_field=x_field,
        y_field="ozone",
        color=settings["color"],
        x_title=settings["x_title"],
        y_title=OZONE_TITLE,
        smooth=smooth,
        points=_points(filtered, [x_field, "ozone", "month", "day"]),
    )


def build_time_series_spec(filtered: pd.DataFrame) -> TimeSeriesSpec:
    dated = with_dates(filtered)
    points = _points(dated, ["date", "ozone", "month", "day"])
    for p in points:
        if p["date"] is not None:
            p["date"] = p["date"].date().isoformat()
    return TimeSeriesSpec(
        date_field="date",
        y_field="ozone",
        x_title="Date",
        y_title=OZONE_TITLE,
        points=points,
    )


def build_chart_spec(filtered: pd.DataFrame, view: ViewParams) -> ChartSpec:
    if view.mode is PlotMode.TIME_SERIES:
        return build_time_series_spec(filtered)
    return build_scatter_spec(filtered, view.mode, view.show_trend)


def build_view_model(filtered: pd.DataFrame, view: ViewParams) -> Tuple[SummaryStats, ChartSpec]:
    return compute_summary(filtered), build_chart_spec(filtered, view)


def run_pipeline(records: pd.DataFrame, view: ViewParams) -> ViewModel:
    """Filter the records for ``view`` and build its summary and chart."""
    params = normalize_filters(asdict(view.filter))
    filtered = filter_by_month(records, params)
    summary, chart = build_view_model(filtered, view)
    logger.debug("View %s over months %s-%s: %d rows", view.mode.value, params.month_min, params.month_max, len(filtered))
    return ViewModel(filter=params, filtered=filtered, summary=summary, chart=chart)


def summary_payload(summary: SummaryStats) -> Dict[str, Any]:
    return {
        name: {"value": getattr(summary, name), "unit": SUMMARY_UNITS[name]}
        for name in SUMMARY_FIELDS
    }


def chart_payload(chart: ChartSpec) -> Dict[str, Any]:
    return asdict(chart)

from __future__ import annotations

from typing import Any, Dict, Union

import altair as alt
import pandas as pd

from core.view_model import ChartSpec, ScatterSpec, TimeSeriesSpec

alt.data_transformers.disable_max_rows()

TREND_COLOR = "#1f2937"
BAND_COLOR = "#9ca3af"
CHART_HEIGHT = 360


def _scatter_chart(spec: ScatterSpec) -> Union[alt.Chart, alt.LayerChart]:
    points = pd.DataFrame(spec.points, columns=[spec.x_field, spec.y_field, "month", "day"])
    x_scale = alt.Scale(zero=False)
    base = (
        alt.Chart(points)
        .mark_circle(size=60, color=spec.color, opacity=spec.opacity)
        .encode(
            x=alt.X(f"{spec.x_field}:Q", title=spec.x_title, scale=x_scale, axis=alt.Axis(grid=False)),
            y=alt.Y(f"{spec.y_field}:Q", title=spec.y_title, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[
                alt.Tooltip("month:O", title="Month"),
                alt.Tooltip("day:O", title="Day"),
                alt.Tooltip(f"{spec.x_field}:Q", title=spec.x_title),
                alt.Tooltip(f"{spec.y_field}:Q", title=spec.y_title),
            ],
        )
    )
    if spec.smooth is None:
        return base.properties(height=CHART_HEIGHT)

    curve = pd.DataFrame(spec.smooth.to_records(), columns=["x", "fit", "lower", "upper"])
    band = (
        alt.Chart(curve)
        .mark_area(color=BAND_COLOR, opacity=0.3)
        .encode(x=alt.X("x:Q", title=spec.x_title, scale=x_scale), y=alt.Y("lower:Q", title=spec.y_title), y2="upper:Q")
    )
    line = (
        alt.Chart(curve)
        .mark_line(color=TREND_COLOR, strokeWidth=2)
        .encode(x=alt.X("x:Q", title=spec.x_title, scale=x_scale), y=alt.Y("fit:Q", title=spec.y_title))
    )
    return alt.layer(band, base, line).properties(height=CHART_HEIGHT)


def _time_series_chart(spec: TimeSeriesSpec) -> alt.Chart:
    points = pd.DataFrame(spec.points, columns=[spec.date_field, spec.y_field, "month", "day"])
    return (
        alt.Chart(points)
        .mark_line(color=spec.color, point={"filled": True, "size": 40, "color": spec.color})
        .encode(
            x=alt.X(f"{spec.date_field}:T", title=spec.x_title, axis=alt.Axis(format="%b %d", grid=False)),
            y=alt.Y(f"{spec.y_field}:Q", title=spec.y_title, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            order=alt.Order("index:Q"),
            tooltip=[
                alt.Tooltip(f"{spec.date_field}:T", title=spec.x_title, format="%Y-%m-%d"),
                alt.Tooltip(f"{spec.y_field}:Q", title=spec.y_title),
            ],
        )
        .transform_window(index="row_number()")
        .properties(height=CHART_HEIGHT)
    )


def render_chart(spec: ChartSpec) -> Union[alt.Chart, alt.LayerChart]:
    if isinstance(spec, TimeSeriesSpec):
        return _time_series_chart(spec)
    return _scatter_chart(spec)


def to_vega_spec(chart: Union[alt.Chart, alt.LayerChart, ChartSpec]) -> Dict[str, Any]:
    """Convert an Altair chart (or a chart spec) into a Vega-Lite spec dict (JSON-serializable)."""
    if isinstance(chart, (ScatterSpec, TimeSeriesSpec)):
        chart = render_chart(chart)
    return chart.to_dict()

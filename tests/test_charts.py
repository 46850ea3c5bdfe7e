"""Chart spec rendering through Altair."""

from __future__ import annotations

import altair as alt
import pytest

from core.charts import render_chart, to_vega_spec
from core.data import load_air_quality
from core.filters import FilterParams, PlotMode, ViewParams
from core.view_model import run_pipeline


@pytest.fixture(scope="module")
def records():
    return load_air_quality()


def _encoding_titles(spec: dict) -> set:
    layers = spec.get("layer", [spec])
    return {
        layer["encoding"][axis].get("title")
        for layer in layers
        for axis in ("x", "y")
        if axis in layer.get("encoding", {})
    }


def test_scatter_without_trend_is_single_layer(records) -> None:
    vm = run_pipeline(records, ViewParams(mode=PlotMode.WIND_VS_OZONE))
    chart = render_chart(vm.chart)

    assert isinstance(chart, alt.Chart)
    spec = to_vega_spec(chart)
    assert spec["mark"]["type"] == "circle"
    assert spec["mark"]["color"] == "darkgreen"
    assert spec["mark"]["opacity"] == 0.6
    assert _encoding_titles(spec) == {"Wind Speed (mph)", "Ozone (ppb)"}


def test_scatter_with_trend_layers_band_points_and_curve(records) -> None:
    vm = run_pipeline(records, ViewParams(mode=PlotMode.TEMPERATURE_VS_OZONE, show_trend=True))
    chart = render_chart(vm.chart)

    assert isinstance(chart, alt.LayerChart)
    spec = to_vega_spec(vm.chart)
    marks = [layer["mark"]["type"] for layer in spec["layer"]]
    assert marks == ["area", "circle", "line"]
    assert "Temperature (°F)" in _encoding_titles(spec)


def test_time_series_is_line_with_points(records) -> None:
    vm = run_pipeline(records, ViewParams(mode=PlotMode.TIME_SERIES, show_trend=True))
    spec = to_vega_spec(vm.chart)

    assert spec["mark"]["type"] == "line"
    assert spec["mark"]["point"]["filled"] is True
    assert spec["encoding"]["x"]["type"] == "temporal"
    assert spec["encoding"]["order"]["field"] == "index"
    window = spec["transform"][0]["window"][0]
    assert (window["op"], window["as"]) == ("row_number", "index")
    assert _encoding_titles(spec) == {"Date", "Ozone (ppb)"}


def test_empty_selection_still_renders(records) -> None:
    vm = run_pipeline(records, ViewParams(mode=PlotMode.TEMPERATURE_VS_OZONE, show_trend=True, filter=FilterParams(9, 5)))
    spec = to_vega_spec(vm.chart)
    assert spec["mark"]["type"] == "circle"
    assert _encoding_titles(spec) == {"Temperature (°F)", "Ozone (ppb)"}

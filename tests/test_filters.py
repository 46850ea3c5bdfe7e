"""Month filter and parameter normalization tests."""

from __future__ import annotations

import pytest

from core.data import load_air_quality
from core.filters import (
    FilterParams,
    InvalidRangeInput,
    PlotMode,
    ViewParams,
    filter_by_month,
    month_range_label,
    normalize_filters,
    normalize_view,
)


@pytest.fixture(scope="module")
def records():
    return load_air_quality()


@pytest.mark.parametrize("month_min,month_max", [(5, 9), (5, 5), (6, 8), (7, 9), (9, 9)])
def test_filter_keeps_only_months_in_range_in_source_order(records, month_min, month_max) -> None:
    filtered = filter_by_month(records, FilterParams(month_min, month_max))

    assert filtered["month"].between(month_min, month_max).all()
    assert filtered.index.is_monotonic_increasing
    assert set(filtered.index).issubset(set(records.index))
    expected = records[(records["month"] >= month_min) & (records["month"] <= month_max)]
    assert len(filtered) == len(expected)


def test_full_range_returns_entire_dataset(records) -> None:
    filtered = filter_by_month(records, FilterParams(5, 9))
    assert len(filtered) == len(records) == 153
    assert filtered.equals(records)


def test_single_month_returns_only_that_month(records) -> None:
    june = filter_by_month(records, FilterParams(6, 6))
    assert len(june) == 30
    assert set(june["month"]) == {6}
    assert june["day"].tolist() == list(range(1, 31))


def test_reversed_bounds_select_nothing(records) -> None:
    filtered = filter_by_month(records, FilterParams(8, 6))
    assert filtered.empty
    assert list(filtered.columns) == list(records.columns)


def test_filter_does_not_mutate_input(records) -> None:
    before = records.copy()
    filtered = filter_by_month(records, FilterParams(7, 7))
    filtered.loc[:, "ozone"] = 0.0
    assert records.equals(before)


def test_normalize_filters_defaults_to_full_range() -> None:
    assert normalize_filters({}) == FilterParams(5, 9)
    assert normalize_filters(None) == FilterParams(5, 9)


def test_normalize_filters_clamps_out_of_range_bounds() -> None:
    with pytest.warns(InvalidRangeInput):
        params = normalize_filters({"month_min": 1, "month_max": 12})
    assert params == FilterParams(5, 9)


def test_normalize_filters_keeps_reversed_bounds() -> None:
    assert normalize_filters({"month_min": 9, "month_max": 5}) == FilterParams(9, 5)


def test_normalize_filters_coerces_strings() -> None:
    assert normalize_filters({"month_min": "6", "month_max": "7"}) == FilterParams(6, 7)


def test_normalize_view_parses_mode_and_trend() -> None:
    view = normalize_view({"mode": "wind_vs_ozone", "show_trend": True, "month_min": 6, "month_max": 8})
    assert view == ViewParams(mode=PlotMode.WIND_VS_OZONE, show_trend=True, filter=FilterParams(6, 8))
    assert view.trend_applicable


def test_normalize_view_accepts_labels_and_defaults() -> None:
    assert normalize_view({"mode": "Ozone over time"}).mode is PlotMode.TIME_SERIES
    assert not normalize_view({"mode": PlotMode.TIME_SERIES}).trend_applicable
    assert normalize_view({}) == ViewParams()


def test_unknown_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        PlotMode.from_value("bar_chart")


def test_month_range_label() -> None:
    assert month_range_label([5, 6, 7]) == "May–July"
    assert month_range_label([8]) == "August"
    assert month_range_label([]) == "No months"


@pytest.mark.parametrize(
    "raw,expected",
    [("false", False), ("0", False), ("", False), ("no", False), ("true", True), ("On", True), (True, True), (0, False)],
)
def test_normalize_view_parses_trend_flag(raw, expected) -> None:
    assert normalize_view({"show_trend": raw}).show_trend is expected

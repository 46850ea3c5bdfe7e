from __future__ import annotations

from typing import List

from pydantic import BaseModel

from core.filters import MONTH_MAX, MONTH_MIN, PlotMode


class ViewParamsModel(BaseModel):
    mode: PlotMode = PlotMode.TEMPERATURE_VS_OZONE
    show_trend: bool = False
    month_min: int = MONTH_MIN
    month_max: int = MONTH_MAX


class PlotModeModel(BaseModel):
    value: str
    label: str
    trend_applicable: bool


class MetaModesResponse(BaseModel):
    modes: List[PlotModeModel]


class MonthModel(BaseModel):
    month: int
    name: str


class MetaMonthsResponse(BaseModel):
    month_min: int
    month_max: int
    months: List[MonthModel]

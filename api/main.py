from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import MetaModesResponse, MetaMonthsResponse, MonthModel, PlotModeModel, ViewParamsModel
from core.charts import to_vega_spec
from core.data import load_air_quality
from core.filters import MONTH_MAX, MONTH_MIN, MONTH_NAMES, PlotMode, ViewParams, normalize_view
from core.view_model import ViewModel, chart_payload, run_pipeline, summary_payload


app = FastAPI(title="Air Quality Explorer API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _view_from_model(model: ViewParamsModel) -> ViewParams:
    return normalize_view(model.model_dump())


def _compute(model: ViewParamsModel) -> ViewModel:
    return run_pipeline(load_air_quality(), _view_from_model(model))


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/modes", response_model=MetaModesResponse)
def meta_modes():
    modes = [
        PlotModeModel(value=m.value, label=m.label, trend_applicable=m is not PlotMode.TIME_SERIES)
        for m in PlotMode
    ]
    return MetaModesResponse(modes=modes)


@app.get("/meta/months", response_model=MetaMonthsResponse)
def meta_months():
    return MetaMonthsResponse(
        month_min=MONTH_MIN,
        month_max=MONTH_MAX,
        months=[MonthModel(month=k, name=v) for k, v in MONTH_NAMES.items()],
    )


@app.post("/view")
def view(params: ViewParamsModel):
    try:
        vm = _compute(params)
        return _json(
            {
                "filters": asdict(vm.filter),
                "mode": params.mode.value,
                "row_count": len(vm.filtered),
                "summary": summary_payload(vm.summary),
                "undefined": list(vm.summary.undefined),
                "chart": chart_payload(vm.chart),
                "vega_spec": to_vega_spec(vm.chart),
            }
        )
    except Exception as exc:
        logger.exception("view failed")
        return _error(exc)


@app.post("/export")
def export_rows(params: ViewParamsModel):
    try:
        vm = _compute(params)
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc)
    csv_bytes = vm.filtered.to_csv(index=False).encode("utf-8")
    filename = f"airquality_{vm.filter.month_min}_{vm.filter.month_max}.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})

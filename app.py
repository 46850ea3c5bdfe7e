import logging
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from core.charts import render_chart
from core.data import load_air_quality
from core.filters import MONTH_MAX, MONTH_MIN, MONTH_NAMES, PlotMode, month_range_label, normalize_view
from core.view_model import SUMMARY_UNITS, SummaryStats, run_pipeline

alt.data_transformers.disable_max_rows()
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

PLACEHOLDER = "—"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(mode: PlotMode, month_min: int, month_max: int, show_trend: bool) -> str:
    chips = [
        f"View: {mode.label}",
        f"Months: {month_range_label(range(month_min, month_max + 1))}",
    ]
    if mode is not PlotMode.TIME_SERIES:
        chips.append(f"Trend: {'on' if show_trend else 'off'}")
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def format_stat(value: Optional[float], unit: str) -> str:
    return f"{value:.1f} {unit}" if value is not None else PLACEHOLDER


def render_page_header(title: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>New York, May–September 1973</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def render_summary(summary: SummaryStats):
    cols = st.columns(3)
    cols[0].metric("Average Ozone", format_stat(summary.avg_ozone, SUMMARY_UNITS["avg_ozone"]), help="Days without an ozone reading are left out.")
    cols[1].metric("Average Temperature", format_stat(summary.avg_temp, SUMMARY_UNITS["avg_temp"]))
    cols[2].metric("Average Wind Speed", format_stat(summary.avg_wind, SUMMARY_UNITS["avg_wind"]))


# ---------- UI setup ----------
st.set_page_config(page_title="Air Quality Explorer", layout="wide")
inject_base_styles()

records = load_air_quality()
if records.empty:
    st.error("No air quality records found.")
    st.stop()

# ----- Sidebar: view + filters -----
with st.sidebar:
    st.markdown("### View")
    mode = st.selectbox("Plot", options=list(PlotMode), format_func=lambda m: m.label, index=0)
    show_trend = False
    if mode is not PlotMode.TIME_SERIES:
        show_trend = st.checkbox("Show trend line", value=False, help="LOESS fit with a 95% confidence band.")

    st.markdown("---")
    st.markdown("### Quick filters")
    month_min, month_max = st.slider(
        "Months",
        min_value=MONTH_MIN,
        max_value=MONTH_MAX,
        value=(MONTH_MIN, MONTH_MAX),
        step=1,
        help=", ".join(f"{k} = {v}" for k, v in MONTH_NAMES.items()),
    )

view = normalize_view({"mode": mode, "show_trend": show_trend, "month_min": month_min, "month_max": month_max})
vm = run_pipeline(records, view)

# ----- Page -----
filter_summary_html = format_filter_summary(view.mode, vm.filter.month_min, vm.filter.month_max, view.show_trend)
render_page_header("Air Quality Explorer", filter_summary_html, export_df=vm.filtered, export_name="airquality_filtered.csv")
st.caption(f"{len(vm.filtered):,} of {len(records):,} days selected.")

with card("Summary"):
    render_summary(vm.summary)

with card(view.mode.label):
    if vm.filtered.empty:
        st.info("No data for the selected months.")
    else:
        st.altair_chart(render_chart(vm.chart), use_container_width=True)

with st.expander("Filtered records", expanded=False):
    st.dataframe(vm.filtered, hide_index=True, use_container_width=True)

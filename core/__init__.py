"""Core (UI-agnostic) air quality dashboard logic.

This package contains:
- data loading (CSV -> pandas)
- month filter normalization and filtering
- view model computation (summary stats + chart spec dataclasses)
- LOESS trend curves
- chart helpers (chart spec -> Altair -> Vega-Lite spec dict)
"""

"""Local regression (LOESS) trend curves for the scatter views.

Quadratic local fits with tricube weights over the nearest ``span`` share of
the points. Standard errors come from the linear smoother matrix, so the band
is ``fit ± z * se`` with the residual scale estimated from the same smoother.
The band uses a fixed normal quantile (``CONFIDENCE_Z``) rather than a t
quantile on the residual degrees of freedom, so on small selections it is
narrower than a t-based band would be.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


logger = logging.getLogger(__name__)

DEFAULT_SPAN = 0.75
DEFAULT_DEGREE = 2
GRID_SIZE = 80
CONFIDENCE_Z = 1.96
MIN_POINTS = 4
MIN_DISTINCT_X = 3
BANDWIDTH_STRETCH = 1.001


@dataclass(frozen=True)
class SmoothCurve:
    x: List[float]
    fit: List[float]
    lower: List[float]
    upper: List[float]
    span: float = DEFAULT_SPAN

    def to_records(self) -> List[dict]:
        return [
            {"x": x, "fit": f, "lower": lo, "upper": hi}
            for x, f, lo, hi in zip(self.x, self.fit, self.lower, self.upper)
        ]


def _local_weights(x: np.ndarray, x0: float, q: int, degree: int = DEFAULT_DEGREE) -> np.ndarray:
    dist = np.abs(x - x0)
    h = np.sort(dist)[q - 1]
    # Tied clusters can leave fewer than degree + 1 distinct x values inside h;
    # widen h past the nearest such distance so each keeps a positive weight.
    distinct = np.sort(np.abs(np.unique(x) - x0))
    need = min(degree + 1, len(distinct))
    if h <= distinct[need - 1]:
        h = distinct[need - 1] * BANDWIDTH_STRETCH
    if h <= 0:
        return (dist == 0).astype(float)
    u = np.clip(dist / h, 0.0, 1.0)
    return (1.0 - u**3) ** 3


def _operator_row(x: np.ndarray, x0: float, q: int, degree: int) -> np.ndarray:
    """Row ``l`` such that the local fit at ``x0`` equals ``l @ y``."""
    w = _local_weights(x, x0, q, degree)
    design = np.vander(x - x0, degree + 1, increasing=True)
    sw = np.sqrt(w)
    pinv = np.linalg.pinv(design * sw[:, None])
    return pinv[0] * sw


def loess(
    x: Sequence[float],
    y: Sequence[float],
    *,
    span: float = DEFAULT_SPAN,
    degree: int = DEFAULT_DEGREE,
    grid_size: int = GRID_SIZE,
    z: float = CONFIDENCE_Z,
) -> Optional[SmoothCurve]:
    """Fit a LOESS curve over finite ``(x, y)`` pairs.

    Returns ``None`` when there are too few points to fit a local quadratic.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    keep = np.isfinite(xs) & np.isfinite(ys)
    xs, ys = xs[keep], ys[keep]

    n = len(xs)
    if n < MIN_POINTS or len(np.unique(xs)) < MIN_DISTINCT_X:
        logger.warning("Skipping trend curve: %d usable points, %d distinct x", n, len(np.unique(xs)))
        return None

    q = min(n, max(degree + 1, int(np.floor(span * n))))

    smoother = np.vstack([_operator_row(xs, xi, q, degree) for xi in xs])
    residuals = ys - smoother @ ys
    resid_op = np.eye(n) - smoother
    delta = float(np.trace(resid_op.T @ resid_op))
    sigma = float(np.sqrt(residuals @ residuals / delta)) if delta > 0 else 0.0

    grid = np.linspace(xs.min(), xs.max(), grid_size)
    rows = np.vstack([_operator_row(xs, g, q, degree) for g in grid])
    fit = rows @ ys
    se = sigma * np.sqrt(np.sum(rows**2, axis=1))

    return SmoothCurve(
        x=grid.tolist(),
        fit=fit.tolist(),
        lower=(fit - z * se).tolist(),
        upper=(fit + z * se).tolist(),
        span=span,
    )

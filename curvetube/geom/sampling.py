from __future__ import annotations

import numpy as np

from .basis import DEGREE, basis_row, max_parameter, open_uniform_knots

TANGENT_EPS = 1e-4


def _normalize(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    n = np.maximum(n, eps)
    return v / n


def find_span(t: float, n_ctrl: int, knots: np.ndarray, degree: int = DEGREE) -> int:
    """
    Index of the knot span [knots[s], knots[s+1]) holding t, scanning forward
    from the degree index. t >= max_t is forced into the last valid span.
    """
    if t >= max_parameter(n_ctrl, degree):
        return n_ctrl - 1
    span = degree
    while span < n_ctrl - 1 and t >= knots[span + 1]:
        span += 1
    return span


def evaluate(control_points: np.ndarray, t: float) -> np.ndarray:
    """
    Point on the cubic open-uniform B-spline at parameter t (clamped to [0, max_t]).

    With fewer than degree+1 control points there is no valid spline; the first
    control point is returned.
    """
    C = np.asarray(control_points, dtype=np.float64)
    n_ctrl = C.shape[0]
    if n_ctrl < DEGREE + 1:
        return C[0].copy()
    max_t = max_parameter(n_ctrl)
    t = float(np.clip(t, 0.0, max_t))
    knots = open_uniform_knots(n_ctrl)
    span = find_span(t, n_ctrl, knots)
    N = basis_row(n_ctrl, t, knots)
    lo = span - DEGREE
    return N[lo : span + 1] @ C[lo : span + 1]


def tangent(control_points: np.ndarray, t: float, eps: float = TANGENT_EPS) -> np.ndarray:
    """Unit tangent by central difference, with both probes clamped into [0, max_t]."""
    C = np.asarray(control_points, dtype=np.float64)
    max_t = max_parameter(C.shape[0])
    t0 = max(float(t) - eps, 0.0)
    t1 = min(float(t) + eps, max_t)
    d = evaluate(C, t1) - evaluate(C, t0)
    return _normalize(d)


def sample(control_points: np.ndarray, n_samples: int) -> np.ndarray:
    """Evaluate the spline at n_samples evenly spaced parameters over [0, max_t]."""
    C = np.asarray(control_points, dtype=np.float64)
    max_t = max(max_parameter(C.shape[0]), 0.0)
    ts = np.linspace(0.0, max_t, int(n_samples), dtype=np.float64)
    return np.stack([evaluate(C, t) for t in ts], axis=0).reshape(-1, 3)

"""
Cubic B-spline basis functions, open-uniform knot vectors and chord-length
parameterization.

The basis is evaluated with the Cox–de Boor recursion:

    N_{i,0}(t) = 1  if knot[i] <= t < knot[i+1]   (closed at the final knot)
    N_{i,k}(t) = (t - knot[i])     / (knot[i+k]   - knot[i])   * N_{i,k-1}(t)
               + (knot[i+k+1] - t) / (knot[i+k+1] - knot[i+1]) * N_{i+1,k-1}(t)

A zero denominator (repeated knots) contributes zero to its term.

Knot vectors are *unnormalized*: for L control points of degree 3 the domain is
t ∈ [0, L - 3] with unit spacing between interior knots.
"""
from __future__ import annotations

from typing import Dict, Sequence, Tuple
import numpy as np

DEGREE = 3
MIN_POINTS = DEGREE + 1
POINTS_PER_CONTROL = 10


def _base(i: int, t: float, knots: Sequence[float]) -> float:
    a, b = knots[i], knots[i + 1]
    if a <= t < b:
        return 1.0
    # Close the last non-empty span so t == knots[-1] is covered.
    if t == knots[-1] and a < b and b == knots[-1]:
        return 1.0
    return 0.0


def _cox_de_boor(i: int, k: int, t: float, knots: Sequence[float], cache: Dict[Tuple[int, int], float]) -> float:
    key = (i, k)
    hit = cache.get(key)
    if hit is not None:
        return hit
    if k == 0:
        val = _base(i, t, knots)
    else:
        val = 0.0
        d1 = knots[i + k] - knots[i]
        if d1 != 0.0:
            val += (t - knots[i]) / d1 * _cox_de_boor(i, k - 1, t, knots, cache)
        d2 = knots[i + k + 1] - knots[i + 1]
        if d2 != 0.0:
            val += (knots[i + k + 1] - t) / d2 * _cox_de_boor(i + 1, k - 1, t, knots, cache)
    cache[key] = val
    return val


def basis(i: int, k: int, t: float, knots: Sequence[float]) -> float:
    """
    Value of the B-spline basis function N_{i,k}(t) on the given knot vector.

    Pure function of its inputs; total for any non-decreasing knot vector with
    len(knots) >= i + k + 2.
    """
    kn = tuple(float(x) for x in np.asarray(knots, dtype=np.float64).ravel())
    if i < 0 or i + k + 1 >= len(kn):
        raise ValueError(f"basis index i={i}, degree k={k} out of range for {len(kn)} knots.")
    return _cox_de_boor(int(i), int(k), float(t), kn, {})


def basis_row(n_ctrl: int, t: float, knots: Sequence[float], degree: int = DEGREE) -> np.ndarray:
    """All n_ctrl basis values at t, sharing one memo table across the row."""
    kn = tuple(float(x) for x in np.asarray(knots, dtype=np.float64).ravel())
    cache: Dict[Tuple[int, int], float] = {}
    return np.array([_cox_de_boor(i, degree, float(t), kn, cache) for i in range(n_ctrl)], dtype=np.float64)


def max_parameter(n_ctrl: int, degree: int = DEGREE) -> float:
    """Upper end of the parameter domain, max_t = n_ctrl - degree."""
    return float(n_ctrl - degree)


def open_uniform_knots(n_ctrl: int, degree: int = DEGREE) -> np.ndarray:
    """
    Open-uniform (clamped) knot vector: degree+1 zeros, unit steps 1, 2, ...,
    then degree+1 copies of max_t = n_ctrl - degree.

    Length is n_ctrl + degree + 1.
    """
    if n_ctrl < degree + 1:
        raise ValueError(f"Need at least {degree + 1} control points for degree {degree}, got {n_ctrl}.")
    max_t = max_parameter(n_ctrl, degree)
    interior = np.arange(1, n_ctrl - degree, dtype=np.float64)
    return np.r_[np.zeros(degree + 1), interior, np.full(degree + 1, max_t)]


def control_point_count(n_points: int) -> int:
    """Control-point policy: max(4, n_points // 10)."""
    return max(MIN_POINTS, int(n_points) // POINTS_PER_CONTROL)


def chord_length_parameters(points: np.ndarray, max_t: float) -> np.ndarray:
    """
    Cumulative chord length of the polyline, normalized and rescaled to [0, max_t].
    All-zero parameters are returned when every point coincides.
    """
    P = np.asarray(points, dtype=np.float64)
    if P.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    seg = np.linalg.norm(np.diff(P, axis=0), axis=1)
    s = np.concatenate([[0.0], np.cumsum(seg)])
    total = float(s[-1])
    if total <= 0.0:
        return np.zeros(P.shape[0], dtype=np.float64)
    return s / total * float(max_t)


def design_matrix(params: np.ndarray, n_ctrl: int, knots: Sequence[float], degree: int = DEGREE) -> np.ndarray:
    """Collocation matrix N[p, i] = N_{i,degree}(params[p]), shape (n_points, n_ctrl)."""
    params = np.asarray(params, dtype=np.float64).ravel()
    N = np.empty((params.size, n_ctrl), dtype=np.float64)
    for p, u in enumerate(params):
        N[p] = basis_row(n_ctrl, u, knots, degree)
    return N

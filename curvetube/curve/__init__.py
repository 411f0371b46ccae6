from __future__ import annotations

from typing import Union
import logging
import warnings
import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning, solve

from ..errors import NumericalError
from ..models import CubicBSpline, CurveSample, PointSet
from ..geom.basis import (
    DEGREE,
    MIN_POINTS,
    chord_length_parameters,
    control_point_count,
    design_matrix,
    max_parameter,
    open_uniform_knots,
)

logger = logging.getLogger(__name__)

SAMPLES_PER_CONTROL = 20


def _points_of(points: Union[PointSet, np.ndarray]) -> np.ndarray:
    if isinstance(points, PointSet):
        return points.points
    return PointSet(points=points).points


def solve_normal_equations(N: np.ndarray, Q: np.ndarray) -> np.ndarray:
    """
    Least-squares coefficients C minimizing ||N C - Q|| via (NᵗN) C = NᵗQ.

    Every column of Q (one per coordinate channel) is solved against the same
    Cholesky factorization. Raises NumericalError when NᵗN is singular or its
    reciprocal condition number underflows machine precision.
    """
    NtN = N.T @ N
    NtQ = N.T @ Q
    with warnings.catch_warnings():
        warnings.simplefilter("error", LinAlgWarning)
        try:
            C = solve(NtN, NtQ, assume_a="pos")
        except (LinAlgError, LinAlgWarning) as e:
            raise NumericalError(
                f"Normal equations are singular for {N.shape[0]} points and {N.shape[1]} control points: {e}"
            ) from e
    if not np.all(np.isfinite(C)):
        raise NumericalError("Least-squares solve produced non-finite control points.")
    return C


def fit_control_points(points: Union[PointSet, np.ndarray]) -> CubicBSpline:
    """
    Least-squares cubic B-spline through an ordered point sequence.

    - L = max(4, n_points // 10) control points on an open-uniform knot vector
      over [0, L - 3].
    - Data parameters by chord length rescaled to the same interval.
    - Coordinates x, y, z share one collocation matrix.

    With fewer than 4 points no cubic fit is possible and the input points are
    returned verbatim as the control points.

    Raises:
        NumericalError if the normal-equations matrix is singular.
    """
    P = _points_of(points)
    n_points = P.shape[0]
    if n_points < MIN_POINTS:
        logger.warning("fit: %d points is below the cubic minimum of %d; passing points through", n_points, MIN_POINTS)
        return CubicBSpline(control_points=P.copy())

    n_ctrl = control_point_count(n_points)
    max_t = max_parameter(n_ctrl, DEGREE)
    knots = open_uniform_knots(n_ctrl, DEGREE)
    params = chord_length_parameters(P, max_t)
    N = design_matrix(params, n_ctrl, knots, DEGREE)
    logger.debug("fit: n_points=%d n_ctrl=%d max_t=%.1f", n_points, n_ctrl, max_t)

    C = solve_normal_equations(N, P)
    return CubicBSpline(control_points=np.asarray(C, dtype=np.float64))


def curvify(points: Union[PointSet, np.ndarray]) -> CurveSample:
    """
    Fit a cubic B-spline to ``points`` and sample it at 20 parameters per
    control point, evenly spaced over [0, max_t] (both ends included).

    Fewer than 4 points are returned unchanged.

    Raises:
        NumericalError propagated from the fit.
    """
    P = _points_of(points)
    if P.shape[0] < MIN_POINTS:
        return CurveSample(points=P.copy())
    spline = fit_control_points(P)
    return spline.sample(SAMPLES_PER_CONTROL * spline.n_ctrl)


__all__ = ["SAMPLES_PER_CONTROL", "fit_control_points", "curvify", "solve_normal_equations"]

import logging

import numpy as np
import pytest

from curvetube import CubicBSpline, CurveSample, NumericalError, PointSet
from curvetube.curve import SAMPLES_PER_CONTROL, curvify, fit_control_points
from curvetube.geom.sampling import evaluate, find_span, tangent
from curvetube.geom.basis import open_uniform_knots


def _straight_points(n=10):
    x = np.arange(n, dtype=float)
    return np.column_stack([x, np.zeros_like(x), np.zeros_like(x)])


def _noisy_sine(n=200, noise=0.01, seed=7):
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 10.0, n)
    y = np.sin(x) + rng.normal(0.0, noise, n)
    return np.column_stack([x, y, np.zeros_like(x)])


def test_curvify_passes_short_input_through():
    pts = np.array([[0.0, 1.0, 2.0], [3.0, 4.0, 5.0], [6.0, 7.0, 8.5]])
    curve = curvify(pts)
    assert isinstance(curve, CurveSample)
    assert np.array_equal(curve.points, pts)


def test_fit_below_minimum_returns_points_as_controls(caplog):
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
    with caplog.at_level(logging.WARNING, logger="curvetube"):
        spline = fit_control_points(PointSet(points=pts))
    assert np.array_equal(spline.control_points, pts)
    assert any("below the cubic minimum" in r.getMessage() for r in caplog.records)
    # No valid spline: evaluation falls back to the first control point
    np.testing.assert_allclose(spline.eval(0.3), pts[0])


def test_straight_line_fit_is_exact():
    pts = _straight_points(10)
    spline = fit_control_points(pts)
    assert spline.n_ctrl == 4
    np.testing.assert_allclose(spline.control_points[:, 0], [0.0, 3.0, 6.0, 9.0], atol=1e-9)

    curve = curvify(pts)
    assert len(curve) == SAMPLES_PER_CONTROL * 4
    np.testing.assert_allclose(curve.points[0], [0.0, 0.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(curve.points[-1], [9.0, 0.0, 0.0], atol=1e-9)
    assert np.allclose(curve.points[:, 1:], 0.0, atol=1e-9)
    assert np.all(np.diff(curve.points[:, 0]) > 0.0)


def test_noisy_sine_fit_tracks_signal():
    pts = _noisy_sine()
    spline = fit_control_points(pts)
    assert spline.n_ctrl == 20
    curve = curvify(pts)
    assert len(curve) == 400
    err = np.abs(curve.points[:, 1] - np.sin(curve.points[:, 0]))
    assert float(err.max()) < 0.05
    # Clamped knots: the curve starts and ends near the data ends
    assert np.linalg.norm(curve.points[0] - pts[0]) < 0.05
    assert np.linalg.norm(curve.points[-1] - pts[-1]) < 0.05


def test_coincident_points_raise_numerical_error():
    pts = np.tile([[1.0, 2.0, 3.0]], (12, 1))
    with pytest.raises(NumericalError):
        fit_control_points(pts)
    with pytest.raises(NumericalError):
        curvify(pts)


def test_fit_rejects_bad_shapes():
    with pytest.raises(ValueError):
        fit_control_points(np.zeros((10, 2)))


def test_fit_is_deterministic():
    pts = _noisy_sine(n=80)
    a = curvify(pts)
    b = curvify(pts.copy())
    assert np.array_equal(a.points, b.points)


def test_evaluate_clamps_and_hits_end_controls():
    C = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 0.0], [2.0, -1.0, 0.0], [3.0, 0.0, 1.0], [4.0, 1.0, 1.0]])
    np.testing.assert_allclose(evaluate(C, 0.0), C[0])
    np.testing.assert_allclose(evaluate(C, 2.0), C[-1])
    np.testing.assert_allclose(evaluate(C, -3.0), C[0])
    np.testing.assert_allclose(evaluate(C, 10.0), C[-1])


def test_find_span():
    knots = open_uniform_knots(7)
    assert find_span(0.0, 7, knots) == 3
    assert find_span(0.5, 7, knots) == 3
    assert find_span(1.0, 7, knots) == 4
    assert find_span(3.999, 7, knots) == 6
    assert find_span(4.0, 7, knots) == 6


def test_tangent_is_unit_and_follows_line():
    spline = fit_control_points(_straight_points(10))
    for t in (0.0, 0.25, 0.5, 1.0):
        np.testing.assert_allclose(tangent(spline.control_points, t), [1.0, 0.0, 0.0], atol=1e-6)
    T = spline.tangent(np.linspace(0.0, spline.max_t, 11))
    assert T.shape == (11, 3)
    assert np.allclose(np.linalg.norm(T, axis=1), 1.0, atol=1e-9)


def test_spline_accessors():
    spline = CubicBSpline(control_points=np.random.default_rng(0).normal(size=(6, 3)))
    assert spline.degree == 3
    assert spline.max_t == 3.0
    assert spline.knots.shape == (10,)
    pts = spline.eval(np.linspace(0.0, 3.0, 5))
    assert pts.shape == (5, 3)
    np.testing.assert_allclose(pts[0], spline.control_points[0])
    np.testing.assert_allclose(pts[-1], spline.control_points[-1])
    assert len(spline.sample(30)) == 30

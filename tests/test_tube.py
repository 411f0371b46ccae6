import numpy as np
import pytest

from curvetube import CurveSample, Mesh, curvify, meshify
from curvetube.geom.frames import sample_tangents, view_frames
from curvetube.tube import RADIAL_SEGMENTS


def _line_along_x(n=5):
    x = np.arange(n, dtype=float)
    return np.column_stack([x, np.zeros_like(x), np.zeros_like(x)])


def _helix(n=60, turns=2.0, radius=2.0, pitch=1.0):
    s = np.linspace(0.0, 2.0 * np.pi * turns, n)
    return np.column_stack([radius * np.cos(s), radius * np.sin(s), pitch * s / (2.0 * np.pi)])


def _face_normals(mesh):
    P, F = mesh.positions, mesh.triangles
    return np.cross(P[F[:, 1]] - P[F[:, 0]], P[F[:, 2]] - P[F[:, 0]])


@pytest.mark.parametrize("S", [2, 3, 5, 17])
def test_tube_counts(S):
    mesh = meshify(CurveSample(points=_line_along_x(S)), (0.0, 0.0, 10.0), 0.1)
    assert mesh.n_vertices == RADIAL_SEGMENTS * S
    assert mesh.normals.shape == (RADIAL_SEGMENTS * S, 3)
    assert mesh.uvs.shape == (RADIAL_SEGMENTS * S, 2)
    assert mesh.n_triangles == RADIAL_SEGMENTS * 2 * (S - 1)


@pytest.mark.parametrize("S", [0, 1])
def test_tube_empty_for_short_curve(S):
    mesh = meshify(_line_along_x(S), (0.0, 0.0, 10.0), 0.1)
    assert isinstance(mesh, Mesh)
    assert mesh.is_empty()
    assert mesh.normals.shape[0] == 0 and mesh.uvs.shape[0] == 0


def test_tube_rejects_bad_radius():
    with pytest.raises(ValueError):
        meshify(_line_along_x(4), (0.0, 0.0, 10.0), 0.0)


def test_tube_ring_faces_viewer():
    r = 0.25
    mesh = meshify(_line_along_x(5), (0.0, 0.0, 10.0), r)
    # Ring 0, angle 0 lies along `right`, which points at the viewer here.
    np.testing.assert_allclose(mesh.positions[0], [0.0, 0.0, r], atol=1e-12)
    # Angle π/2 lies along `up`, orthogonal to the view direction.
    np.testing.assert_allclose(mesh.positions[2], [0.0, -r, 0.0], atol=1e-12)
    np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-12)


def test_tube_uvs():
    S = 5
    mesh = meshify(_line_along_x(S), (0.0, 0.0, 10.0), 0.1)
    for i in range(S):
        for j in range(RADIAL_SEGMENTS):
            np.testing.assert_allclose(mesh.uvs[RADIAL_SEGMENTS * i + j], [i / (S - 1), j / RADIAL_SEGMENTS])


def test_tube_winding_is_outward():
    mesh = meshify(_line_along_x(6), (3.0, 4.0, 10.0), 0.2)
    F = mesh.triangles
    centroids = mesh.positions[F].mean(axis=1)
    axis_pts = np.column_stack([centroids[:, 0], np.zeros(len(F)), np.zeros(len(F))])
    radial = centroids - axis_pts
    assert np.all(np.sum(_face_normals(mesh) * radial, axis=1) > 0.0)


def test_tube_ring_indices():
    mesh = meshify(_line_along_x(3), (0.0, 0.0, 10.0), 0.1)
    F = mesh.triangles
    np.testing.assert_array_equal(F[0], [0, 1, 8])
    np.testing.assert_array_equal(F[1], [1, 9, 8])
    # Last angular step wraps around to vertex 0 of each ring
    np.testing.assert_array_equal(F[14], [7, 0, 15])
    np.testing.assert_array_equal(F[15], [0, 8, 15])


def test_tube_falls_back_when_tangent_points_at_viewer():
    z = np.arange(5, dtype=float)
    pts = np.column_stack([np.zeros_like(z), np.zeros_like(z), z])
    r = 0.5
    mesh = meshify(pts, (0.0, 0.0, 50.0), r)
    assert np.all(np.isfinite(mesh.positions))
    # up = t × Y = -X, right = up × t = +Y
    np.testing.assert_allclose(mesh.positions[0], [0.0, r, 0.0], atol=1e-12)
    np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-12)


def test_tube_handles_tangent_parallel_to_view_and_world_up():
    y = np.arange(4, dtype=float)
    pts = np.column_stack([np.zeros_like(y), y, np.zeros_like(y)])
    mesh = meshify(pts, (0.0, 10.0, 0.0), 0.1)
    assert np.all(np.isfinite(mesh.positions))
    np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-12)


def test_view_frames_are_orthonormal():
    pts = _helix()
    eye = np.array([5.0, -3.0, 8.0])
    T, UP, RIGHT = view_frames(pts, eye)
    for A in (T, UP, RIGHT):
        np.testing.assert_allclose(np.linalg.norm(A, axis=1), 1.0, atol=1e-9)
    assert np.allclose(np.sum(T * UP, axis=1), 0.0, atol=1e-9)
    assert np.allclose(np.sum(T * RIGHT, axis=1), 0.0, atol=1e-9)
    assert np.allclose(np.sum(UP * RIGHT, axis=1), 0.0, atol=1e-9)
    # Right-handed: right × up = tangent
    np.testing.assert_allclose(np.cross(RIGHT, UP), T, atol=1e-9)


def test_sample_tangents_differences():
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0]])
    T = sample_tangents(pts)
    np.testing.assert_allclose(T[0], [1.0, 0.0, 0.0])
    np.testing.assert_allclose(T[1], np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0))
    np.testing.assert_allclose(T[2], [0.0, 1.0, 0.0])


def test_sample_tangents_repeated_samples_stay_unit():
    pts = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    T = sample_tangents(pts)
    np.testing.assert_allclose(np.linalg.norm(T, axis=1), 1.0)


def test_pipeline_helix_to_tube():
    curve = curvify(_helix(n=60))
    mesh = meshify(curve, (0.0, 0.0, 20.0), 0.15)
    S = len(curve)
    assert S == 20 * 6
    assert mesh.n_vertices == 8 * S
    assert mesh.n_triangles == 16 * (S - 1)
    mesh.validate()


def test_meshify_is_deterministic():
    curve = curvify(_helix(n=40))
    a = meshify(curve, (1.0, 2.0, 3.0), 0.1)
    b = meshify(curve, (1.0, 2.0, 3.0), 0.1)
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.triangles, b.triangles)

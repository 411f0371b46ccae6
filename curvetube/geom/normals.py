"""Per-vertex normals accumulated from unit triangle face normals."""
from __future__ import annotations

import numpy as np

WORLD_UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)

_ZERO_EPS = 1e-12


def _normalize_or_up(v: np.ndarray) -> np.ndarray:
    """Row-wise normalization; zero-length rows become WORLD_UP."""
    n = np.linalg.norm(v, axis=1)
    out = np.empty_like(v)
    ok = n > _ZERO_EPS
    out[ok] = v[ok] / n[ok, None]
    out[~ok] = WORLD_UP
    return out


def face_normals(positions: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Unit face normals (v1-v0) × (v2-v0); degenerate faces get WORLD_UP."""
    P = np.asarray(positions, dtype=np.float64)
    F = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if F.shape[0] == 0:
        return np.zeros((0, 3), dtype=np.float64)
    v0, v1, v2 = P[F[:, 0]], P[F[:, 1]], P[F[:, 2]]
    return _normalize_or_up(np.cross(v1 - v0, v2 - v0))


def vertex_normals(positions: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """
    Sum each face's unit normal into its three vertices, then normalize.

    Vertices touched by no triangle, or whose contributions cancel, get WORLD_UP.
    """
    P = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    F = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    acc = np.zeros_like(P)
    fn = face_normals(P, F)
    for c in range(3):
        np.add.at(acc, F[:, c], fn)
    return _normalize_or_up(acc)

"""
Array-level rigid and non-rigid transforms used by ``Mesh``.

Rotations follow the right-hand rule about the chosen world axis:

    X: (y, z) -> (y cosθ - z sinθ, y sinθ + z cosθ)
    Y: (z, x) -> (z cosθ - x sinθ, z sinθ + x cosθ)
    Z: (x, y) -> (x cosθ - y sinθ, x sinθ + y cosθ)
"""
from __future__ import annotations

from typing import Tuple
import numpy as np

# (a, b) coordinate pair rotated for each axis index, ordered so a -> b is +θ.
_ROTATION_PLANES: Tuple[Tuple[int, int], ...] = ((1, 2), (2, 0), (0, 1))


def rotate_about_axis(vectors: np.ndarray, axis: int, angle: float) -> np.ndarray:
    """Rotate (N,3) vectors by ``angle`` radians about world axis 0/1/2."""
    V = np.asarray(vectors, dtype=np.float64).reshape(-1, 3)
    a, b = _ROTATION_PLANES[axis]
    c, s = np.cos(angle), np.sin(angle)
    out = V.copy()
    out[:, a] = V[:, a] * c - V[:, b] * s
    out[:, b] = V[:, a] * s + V[:, b] * c
    return out


def mirror_axis(positions: np.ndarray, axis: int) -> np.ndarray:
    """Negate one coordinate of every position."""
    P = np.asarray(positions, dtype=np.float64).reshape(-1, 3).copy()
    P[:, axis] = -P[:, axis]
    return P


def flip_winding(triangles: np.ndarray) -> np.ndarray:
    """Swap the first and last index of each triangle."""
    F = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    return F[:, ::-1].copy()

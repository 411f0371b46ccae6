"""
View-facing cross-section frames along a sampled curve.

For each sample x_i with unit tangent t_i and unit view direction
w_i = (viewpoint - x_i)/||viewpoint - x_i||:

  1) up_i    := normalize(t_i × w_i)          if |t_i · w_i| < 0.9
     up_i    := normalize(t_i × Y)            otherwise (tangent points at the viewer)
  2) right_i := normalize(up_i × t_i)

The frame (right_i, up_i, t_i) is right-handed, so a ring parameterized as
cos(θ)·right + sin(θ)·up winds counter-clockwise about the tangent. The ring
therefore always shows its full width to the viewer instead of collapsing
when the curve bends toward the camera.
"""
from __future__ import annotations

from typing import Tuple
import logging
import numpy as np

from .normals import WORLD_UP

logger = logging.getLogger(__name__)

VIEW_ALIGNMENT_LIMIT = 0.9

_EPS = 1e-12


def _normalize(v: np.ndarray, eps: float = _EPS) -> np.ndarray:
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    n = np.maximum(n, eps)
    return v / n


def _most_orthogonal_axis(t: np.ndarray) -> np.ndarray:
    """World axis with the smallest |dot| against t."""
    axes = np.eye(3, dtype=np.float64)
    k = int(np.argmin(np.abs(axes @ t)))
    return axes[k]


def sample_tangents(points: np.ndarray) -> np.ndarray:
    """
    Unit tangents at each polyline sample: forward difference at the first
    sample, backward at the last, central elsewhere.
    """
    X = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    n = X.shape[0]
    if n < 2:
        return np.zeros_like(X)
    D = np.empty_like(X)
    D[0] = X[1] - X[0]
    D[-1] = X[-1] - X[-2]
    if n > 2:
        D[1:-1] = X[2:] - X[:-2]
    T = _normalize(D)
    # Repeated samples give zero differences; borrow the next valid tangent (or the last one).
    ok = np.linalg.norm(D, axis=1) > _EPS
    if not ok.any():
        T[:] = (1.0, 0.0, 0.0)
    elif not ok.all():
        idx = np.nonzero(ok)[0]
        nearest = idx[np.clip(np.searchsorted(idx, np.arange(n)), 0, idx.size - 1)]
        T[~ok] = T[nearest[~ok]]
    return T


def view_frames(points: np.ndarray, viewpoint: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Cross-section frames (T, UP, RIGHT), each (S,3), oriented toward ``viewpoint``.
    """
    X = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    eye = np.asarray(viewpoint, dtype=np.float64).reshape(3)
    T = sample_tangents(X)
    W = _normalize(eye[None, :] - X)

    UP = np.empty_like(X)
    aligned = np.abs(np.sum(T * W, axis=1)) >= VIEW_ALIGNMENT_LIMIT
    UP[~aligned] = np.cross(T[~aligned], W[~aligned])
    UP[aligned] = np.cross(T[aligned], WORLD_UP[None, :])

    # Tangent parallel to both the view and world up: use the most orthogonal world axis.
    norms = np.linalg.norm(UP, axis=1)
    for i in np.nonzero(norms < 1e-9)[0]:
        logger.debug("frame %d: degenerate up vector, using world-axis fallback", i)
        UP[i] = np.cross(T[i], _most_orthogonal_axis(T[i]))
    UP = _normalize(UP)
    RIGHT = _normalize(np.cross(UP, T))
    return T, UP, RIGHT

"""
Camera-facing tube mesh around a sampled curve.

Vertex (i, j) sits on ring i (curve sample i) at angle θ_j = 2πj/8:

    offset = radius·(cos θ_j·right_i + sin θ_j·up_i)
    vertex = x_i + offset,   normal = offset/radius,   uv = (i/(S-1), j/8)

Its index is 8·i + j. Between rings i and i+1 every angular step contributes
two triangles, wound counter-clockwise seen from outside the tube.
"""
from __future__ import annotations

from typing import Sequence, Union
import logging
import numpy as np

from .models import CurveSample, Mesh
from .geom.frames import view_frames

logger = logging.getLogger(__name__)

RADIAL_SEGMENTS = 8


def _ring_triangles(n_rings: int, segments: int = RADIAL_SEGMENTS) -> np.ndarray:
    i = np.arange(n_rings - 1)[:, None]
    j = np.arange(segments)[None, :]
    a = i * segments + j
    b = i * segments + (j + 1) % segments
    c = (i + 1) * segments + j
    d = (i + 1) * segments + (j + 1) % segments
    lower = np.stack([a, b, c], axis=-1).reshape(-1, 3)
    upper = np.stack([b, d, c], axis=-1).reshape(-1, 3)
    tris = np.empty((lower.shape[0] * 2, 3), dtype=np.int64)
    tris[0::2] = lower
    tris[1::2] = upper
    return tris


def meshify(
    curve: Union[CurveSample, np.ndarray],
    viewpoint: Sequence[float],
    radius: float,
) -> Mesh:
    """
    Sweep an 8-sided ring along ``curve`` with each cross-section facing ``viewpoint``.

    Returns:
        Mesh with 8·S positions, normals and uvs and 16·(S-1) triangles;
        an empty Mesh when the curve has fewer than 2 samples.

    Raises:
        ValueError if radius is not positive and finite.
    """
    X = curve.points if isinstance(curve, CurveSample) else CurveSample(points=curve).points
    radius = float(radius)
    if not np.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"Tube radius must be positive, got {radius}.")
    S = X.shape[0]
    if S < 2:
        logger.warning("meshify: curve has %d samples; returning an empty mesh", S)
        return Mesh()

    _, UP, RIGHT = view_frames(X, viewpoint)

    theta = 2.0 * np.pi * np.arange(RADIAL_SEGMENTS) / RADIAL_SEGMENTS
    ct = np.cos(theta)[None, :, None]
    st = np.sin(theta)[None, :, None]
    offsets = radius * (ct * RIGHT[:, None, :] + st * UP[:, None, :])     # (S,8,3)

    positions = (X[:, None, :] + offsets).reshape(-1, 3)
    normals = (offsets / np.maximum(np.linalg.norm(offsets, axis=-1, keepdims=True), 1e-12)).reshape(-1, 3)
    u = np.repeat(np.arange(S, dtype=np.float64) / (S - 1), RADIAL_SEGMENTS)
    v = np.tile(np.arange(RADIAL_SEGMENTS, dtype=np.float64) / RADIAL_SEGMENTS, S)
    uvs = np.column_stack([u, v])

    return Mesh(positions=positions, normals=normals, uvs=uvs, triangles=_ring_triangles(S))

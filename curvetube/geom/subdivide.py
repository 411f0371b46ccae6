r"""
One level of uniform 1→4 triangle subdivision.

Each undirected edge (a, b), keyed as (min, max), gets exactly one midpoint
vertex no matter how many triangles share it. Midpoints are appended to the
vertex arrays in the order they are first met while walking triangles, and
per triangle in the order m01, m12, m20.

    v0 ---- m01 ---- v1          (v0, m01, m20)
      \     /  \     /           (v1, m12, m01)
       m20 ---- m12              (v2, m20, m12)
         \      /                (m01, m12, m20)
           v2
"""
from __future__ import annotations

from typing import Dict, List, Tuple
import numpy as np


def subdivide_arrays(
    positions: np.ndarray,
    normals: np.ndarray,
    uvs: np.ndarray,
    triangles: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Split every triangle into four. Returns new (positions, normals, uvs, triangles).

    Empty normals/uvs stay empty. A midpoint normal is the normalized mean of its
    endpoint normals; a zero-length mean is kept as is.
    """
    P = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    Nn = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    UV = np.asarray(uvs, dtype=np.float64).reshape(-1, 2)
    F = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

    has_n = Nn.shape[0] > 0
    has_uv = UV.shape[0] > 0

    new_p: List[np.ndarray] = []
    new_n: List[np.ndarray] = []
    new_uv: List[np.ndarray] = []
    midpoint: Dict[Tuple[int, int], int] = {}
    n0 = P.shape[0]

    def _mid(a: int, b: int) -> int:
        key = (a, b) if a < b else (b, a)
        idx = midpoint.get(key)
        if idx is not None:
            return idx
        idx = n0 + len(new_p)
        midpoint[key] = idx
        new_p.append(0.5 * (P[a] + P[b]))
        if has_n:
            m = Nn[a] + Nn[b]
            ln = float(np.linalg.norm(m))
            new_n.append(m / ln if ln > 0.0 else m)
        if has_uv:
            new_uv.append(0.5 * (UV[a] + UV[b]))
        return idx

    out = np.empty((4 * F.shape[0], 3), dtype=np.int64)
    for f, (v0, v1, v2) in enumerate(F.tolist()):
        m01 = _mid(v0, v1)
        m12 = _mid(v1, v2)
        m20 = _mid(v2, v0)
        out[4 * f + 0] = (v0, m01, m20)
        out[4 * f + 1] = (v1, m12, m01)
        out[4 * f + 2] = (v2, m20, m12)
        out[4 * f + 3] = (m01, m12, m20)

    if new_p:
        P = np.vstack([P, np.asarray(new_p)])
        if has_n:
            Nn = np.vstack([Nn, np.asarray(new_n)])
        if has_uv:
            UV = np.vstack([UV, np.asarray(new_uv)])
    return P, Nn, UV, out

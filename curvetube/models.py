from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Union
import logging
import numpy as np

from .errors import MeshTopologyError
from .geom.basis import DEGREE, max_parameter, open_uniform_knots
from .geom import sampling
from .geom.normals import vertex_normals
from .geom.subdivide import subdivide_arrays
from .geom.transforms import flip_winding, mirror_axis, rotate_about_axis

logger = logging.getLogger(__name__)


class Axis(Enum):
    """World axis; value is the coordinate index."""
    X = 0
    Y = 1
    Z = 2

    @classmethod
    def parse(cls, value: Union["Axis", str, int]) -> "Axis":
        if isinstance(value, Axis):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown axis {value!r}; expected one of x, y, z.") from None
        if isinstance(value, (int, np.integer)) and 0 <= int(value) <= 2:
            return cls(int(value))
        raise ValueError(f"Unknown axis {value!r}; expected one of x, y, z.")


def _as_points(points, name: str = "points") -> np.ndarray:
    P = np.asarray(points, dtype=np.float64)
    if P.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    if P.ndim != 2 or P.shape[1] != 3:
        raise ValueError(f"{name} must have shape (N,3), got {P.shape}.")
    return P


@dataclass
class PointSet:
    """
    Ordered, possibly noisy 3D samples along a stroke.
    - points: (P,3) float64 array; order is meaningful, duplicates allowed.
    """
    points: np.ndarray

    def __post_init__(self) -> None:
        self.points = _as_points(self.points)

    def __len__(self) -> int:
        return int(self.points.shape[0])


@dataclass
class CurveSample:
    """
    Piecewise-linear approximation of a fitted cubic B-spline.
    - points: (S,3) float64 array, ordered along the curve.
    """
    points: np.ndarray

    def __post_init__(self) -> None:
        self.points = _as_points(self.points)

    def __len__(self) -> int:
        return int(self.points.shape[0])

    def length(self) -> float:
        if self.points.shape[0] < 2:
            return 0.0
        seg = np.linalg.norm(np.diff(self.points, axis=0), axis=1)
        return float(np.sum(seg))


@dataclass
class CubicBSpline:
    """
    Non-rational cubic B-spline on an open-uniform knot vector.

    Parameterization:
        t ∈ [0, max_t] with max_t = L - 3 for L control points; interior knots
        are spaced one unit apart.
    Fewer than 4 control points do not define a spline; ``eval`` then returns the
    first control point.
    """
    control_points: np.ndarray   # shape (L, 3)

    def __post_init__(self) -> None:
        self.control_points = _as_points(self.control_points, "control_points")

    @property
    def degree(self) -> int:
        return DEGREE

    @property
    def n_ctrl(self) -> int:
        return int(self.control_points.shape[0])

    @property
    def max_t(self) -> float:
        return max_parameter(self.n_ctrl)

    @property
    def knots(self) -> np.ndarray:
        return open_uniform_knots(self.n_ctrl)

    def eval(self, t) -> np.ndarray:
        """
        Evaluate the curve at t (clamped to [0, max_t]).
        Accepts scalar or array input; returns matching shape with last dimension 3.
        """
        if np.isscalar(t):
            return sampling.evaluate(self.control_points, float(t))
        ts = np.asarray(t, dtype=np.float64)
        pts = np.stack([sampling.evaluate(self.control_points, float(u)) for u in ts.ravel()], axis=0)
        return pts.reshape(ts.shape + (3,))

    def tangent(self, t) -> np.ndarray:
        """Unit tangent by central difference; scalar or array input."""
        if np.isscalar(t):
            return sampling.tangent(self.control_points, float(t))
        ts = np.asarray(t, dtype=np.float64)
        vecs = np.stack([sampling.tangent(self.control_points, float(u)) for u in ts.ravel()], axis=0)
        return vecs.reshape(ts.shape + (3,))

    def sample(self, n_samples: int) -> CurveSample:
        return CurveSample(points=sampling.sample(self.control_points, n_samples))


def _empty(cols: int, dtype=np.float64) -> np.ndarray:
    return np.zeros((0, cols), dtype=dtype)


@dataclass
class Mesh:
    """
    Indexed triangle mesh.
    - positions: (N,3) float64
    - normals:   (N,3) float64 unit vectors, or empty
    - uvs:       (N,2) float64, or empty
    - triangles: (M,3) int64 indices into positions, counter-clockwise seen from outside

    Construction validates topology and raises MeshTopologyError on bad input.
    All transform methods mutate the mesh in place.
    """
    positions: np.ndarray = field(default_factory=lambda: _empty(3))
    normals: np.ndarray = field(default_factory=lambda: _empty(3))
    uvs: np.ndarray = field(default_factory=lambda: _empty(2))
    triangles: np.ndarray = field(default_factory=lambda: _empty(3, np.int64))

    def __post_init__(self) -> None:
        self.positions = self._coerce(self.positions, 3, np.float64, "positions")
        self.normals = self._coerce(self.normals, 3, np.float64, "normals")
        self.uvs = self._coerce(self.uvs, 2, np.float64, "uvs")
        self.triangles = self._coerce(self.triangles, 3, np.int64, "triangles")
        self.validate()

    @staticmethod
    def _coerce(arr, cols: int, dtype, name: str) -> np.ndarray:
        if arr is None:
            return _empty(cols, dtype)
        a = np.asarray(arr)
        if a.size == 0:
            return _empty(cols, dtype)
        if a.ndim != 2 or a.shape[1] != cols:
            raise MeshTopologyError(f"{name} must have shape (N,{cols}), got {a.shape}.")
        if dtype is np.int64 and not np.issubdtype(a.dtype, np.integer):
            raise MeshTopologyError(f"{name} must be integer indices, got dtype {a.dtype}.")
        return a.astype(dtype, copy=True)

    # ------------------------------------------------------------ queries

    @property
    def n_vertices(self) -> int:
        return int(self.positions.shape[0])

    @property
    def n_triangles(self) -> int:
        return int(self.triangles.shape[0])

    def is_empty(self) -> bool:
        return self.n_vertices == 0 and self.n_triangles == 0

    def edges_unique(self) -> np.ndarray:
        """Undirected edges as sorted (a, b) rows, lexicographically ordered."""
        if self.n_triangles == 0:
            return np.zeros((0, 2), dtype=np.int64)
        F = self.triangles
        e = np.concatenate([F[:, [0, 1]], F[:, [1, 2]], F[:, [2, 0]]], axis=0)
        e.sort(axis=1)
        return np.unique(e, axis=0)

    def validate(self) -> None:
        """Check index bounds, distinct triangle corners and attribute lockstep."""
        n = self.n_vertices
        for name, arr in (("normals", self.normals), ("uvs", self.uvs)):
            if arr.shape[0] not in (0, n):
                raise MeshTopologyError(f"{name} has {arr.shape[0]} entries for {n} positions.")
        F = self.triangles
        if F.shape[0] == 0:
            return
        if F.min() < 0 or F.max() >= n:
            bad = int(np.nonzero((F < 0) | (F >= n))[0][0])
            raise MeshTopologyError(f"Triangle {bad} {F[bad].tolist()} indexes outside [0, {n}).")
        dup = (F[:, 0] == F[:, 1]) | (F[:, 1] == F[:, 2]) | (F[:, 0] == F[:, 2])
        if dup.any():
            bad = int(np.nonzero(dup)[0][0])
            raise MeshTopologyError(f"Triangle {bad} {F[bad].tolist()} repeats a vertex.")

    def copy(self) -> "Mesh":
        return Mesh(
            positions=self.positions.copy(),
            normals=self.normals.copy(),
            uvs=self.uvs.copy(),
            triangles=self.triangles.copy(),
        )

    # ---------------------------------------------------------- transforms

    def translate(self, offset: Sequence[float]) -> None:
        """Add ``offset`` to every position; normals are unchanged."""
        self.positions += np.asarray(offset, dtype=np.float64).reshape(3)

    def translate_vertex(self, index: int, offset: Sequence[float]) -> None:
        """
        Move a single vertex and recompute normals.

        Raises IndexError when index is outside [0, n_vertices).
        """
        index = int(index)
        if not 0 <= index < self.n_vertices:
            raise IndexError(f"Vertex index {index} out of range for {self.n_vertices} vertices.")
        self.positions[index] += np.asarray(offset, dtype=np.float64).reshape(3)
        self.recalculate_normals()

    def rotate(self, axis: Union[Axis, str, int], angle: float) -> None:
        """Rotate positions and normals by ``angle`` radians about a world axis."""
        ax = Axis.parse(axis).value
        self.positions = rotate_about_axis(self.positions, ax, float(angle))
        if self.normals.shape[0]:
            self.normals = rotate_about_axis(self.normals, ax, float(angle))

    def scale(self, factor: float) -> None:
        """Uniform scale of positions; unit normals are invariant."""
        self.positions *= float(factor)

    def scale_xyz(self, sx: float, sy: float, sz: float) -> None:
        """Per-axis scale of positions, then normals are recomputed from the faces."""
        self.positions *= np.array([sx, sy, sz], dtype=np.float64)
        self.recalculate_normals()

    def reflect(self, axis: Union[Axis, str, int]) -> None:
        """Mirror across the plane orthogonal to ``axis``, flipping winding to keep faces outward."""
        ax = Axis.parse(axis).value
        self.positions = mirror_axis(self.positions, ax)
        self.triangles = flip_winding(self.triangles)
        self.recalculate_normals()

    def recalculate_normals(self) -> None:
        self.normals = vertex_normals(self.positions, self.triangles)

    def subdivide(self) -> None:
        """One level of 1→4 subdivision; normals are recomputed on the refined topology."""
        n_before = self.n_vertices
        P, N, UV, F = subdivide_arrays(self.positions, self.normals, self.uvs, self.triangles)
        self.positions, self.normals, self.uvs, self.triangles = P, N, UV, F
        self.recalculate_normals()
        logger.debug("subdivide: %d -> %d vertices, %d triangles", n_before, self.n_vertices, self.n_triangles)

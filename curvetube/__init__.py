"""
curvetube: fit smooth curves through noisy strokes and turn them into tube meshes.

This package exposes:
- Core dataclasses (Mesh, PointSet, CurveSample, CubicBSpline, Axis)
- Curve fitting (fit_control_points, curvify) and tube meshing (meshify)
- Error types (NumericalError, MeshTopologyError)
"""

from .errors import MeshTopologyError, NumericalError
from .models import (
    Axis,
    CubicBSpline,
    CurveSample,
    Mesh,
    PointSet,
)
from .curve import curvify, fit_control_points
from .tube import meshify

__all__ = [
    "Axis",
    "CubicBSpline",
    "CurveSample",
    "Mesh",
    "PointSet",
    "MeshTopologyError",
    "NumericalError",
    "curvify",
    "fit_control_points",
    "meshify",
]

__version__ = "0.1.0"

"""Exception types raised by the curve fitter and the mesh container."""
from __future__ import annotations


class NumericalError(RuntimeError):
    """
    The least-squares normal-equations matrix NᵗN is singular or too
    ill-conditioned to solve.

    Raised by the curve fitter when the input point distribution is degenerate
    for the requested control-point count (coincident points, too few distinct
    parameter values). Callers decide whether to fall back to the raw polyline
    or reject the input.
    """


class MeshTopologyError(ValueError):
    """Triangle indices or per-vertex attribute arrays are inconsistent with the positions."""

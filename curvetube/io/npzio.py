from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import numpy as np

from ..models import CubicBSpline


def _to_serializable(obj: Any) -> Any:
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, Mapping):
        return {k: _to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_serializable(v) for v in obj]
    return obj


def save_spline_npz(spline: CubicBSpline, path: str | Path, meta: Optional[Mapping[str, Any]] = None) -> None:
    """Persist a fitted spline (degree, knots, control points, optional meta) to NPZ."""
    path = Path(path)
    if path.parent and path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)

    meta_json = json.dumps(_to_serializable(dict(meta or {})), sort_keys=True)
    C = np.asarray(spline.control_points, dtype=np.float64)
    payload: Dict[str, Any] = {
        "degree": np.asarray(spline.degree, dtype=np.int32),
        "cx": C[:, 0],
        "cy": C[:, 1],
        "cz": C[:, 2],
        "meta_json": np.asarray(meta_json),
    }
    if spline.n_ctrl >= spline.degree + 1:
        payload["knots"] = np.asarray(spline.knots, dtype=np.float64)
    np.savez(path, **payload)


def load_spline_npz(resource: str | Path) -> CubicBSpline:
    """
    Load a spline written by :func:`save_spline_npz`.

    Raises:
        ValueError if the archive holds a different degree or a knot vector that
        is not the open-uniform one for its control-point count.
    """
    path = Path(resource)
    with np.load(path, allow_pickle=False) as data:
        degree = int(np.asarray(data["degree"]).reshape(-1)[0])
        C = np.column_stack([
            np.asarray(data["cx"], dtype=np.float64),
            np.asarray(data["cy"], dtype=np.float64),
            np.asarray(data["cz"], dtype=np.float64),
        ])
        knots = np.asarray(data["knots"], dtype=np.float64) if "knots" in data.files else None

    spline = CubicBSpline(control_points=C)
    if degree != spline.degree:
        raise ValueError(f"Only cubic splines are supported, archive has degree {degree}.")
    if knots is not None and (knots.shape != spline.knots.shape or not np.allclose(knots, spline.knots)):
        raise ValueError("Archive knot vector is not open-uniform for its control points.")
    return spline


def load_spline_meta(resource: str | Path) -> Dict[str, Any]:
    with np.load(Path(resource), allow_pickle=False) as data:
        if "meta_json" not in data.files:
            return {}
        return json.loads(str(np.asarray(data["meta_json"]).item()))


__all__ = ["save_spline_npz", "load_spline_npz", "load_spline_meta"]

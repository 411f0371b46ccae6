from __future__ import annotations

from pathlib import Path
from typing import List
import numpy as np
import trimesh
from trimesh import Trimesh

from ..models import Mesh
from .npzio import load_spline_meta, load_spline_npz, save_spline_npz


# ---------- trimesh conversion ----------

def to_trimesh(mesh: Mesh) -> Trimesh:
    """Mesh -> trimesh.Trimesh without merging or reordering vertices."""
    kwargs = {}
    if mesh.normals.shape[0]:
        kwargs["vertex_normals"] = np.asarray(mesh.normals, dtype=np.float64)
    if mesh.uvs.shape[0]:
        kwargs["visual"] = trimesh.visual.TextureVisuals(uv=np.asarray(mesh.uvs, dtype=np.float64))
    return trimesh.Trimesh(
        vertices=np.asarray(mesh.positions, dtype=np.float64),
        faces=np.asarray(mesh.triangles, dtype=np.int64),
        process=False,
        **kwargs,
    )


def from_trimesh(tm: Trimesh) -> Mesh:
    """trimesh.Trimesh -> Mesh, carrying vertex normals and UVs when present."""
    normals = None
    if len(tm.faces) > 0:
        normals = np.asarray(tm.vertex_normals, dtype=np.float64)
    uvs = None
    uv = getattr(tm.visual, "uv", None)
    if uv is not None and len(uv) == len(tm.vertices):
        uvs = np.asarray(uv, dtype=np.float64)
    return Mesh(
        positions=np.asarray(tm.vertices, dtype=np.float64),
        normals=normals,
        uvs=uvs,
        triangles=np.asarray(tm.faces, dtype=np.int64),
    )


# ---------- Public API ----------

def load_mesh(path: str | Path) -> Mesh:
    """
    Load a triangle mesh (OBJ, STL, PLY, ... by suffix) into a Mesh.
    Notes:
      - If the file is a Scene, geometries will be concatenated.
      - Vertex order is kept (no merging).
    """
    obj = trimesh.load(str(path), force="mesh", process=False)
    if isinstance(obj, trimesh.Scene):
        if len(obj.geometry) == 0:
            raise ValueError(f"No geometry found in scene: {path}")
        tm = trimesh.util.concatenate(tuple(obj.geometry.values()))
    else:
        tm = obj
    if not isinstance(tm, trimesh.Trimesh):
        raise TypeError(f"Unsupported mesh type for {path}")
    return from_trimesh(tm)


def save_mesh(mesh: Mesh, path: str | Path) -> None:
    """Save a Mesh; the format follows the file suffix."""
    path = Path(path)
    if path.suffix.lower() == ".obj":
        path.write_text(export_obj_string(mesh))
        return
    to_trimesh(mesh).export(str(path))


def export_obj_string(mesh: Mesh) -> str:
    """
    Plain-text OBJ: ``v`` / ``vt`` / ``vn`` blocks, then one ``f`` line per
    triangle with 1-based indices shared across all present attributes.
    """
    lines: List[str] = []
    for p in mesh.positions:
        lines.append(f"v {p[0]:.9g} {p[1]:.9g} {p[2]:.9g}")
    for uv in mesh.uvs:
        lines.append(f"vt {uv[0]:.9g} {uv[1]:.9g}")
    for n in mesh.normals:
        lines.append(f"vn {n[0]:.9g} {n[1]:.9g} {n[2]:.9g}")

    has_uv = mesh.uvs.shape[0] > 0
    has_n = mesh.normals.shape[0] > 0
    if has_uv and has_n:
        fmt = "{0}/{0}/{0}"
    elif has_uv:
        fmt = "{0}/{0}"
    elif has_n:
        fmt = "{0}//{0}"
    else:
        fmt = "{0}"
    for tri in mesh.triangles:
        lines.append("f " + " ".join(fmt.format(int(i) + 1) for i in tri))
    return "\n".join(lines) + "\n"


__all__ = [
    "to_trimesh",
    "from_trimesh",
    "load_mesh",
    "save_mesh",
    "export_obj_string",
    "save_spline_npz",
    "load_spline_npz",
    "load_spline_meta",
]

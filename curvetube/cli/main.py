#!/usr/bin/env python
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import numpy as np

from curvetube.config import TubeConfig
from curvetube.curve import curvify, fit_control_points
from curvetube.errors import NumericalError
from curvetube.io import load_mesh, save_mesh, save_spline_npz
from curvetube.logging_config import setup_logging
from curvetube.tube import meshify


def _ensure_parent(path: str | os.PathLike[str]) -> None:
    parent = Path(path).expanduser().parent
    if parent != Path('.'):
        parent.mkdir(parents=True, exist_ok=True)


def _load_points(path: str) -> np.ndarray:
    """Read an (N,3) point file; commas or whitespace separate columns."""
    text = Path(path).read_text(encoding="utf-8")
    delimiter = "," if "," in text else None
    pts = np.loadtxt(path, delimiter=delimiter, dtype=np.float64, ndmin=2)
    if pts.shape[1] != 3:
        raise ValueError(f"Point file {path} must have 3 columns, got {pts.shape[1]}.")
    return pts


def _add_tube_arguments(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--points", required=True, help="Input point file (x y z per line).")
    sub.add_argument("--out", required=True, help="Output mesh path (.obj, .stl, .ply).")
    sub.add_argument("--config", default=None, help="JSON file with radius/viewpoint.")
    sub.add_argument("--radius", type=float, default=None, help="Tube radius (overrides config).")
    sub.add_argument("--viewpoint", type=float, nargs=3, default=None, metavar=("X", "Y", "Z"), help="Eye position the tube faces (overrides config).")
    sub.add_argument("--spline-npz", default=None, help="Also write the fitted control points to this NPZ.")


def _add_subdivide_arguments(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--mesh", required=True, help="Input mesh path.")
    sub.add_argument("--out", required=True, help="Output mesh path.")
    sub.add_argument("--levels", type=int, default=1, help="Number of subdivision passes.")


def _add_transform_arguments(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--mesh", required=True, help="Input mesh path.")
    sub.add_argument("--out", required=True, help="Output mesh path.")
    sub.add_argument("--translate", type=float, nargs=3, default=None, metavar=("X", "Y", "Z"))
    sub.add_argument("--rotate", nargs=2, default=None, metavar=("AXIS", "DEGREES"), help="Rotate about x, y or z.")
    sub.add_argument("--scale", type=float, default=None, help="Uniform scale factor.")
    sub.add_argument("--scale-xyz", type=float, nargs=3, default=None, metavar=("SX", "SY", "SZ"))
    sub.add_argument("--reflect", choices=["x", "y", "z"], default=None, help="Mirror across the plane orthogonal to this axis.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="curvetube", description="Curve fitting and tube mesh CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    tube_parser = subparsers.add_parser("tube", help="Fit a curve through points and sweep a tube mesh.")
    _add_tube_arguments(tube_parser)

    subdivide_parser = subparsers.add_parser("subdivide", help="Uniformly subdivide a triangle mesh.")
    _add_subdivide_arguments(subdivide_parser)

    transform_parser = subparsers.add_parser("transform", help="Translate/rotate/scale/reflect a mesh.")
    _add_transform_arguments(transform_parser)

    return parser


def _run_tube(args: argparse.Namespace) -> None:
    cfg = TubeConfig.load(args.config) if args.config else TubeConfig()
    if args.radius is not None or args.viewpoint is not None:
        cfg = TubeConfig(
            radius=cfg.radius if args.radius is None else args.radius,
            viewpoint=cfg.viewpoint if args.viewpoint is None else tuple(args.viewpoint),
        )

    pts = _load_points(args.points)
    curve = curvify(pts)
    mesh = meshify(curve, cfg.viewpoint, cfg.radius)

    _ensure_parent(args.out)
    save_mesh(mesh, args.out)
    print(f"[tube] wrote {args.out} ({mesh.n_vertices} vertices, {mesh.n_triangles} triangles)")

    if args.spline_npz:
        _ensure_parent(args.spline_npz)
        save_spline_npz(fit_control_points(pts), args.spline_npz, meta=cfg.to_dict())
        print(f"[tube] wrote {args.spline_npz}")


def _run_subdivide(args: argparse.Namespace) -> None:
    if args.levels < 0:
        raise ValueError("--levels must be non-negative.")
    mesh = load_mesh(args.mesh)
    for _ in range(args.levels):
        mesh.subdivide()
    _ensure_parent(args.out)
    save_mesh(mesh, args.out)
    print(f"[subdivide] wrote {args.out} ({mesh.n_triangles} triangles)")


def _run_transform(args: argparse.Namespace) -> None:
    mesh = load_mesh(args.mesh)
    if args.translate is not None:
        mesh.translate(args.translate)
    if args.rotate is not None:
        axis, degrees = args.rotate
        mesh.rotate(axis, np.deg2rad(float(degrees)))
    if args.scale is not None:
        mesh.scale(args.scale)
    if args.scale_xyz is not None:
        mesh.scale_xyz(*args.scale_xyz)
    if args.reflect is not None:
        mesh.reflect(args.reflect)
    _ensure_parent(args.out)
    save_mesh(mesh, args.out)
    print(f"[transform] wrote {args.out}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.command == "tube":
            _run_tube(args)
        elif args.command == "subdivide":
            _run_subdivide(args)
        elif args.command == "transform":
            _run_transform(args)
        else:
            parser.error(f"Unknown command: {args.command}")
    except NumericalError as e:
        print(f"[{args.command}] fit failed: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Tube parameters for the command-line pipeline.

The geometry functions take these values as plain arguments; this module only
bundles them so a run can be described by a JSON file:

    {"radius": 0.05, "viewpoint": [0.0, 0.0, 10.0]}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple
import json


@dataclass
class TubeConfig:
    """Tube thickness and the eye position the cross-sections face."""
    radius: float = 0.05
    viewpoint: Tuple[float, float, float] = field(default=(0.0, 0.0, 10.0))

    def __post_init__(self) -> None:
        self.radius = float(self.radius)
        vp = tuple(float(v) for v in self.viewpoint)
        if len(vp) != 3:
            raise ValueError(f"viewpoint must have 3 components, got {len(vp)}.")
        self.viewpoint = vp
        if self.radius <= 0.0:
            raise ValueError(f"radius must be positive, got {self.radius}.")

    def to_dict(self) -> Dict[str, Any]:
        return {"radius": self.radius, "viewpoint": list(self.viewpoint)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TubeConfig":
        unknown = set(data) - {"radius", "viewpoint"}
        if unknown:
            raise ValueError(f"Unknown tube config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def load(cls, path: str | Path) -> "TubeConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

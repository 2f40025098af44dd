"""Geometric primitives shared by the mechanism, the contact environment and the LQR."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .mechanism import RigidBody

# Operating planes of the planar dynamics: in-plane world axes
PLANES: dict[str, tuple[int, int]] = {
    "xy": (0, 1),
    "xz": (0, 2),
    "yz": (1, 2),
}


def plane_axes(plane: str) -> tuple[int, int]:
    if plane not in PLANES:
        raise ValueError(f"Invalid operating plane: {plane}")
    return PLANES[plane]


def plane_normal(plane: str) -> np.ndarray:
    """World axis perpendicular to the operating plane."""
    (normal_axis,) = set(range(3)) - set(plane_axes(plane))
    normal = np.zeros(3)
    normal[normal_axis] = 1.0
    return normal


@dataclass(eq=False)
class HalfSpace:
    """Planar contact boundary: everything behind `point` along `outward_normal`."""

    point: np.ndarray  # (3,)
    outward_normal: np.ndarray  # (3,), unit length

    def __post_init__(self):
        self.point = np.asarray(self.point, dtype=float).reshape(3)
        normal = np.asarray(self.outward_normal, dtype=float).reshape(3)
        norm = np.linalg.norm(normal)
        if norm == 0.0:
            raise ValueError("Half-space normal must be non-zero")
        self.outward_normal = normal / norm

    def separation(self, point: np.ndarray) -> float:
        """Signed distance of `point` to the boundary; negative means penetration."""
        return float(np.dot(np.asarray(point, dtype=float) - self.point, self.outward_normal))


@dataclass(eq=False)
class BodyPoint:
    """A point fixed in a body frame."""

    body: RigidBody
    location: np.ndarray  # (3,) in the body frame

    def __post_init__(self):
        self.location = np.asarray(self.location, dtype=float).reshape(3)

"""Coordinate value type and the coordinate pool used for spatial interning."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import numpy as np


def normalize_angle(angle: float) -> float:
    """Bring ``angle`` (degrees) into the half-open interval (-180, 180]."""

    angle = float(angle)
    while angle <= -180.0:
        angle += 360.0
    while angle > 180.0:
        angle -= 360.0
    return angle


@dataclass(frozen=True)
class Coordinate:
    """Immutable 2D point. Every operation returns a new instance."""

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def as_tuple(self) -> tuple:
        return (self.x, self.y)

    def add(self, other: "Coordinate") -> "Coordinate":
        return Coordinate(self.x + other.x, self.y + other.y)

    def subtract(self, other: "Coordinate") -> "Coordinate":
        return Coordinate(self.x - other.x, self.y - other.y)

    def scale(self, sx: float, sy: Optional[float] = None) -> "Coordinate":
        if sy is None:
            sy = sx
        return Coordinate(self.x * sx, self.y * sy)

    def mirror_x(self) -> "Coordinate":
        return Coordinate(self.x, -self.y)

    def mirror_y(self) -> "Coordinate":
        return Coordinate(-self.x, self.y)

    def rotate(self, angle: float, center: Optional["Coordinate"] = None) -> "Coordinate":
        """Rotate counter-clockwise by ``angle`` degrees around ``center`` (origin by default).

        Quarter turns are computed by swapping components so that they stay exact.
        """

        angle = normalize_angle(angle)
        point = self.subtract(center) if center is not None else self
        x, y = point.x, point.y

        if angle == 0.0:
            rotated = Coordinate(x, y)
        elif angle == 90.0:
            rotated = Coordinate(-y, x)
        elif angle == 180.0:
            rotated = Coordinate(-x, -y)
        elif angle == -90.0:
            rotated = Coordinate(y, -x)
        else:
            radians = math.radians(angle)
            cos_a = math.cos(radians)
            sin_a = math.sin(radians)
            rotated = Coordinate(cos_a * x - sin_a * y, sin_a * x + cos_a * y)

        return rotated.add(center) if center is not None else rotated

    def distance(self, other: "Coordinate") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def orthogonal_projection(self, a: "Coordinate", b: "Coordinate") -> "Coordinate":
        """Foot of the perpendicular from this point onto the line through ``a`` and ``b``."""

        anchor = np.array([a.x, a.y], dtype=float)
        direction = np.array([b.x, b.y], dtype=float) - anchor
        denom = float(np.dot(direction, direction))
        if denom == 0.0:
            return Coordinate(a.x, a.y)
        rel = np.array([self.x, self.y], dtype=float) - anchor
        t = float(np.dot(rel, direction) / denom)
        foot = anchor + direction * t
        return Coordinate(float(foot[0]), float(foot[1]))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class CoordinatePool:
    """Ordered set of coordinates where value equality implies identity.

    Lookup is hashed on the exact coordinate value, so ``0.0`` and ``-0.0``
    are treated as the same point (they compare equal as floats).
    """

    def __init__(self) -> None:
        self._members: Dict[Coordinate, Coordinate] = {}

    def canonicalize(self, candidate: Coordinate) -> Coordinate:
        existing = self._members.get(candidate)
        if existing is not None:
            return existing
        self._members[candidate] = candidate
        return candidate

    def find(self, candidate: Coordinate) -> Optional[Coordinate]:
        return self._members.get(candidate)

    def __contains__(self, candidate: object) -> bool:
        return candidate in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._members.values())

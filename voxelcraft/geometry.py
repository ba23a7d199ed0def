"""Rays and axis-aligned bounding boxes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

Vec3 = Tuple[float, float, float]

# Smallest step between 1.0 and the next single-precision float.
_EPSILON = 1.1920929e-07


def _as_triple(values, kind=float) -> tuple:
    triple = tuple(kind(v) for v in values)
    if len(triple) != 3:
        raise ValueError(f"expected three components, got {len(triple)}")
    return triple


@dataclass(frozen=True)
class Ray:
    """A half-line from ``pos`` along a unit-length ``direction``."""

    pos: Vec3
    direction: Vec3

    def __post_init__(self) -> None:
        pos = _as_triple(self.pos)
        direction = _as_triple(self.direction)
        length = math.sqrt(sum(c * c for c in direction))
        if not length > 0.0:
            raise ValueError("ray direction must be non-zero")
        object.__setattr__(self, "pos", pos)
        object.__setattr__(self, "direction", tuple(c / length for c in direction))


@dataclass(frozen=True)
class AABB:
    """An axis-aligned box; corners are reordered so that start <= end on every axis."""

    start: tuple
    end: tuple

    def __post_init__(self) -> None:
        start = tuple(self.start)
        end = tuple(self.end)
        if len(start) != 3 or len(end) != 3:
            raise ValueError("AABB corners need three components")
        object.__setattr__(self, "start", tuple(min(a, b) for a, b in zip(start, end)))
        object.__setattr__(self, "end", tuple(max(a, b) for a, b in zip(start, end)))

    def intersects(self, other: AABB) -> bool:
        """Whether the two boxes overlap or touch."""
        return all(
            s <= oe and e >= os
            for s, e, os, oe in zip(self.start, self.end, other.start, other.end)
        )

    def to_float(self) -> AABB:
        """The same box with floating-point corners."""
        return AABB(_as_triple(self.start), _as_triple(self.end))

    def intersect_ray(self, ray: Ray) -> Optional[float]:
        """Distance along ``ray`` to the nearest hit in front of it, or None (slab method)."""
        tmin = -math.inf
        tmax = math.inf

        for start, end, origin, direction in zip(self.start, self.end, ray.pos, ray.direction):
            if abs(direction) < _EPSILON:
                if origin < start or origin > end:
                    return None
                if direction == 0.0:
                    # Parallel and inside the slab: this axis places no limit.
                    continue

            inv_dir = 1.0 / direction
            t1 = (start - origin) * inv_dir
            t2 = (end - origin) * inv_dir
            if t1 > t2:
                t1, t2 = t2, t1

            tmin = max(tmin, t1)
            tmax = min(tmax, t2)
            if tmin > tmax:
                return None

        if tmax >= 0.0:
            return tmin if tmin >= 0.0 else tmax
        return None
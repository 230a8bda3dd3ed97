"""
Geometry primitives for room model extraction.

Points, vectors and axis-aligned bounding boxes are immutable value types.
All coordinates are in meters once a scene has been normalized.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np
from shapely.geometry import LineString


@dataclass(frozen=True)
class Vector3D:
    """A displacement or direction in 3D space."""
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, values) -> "Vector3D":
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __add__(self, other: "Vector3D") -> "Vector3D":
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3D") -> "Vector3D":
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> "Vector3D":
        return Vector3D(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3D":
        return Vector3D(-self.x, -self.y, -self.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3D":
        """Unit vector in the same direction (the zero vector is returned unchanged)."""
        mag = self.magnitude
        if mag == 0:
            return self
        return Vector3D(self.x / mag, self.y / mag, self.z / mag)

    def dot(self, other: "Vector3D") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3D") -> "Vector3D":
        return Vector3D(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def distance(self, other: "Vector3D") -> float:
        return (self - other).magnitude


@dataclass(frozen=True)
class Point3D:
    """A location in 3D space."""
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, values) -> "Point3D":
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __add__(self, offset: Vector3D) -> "Point3D":
        return Point3D(self.x + offset.x, self.y + offset.y, self.z + offset.z)

    def __sub__(self, other):
        # point - point is a displacement, point - vector is a point
        if isinstance(other, Point3D):
            return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)
        return Point3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def distance(self, other: "Point3D") -> float:
        return (self - other).magnitude

    def midpoint(self, other: "Point3D") -> "Point3D":
        return Point3D(
            (self.x + other.x) / 2,
            (self.y + other.y) / 2,
            (self.z + other.z) / 2,
        )


ORIGIN = Point3D(0.0, 0.0, 0.0)
UP = Vector3D(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box with min <= max on every axis."""
    min: Point3D
    max: Point3D

    def __post_init__(self):
        lo, hi = self.min, self.max
        if lo.x > hi.x or lo.y > hi.y or lo.z > hi.z:
            # Re-sort componentwise so callers may pass corners in any order
            object.__setattr__(self, "min", Point3D(min(lo.x, hi.x), min(lo.y, hi.y), min(lo.z, hi.z)))
            object.__setattr__(self, "max", Point3D(max(lo.x, hi.x), max(lo.y, hi.y), max(lo.z, hi.z)))

    @classmethod
    def from_array(cls, bounds) -> "BoundingBox":
        """Build from a trimesh-style [[min_x, min_y, min_z], [max_x, max_y, max_z]] array."""
        bounds = np.asarray(bounds, dtype=np.float64)
        return cls(Point3D.from_array(bounds[0]), Point3D.from_array(bounds[1]))

    @classmethod
    def from_points(cls, points: Iterable[Point3D]) -> "BoundingBox":
        arr = np.array([[p.x, p.y, p.z] for p in points], dtype=np.float64)
        if len(arr) == 0:
            raise ValueError("Cannot build a bounding box from no points")
        return cls(Point3D.from_array(arr.min(axis=0)), Point3D.from_array(arr.max(axis=0)))

    @classmethod
    def centered(cls, center: Point3D, size: Vector3D) -> "BoundingBox":
        half = size * 0.5
        return cls(center - half, center + half)

    def to_array(self) -> np.ndarray:
        return np.array([self.min.to_array(), self.max.to_array()])

    @property
    def size(self) -> Vector3D:
        return self.max - self.min

    @property
    def center(self) -> Point3D:
        return self.min.midpoint(self.max)

    @property
    def volume(self) -> float:
        s = self.size
        return s.x * s.y * s.z

    @property
    def footprint_area(self) -> float:
        """Area of the XY projection."""
        s = self.size
        return s.x * s.y

    def contains(self, point: Point3D) -> bool:
        return (self.min.x <= point.x <= self.max.x and
                self.min.y <= point.y <= self.max.y and
                self.min.z <= point.z <= self.max.z)

    def intersects(self, other: "BoundingBox") -> bool:
        return (self.min.x <= other.max.x and self.max.x >= other.min.x and
                self.min.y <= other.max.y and self.max.y >= other.min.y and
                self.min.z <= other.max.z and self.max.z >= other.min.z)

    def overlap_volume(self, other: "BoundingBox") -> float:
        """Volume of the intersection box, 0.0 when the boxes only touch or are disjoint."""
        lo = np.maximum(self.min.to_array(), other.min.to_array())
        hi = np.minimum(self.max.to_array(), other.max.to_array())
        extent = hi - lo
        if np.all(extent > 0):
            return float(np.prod(extent))
        return 0.0

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            Point3D.from_array(np.minimum(self.min.to_array(), other.min.to_array())),
            Point3D.from_array(np.maximum(self.max.to_array(), other.max.to_array())),
        )

    def expanded(self, margin: float) -> "BoundingBox":
        pad = Vector3D(margin, margin, margin)
        return BoundingBox(self.min - pad, self.max + pad)

    def exceeds(self, other: "BoundingBox") -> bool:
        """True if this box is larger than ``other`` along any axis."""
        mine, theirs = self.size, other.size
        return mine.x > theirs.x or mine.y > theirs.y or mine.z > theirs.z


def segments_intersect_2d(
    p1: Tuple[float, float],
    p2: Tuple[float, float],
    p3: Tuple[float, float],
    p4: Tuple[float, float]
) -> bool:
    """
    Check whether segment p1-p2 crosses or touches segment p3-p4 in the XY plane.

    Degenerate (zero-length) segments never intersect.
    """
    if p1 == p2 or p3 == p4:
        return False
    return LineString([p1, p2]).intersects(LineString([p3, p4]))

"""
Geometric primitives used by the plane RANSAC.

This module provides:
- Point: immutable 3D point value type
- Plane: implicit plane ax + by + cz + d = 0, built from three points or
  from explicit coefficients
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .exceptions import DegeneratePlaneError

# A sampled triple is collinear when sin(angle between its edges) is below this
DEGENERATE_SINE = 1e-10


@dataclass(frozen=True)
class Point:
    """A point in 3D space."""
    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __str__(self) -> str:
        return f'({self.x}, {self.y}, {self.z})'


class Plane:
    """
    Plane in implicit form: ax + by + cz + d = 0.

    (a, b, c) is the (unnormalized) normal vector. Planes built from three
    collinear or repeated points have a zero normal; they are valid objects
    but report is_degenerate and refuse distance queries.
    """

    def __init__(
        self,
        a: float,
        b: float,
        c: float,
        d: float,
        points: Optional[Tuple[Point, Point, Point]] = None
    ):
        self.a = float(a)
        self.b = float(b)
        self.c = float(c)
        self.d = float(d)
        self._points = points
        # Normal norms at or below this count as the zero vector
        self._degenerate_norm = 0.0

    @classmethod
    def from_points(cls, p1: Point, p2: Point, p3: Point) -> 'Plane':
        """
        Derive the plane passing through three points.

        The normal is the cross product of the edge vectors (p1 - p2) and
        (p1 - p3); d is solved by substituting p1.

        Args:
            p1: First point, also used to solve for d
            p2: Second point
            p3: Third point

        Returns:
            Plane retaining the three points for provenance
        """
        x1 = p1.x - p2.x
        y1 = p1.y - p2.y
        z1 = p1.z - p2.z

        x2 = p1.x - p3.x
        y2 = p1.y - p3.y
        z2 = p1.z - p3.z

        a = y1 * z2 - y2 * z1
        b = x2 * z1 - x1 * z2
        c = x1 * y2 - x2 * y1
        d = -(a * p1.x + b * p1.y + c * p1.z)

        plane = cls(a, b, c, d, points=(p1, p2, p3))
        # |e1 x e2| = |e1| |e2| sin(angle), so the threshold scales with the sample
        edge_product = math.sqrt(x1 ** 2 + y1 ** 2 + z1 ** 2) * math.sqrt(x2 ** 2 + y2 ** 2 + z2 ** 2)
        plane._degenerate_norm = DEGENERATE_SINE * edge_product
        return plane

    @classmethod
    def from_coefficients(cls, a: float, b: float, c: float, d: float) -> 'Plane':
        """Build a plane directly from its coefficients. The normal is not validated."""
        return cls(a, b, c, d)

    @property
    def coefficients(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c, self.d], dtype=np.float64)

    @property
    def normal(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c], dtype=np.float64)

    @property
    def normal_norm(self) -> float:
        return math.sqrt(self.a ** 2 + self.b ** 2 + self.c ** 2)

    @property
    def is_degenerate(self) -> bool:
        norm = self.normal_norm
        return not math.isfinite(norm) or norm <= self._degenerate_norm

    def unit_normal(self) -> np.ndarray:
        """Get the normal scaled to unit length."""
        self._check_normal()
        return self.normal / self.normal_norm

    def get_point(self, index: int) -> Point:
        """
        Get one of the three points the plane was derived from.

        Args:
            index: Point index, 0 to 2

        Returns:
            The originating point

        Raises:
            IndexError: If index is out of range or the plane was built
                from coefficients
        """
        if index < 0 or index > 2:
            raise IndexError(f'Plane point index must be 0, 1 or 2, got {index}')
        if self._points is None:
            raise IndexError('Plane was not constructed from points')
        return self._points[index]

    def distance_to(self, point: Point) -> float:
        """
        Compute the distance from a point to this plane.

        Distance = |ax + by + cz + d| / sqrt(a^2 + b^2 + c^2)

        Raises:
            DegeneratePlaneError: If the normal is the zero vector
        """
        self._check_normal()
        numerator = abs(self.a * point.x + self.b * point.y + self.c * point.z + self.d)
        return numerator / self.normal_norm

    def distances_to(self, points: np.ndarray) -> np.ndarray:
        """
        Compute distances from many points to this plane.

        Args:
            points: Array of shape (N, 3)

        Returns:
            Array of N distances
        """
        self._check_normal()
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        numerator = np.abs(
            self.a * points[:, 0] + self.b * points[:, 1] + self.c * points[:, 2] + self.d
        )
        return numerator / self.normal_norm

    def _check_normal(self):
        if self.is_degenerate:
            raise DegeneratePlaneError(
                f'Plane {self!r} has a zero normal vector; distance is undefined'
            )

    def __repr__(self) -> str:
        return f'Plane(a={self.a!r}, b={self.b!r}, c={self.c!r}, d={self.d!r})'

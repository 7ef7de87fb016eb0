"""
Point cloud container.

PointCloud is an ordered, mutable collection of Point values. The extractor
mutates the working cloud in place between passes; support sets are
separate PointCloud instances.
"""

from collections import Counter
from typing import Iterable, Iterator, List, Optional

import numpy as np

from .exceptions import EmptyCloudError, PointNotFoundError
from .geometry import Point


class PointCloud:
    """
    Ordered collection of 3D points with an optional name.

    The name is only used to derive output file names.
    """

    def __init__(self, points: Optional[Iterable[Point]] = None, name: Optional[str] = None):
        self._points: List[Point] = []
        self.name = name
        if points is not None:
            for point in points:
                self.add(point)

    @classmethod
    def from_array(cls, points: np.ndarray, name: Optional[str] = None) -> 'PointCloud':
        """
        Build a cloud from an array of coordinates.

        Args:
            points: Array of shape (N, 3)
            name: Optional cloud name

        Returns:
            PointCloud holding the rows of points in order
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return cls((Point(float(x), float(y), float(z)) for x, y, z in points), name=name)

    def add(self, point: Point):
        """Append a point. None is rejected."""
        if point is None:
            raise TypeError('Cannot add None to a point cloud')
        self._points.append(point)

    def remove(self, point: Point):
        """
        Remove the first point equal to point.

        Raises:
            PointNotFoundError: If no such point is in the cloud
        """
        try:
            self._points.remove(point)
        except ValueError:
            raise PointNotFoundError(f'Point {point} is not in the cloud') from None

    def remove_all(self, points: Iterable[Point]):
        """
        Remove every point of points, honoring multiplicity.

        The cloud is left untouched if any point is missing.

        Raises:
            PointNotFoundError: If a point (or one of its duplicates) is absent
        """
        pending = Counter(points)
        available = Counter(self._points)
        for point, count in pending.items():
            if available[point] < count:
                raise PointNotFoundError(f'Point {point} is not in the cloud')

        kept = []
        for point in self._points:
            if pending[point] > 0:
                pending[point] -= 1
            else:
                kept.append(point)
        self._points = kept

    def sample_one(self, rng: Optional[np.random.Generator] = None) -> Point:
        """
        Draw one point uniformly at random.

        Args:
            rng: Random source; a fresh unseeded generator is used if omitted

        Raises:
            EmptyCloudError: If the cloud is empty
        """
        if not self._points:
            raise EmptyCloudError('Cannot sample a point from an empty cloud')
        if rng is None:
            rng = np.random.default_rng()
        return self._points[int(rng.integers(len(self._points)))]

    def size(self) -> int:
        return len(self._points)

    def to_array(self) -> np.ndarray:
        """Snapshot of the coordinates as an (N, 3) float64 array."""
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([(p.x, p.y, p.z) for p in self._points], dtype=np.float64)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __contains__(self, point: object) -> bool:
        return point in self._points

    def __repr__(self) -> str:
        return f'PointCloud(name={self.name!r}, size={len(self._points)})'

"""
XYZ File Handler.

This module reads and writes point clouds in the tabular .xyz format: one
header line followed by one "x y z" record per line.
"""

import logging
import os
from typing import Optional, Tuple

import numpy as np

from .exceptions import CloudFormatError
from .point_cloud import PointCloud

logger = logging.getLogger(__name__)

XYZ_SUFFIX = '.xyz'
XYZ_HEADER = 'x\ty\tz'


class XYZHandler:
    """
    Handler for converting between .xyz files and PointCloud objects.
    """

    @staticmethod
    def cloud_name_from_path(path: str) -> str:
        """
        Derive the cloud name used for output naming.

        The name is the path with its .xyz suffix removed, so derived files
        land next to the input.
        """
        path = os.fspath(path)
        if path.endswith(XYZ_SUFFIX):
            return path[:-len(XYZ_SUFFIX)]
        return path

    @staticmethod
    def read_xyz(path: str) -> np.ndarray:
        """
        Parse an .xyz file into a coordinate array.

        The first line is a header and is skipped. Blank lines are ignored;
        fields beyond the third are ignored.

        Args:
            path: File to read

        Returns:
            Numpy array of shape (N, 3) in file order

        Raises:
            OSError: If the file cannot be opened
            CloudFormatError: If a record has fewer than three numeric fields
        """
        rows = []
        with open(path, 'r', encoding='utf-8') as f:
            f.readline()
            for line_number, line in enumerate(f, start=2):
                tokens = line.split()
                if not tokens:
                    continue
                if len(tokens) < 3:
                    raise CloudFormatError(
                        f'{path}:{line_number}: expected 3 coordinates, got {len(tokens)}'
                    )
                try:
                    rows.append((float(tokens[0]), float(tokens[1]), float(tokens[2])))
                except ValueError as e:
                    raise CloudFormatError(f'{path}:{line_number}: {e}') from e

        return np.array(rows, dtype=np.float64).reshape(-1, 3)

    @staticmethod
    def filter_invalid_points(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Filter out NaN and Inf values from point cloud.

        Args:
            points: Numpy array of shape (N, 3)

        Returns:
            Tuple of (filtered_points, valid_indices)
        """
        valid_mask = np.all(np.isfinite(points), axis=1)
        valid_indices = np.where(valid_mask)[0]
        return points[valid_mask], valid_indices

    @staticmethod
    def load(path: str, name: Optional[str] = None) -> PointCloud:
        """
        Load a point cloud from an .xyz file.

        Args:
            path: File to read
            name: Cloud name, derived from path if omitted

        Returns:
            PointCloud populated in file order
        """
        points = XYZHandler.read_xyz(path)
        valid_points, _ = XYZHandler.filter_invalid_points(points)
        dropped = len(points) - len(valid_points)
        if dropped:
            logger.warning(f'{path}: dropped {dropped} records with non-finite coordinates')

        if name is None:
            name = XYZHandler.cloud_name_from_path(path)

        logger.debug(f'Loaded {len(valid_points)} points from {path}')
        return PointCloud.from_array(valid_points, name=name)

    @staticmethod
    def save(cloud: PointCloud, path: str):
        """
        Write a point cloud to an .xyz file.

        Emits the header followed by one tab-separated record per point, in
        the cloud's iteration order.
        """
        with open(path, 'w', encoding='utf-8') as f:
            f.write(XYZ_HEADER + '\n')
            for point in cloud:
                f.write(f'{point.x!r}\t{point.y!r}\t{point.z!r}\n')

        logger.debug(f'Saved {len(cloud)} points to {path}')

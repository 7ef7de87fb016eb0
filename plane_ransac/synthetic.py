"""
Synthetic point cloud generator.

Builds seeded scenes with known planes and scattered outliers for demos
and tests, and writes them as .xyz files.
"""

import argparse
import logging
from typing import Optional, Sequence, Union

import numpy as np

from .logging_config import setup_logging
from .point_cloud import PointCloud
from .xyz_handler import XYZHandler

logger = logging.getLogger(__name__)


def generate_plane_with_outliers(
    n_inliers: int = 90,
    n_outliers: int = 10,
    outlier_height: float = 5.0,
    extent: float = 5.0,
    random_seed: Optional[Union[int, np.random.Generator]] = None,
    name: Optional[str] = None
) -> PointCloud:
    """
    Points on the plane z = 0 followed by outliers at z = +/- outlier_height.

    Args:
        n_inliers: Number of points lying exactly on z = 0
        n_outliers: Number of off-plane points
        outlier_height: Absolute z of the outliers
        extent: Half-width of the square the points are drawn from
        random_seed: Seed or generator for reproducibility
        name: Optional cloud name

    Returns:
        PointCloud with inliers first, then outliers
    """
    rng = np.random.default_rng(random_seed)

    x = rng.uniform(-extent, extent, n_inliers)
    y = rng.uniform(-extent, extent, n_inliers)
    plane_points = np.column_stack([x, y, np.zeros(n_inliers)])

    outliers = rng.uniform(-extent, extent, (n_outliers, 3))
    # Alternate above and below the plane
    outliers[:, 2] = np.where(np.arange(n_outliers) % 2 == 0, outlier_height, -outlier_height)

    return PointCloud.from_array(np.vstack([plane_points, outliers]), name=name)


def generate_scene(
    noise_level: float = 0.01,
    outlier_ratio: float = 0.1,
    n_ground: int = 2000,
    n_wall: int = 1000,
    n_tilted: int = 800,
    tilt_angle: float = 0.0,
    random_seed: Optional[Union[int, np.random.Generator]] = None,
    name: Optional[str] = None
) -> PointCloud:
    """
    Scene with a ground plane, a wall and a tilted plane plus uniform outliers.

    Args:
        noise_level: Standard deviation of Gaussian noise on plane points
        outlier_ratio: Outliers added as a fraction of plane points
        n_ground: Points on the ground plane z = 0
        n_wall: Points on the wall y = 1.5
        n_tilted: Points on the tilted plane centered at (0, 0, 1)
        tilt_angle: Rotation of the tilted plane's normal about z, radians
        random_seed: Seed or generator for reproducibility
        name: Optional cloud name

    Returns:
        PointCloud of the whole scene
    """
    rng = np.random.default_rng(random_seed)
    points = []

    # Ground plane (z = 0)
    x = rng.uniform(-2, 2, n_ground)
    y = rng.uniform(-2, 2, n_ground)
    z = rng.normal(0, noise_level, n_ground)
    points.append(np.column_stack([x, y, z]))

    # Wall plane (y = 1.5)
    x = rng.uniform(-2, 2, n_wall)
    z = rng.uniform(0, 1.5, n_wall)
    y = np.full(n_wall, 1.5) + rng.normal(0, noise_level, n_wall)
    points.append(np.column_stack([x, y, z]))

    # Tilted plane
    normal = np.array([np.sin(tilt_angle) * 0.5, np.cos(tilt_angle) * 0.5, 0.7])
    normal = normal / np.linalg.norm(normal)
    up = np.array([0.0, 0.0, 1.0]) if abs(normal[2]) < 0.9 else np.array([1.0, 0.0, 0.0])
    right = np.cross(up, normal)
    right = right / np.linalg.norm(right)
    forward = np.cross(normal, right)

    u = rng.uniform(-1, 1, n_tilted)
    v = rng.uniform(-1, 1, n_tilted)
    center = np.array([0.0, 0.0, 1.0])
    tilted = center + np.outer(u, right) + np.outer(v, forward)
    tilted += rng.normal(0, noise_level, tilted.shape)
    points.append(tilted)

    all_points = np.vstack(points)

    n_outliers = int(len(all_points) * outlier_ratio)
    outliers = rng.uniform(-2, 2, (n_outliers, 3))
    all_points = np.vstack([all_points, outliers])

    return PointCloud.from_array(all_points, name=name)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Write a synthetic scene to an .xyz file."""
    parser = argparse.ArgumentParser(description='Generate a synthetic .xyz point cloud')
    parser.add_argument('output', help='Destination .xyz file')
    parser.add_argument('--seed', type=int, default=42)
    parser.add_argument('--noise-level', type=float, default=0.01)
    parser.add_argument('--outlier-ratio', type=float, default=0.1)
    parser.add_argument('--tilt-angle', type=float, default=0.0)
    args = parser.parse_args(argv)

    setup_logging()

    cloud = generate_scene(
        noise_level=args.noise_level,
        outlier_ratio=args.outlier_ratio,
        tilt_angle=args.tilt_angle,
        random_seed=args.seed
    )
    XYZHandler.save(cloud, args.output)
    logger.info(f'Wrote synthetic cloud with {len(cloud)} points to {args.output}')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())

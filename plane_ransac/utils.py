"""
Utility functions for plane extraction runs.
"""

import os
from typing import Optional, Tuple

import numpy as np

from .geometry import Plane

RESIDUAL_SUFFIX = 'p0'


def _output_path(cloud_name: str, suffix: str, output_dir: Optional[str]) -> str:
    filename = f'{cloud_name}_{suffix}.xyz'
    if output_dir is not None:
        filename = os.path.join(output_dir, os.path.basename(filename))
    return filename


def plane_output_path(cloud_name: str, pass_index: int, output_dir: Optional[str] = None) -> str:
    """
    File name for the support set of one pass.

    Args:
        cloud_name: Name of the source cloud
        pass_index: 1-based pass number
        output_dir: Directory replacing the one in cloud_name, if given

    Returns:
        Path of the form <cloud_name>_<pass_index>.xyz
    """
    return _output_path(cloud_name, str(pass_index), output_dir)


def residual_output_path(cloud_name: str, output_dir: Optional[str] = None) -> str:
    """File name for the cloud with all extracted planes removed."""
    return _output_path(cloud_name, RESIDUAL_SUFFIX, output_dir)


def compute_plane_extent(
    points: np.ndarray,
    plane: Plane,
    padding: float = 0.0
) -> Tuple[float, float]:
    """
    Compute the extent of inlier points within their plane.

    Args:
        points: Inlier points, shape (N, 3)
        plane: Non-degenerate plane the points lie on
        padding: Extra padding added on each side

    Returns:
        Tuple of (width, height) along an in-plane basis
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(points) == 0:
        return 0.0, 0.0

    normal = plane.unit_normal()

    # Create local coordinate system on plane
    z_up = np.array([0.0, 0.0, 1.0])
    if np.abs(np.dot(normal, z_up)) > 0.9:
        z_up = np.array([1.0, 0.0, 0.0])

    u = np.cross(normal, z_up)
    u = u / np.linalg.norm(u)
    v = np.cross(normal, u)

    centered = points - np.mean(points, axis=0)
    u_coords = np.dot(centered, u)
    v_coords = np.dot(centered, v)

    width = np.max(u_coords) - np.min(u_coords) + padding * 2
    height = np.max(v_coords) - np.min(v_coords) + padding * 2

    return float(width), float(height)

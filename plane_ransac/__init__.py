"""
Plane RANSAC - dominant plane extraction for 3D point clouds.

This package provides a RANSAC plane estimator that repeatedly finds the
best-supported plane of a point cloud and strips its points, leaving the
residual cloud.
"""

__version__ = '1.0.0'

from .exceptions import (
    PlaneRansacError,
    InvalidParameterError,
    EmptyCloudError,
    PointNotFoundError,
    DegeneratePlaneError,
    CloudFormatError,
)
from .geometry import Point, Plane
from .point_cloud import PointCloud
from .ransac_core import PlaneExtraction, RansacPlaneExtractor, estimate_iteration_count
from .xyz_handler import XYZHandler

__all__ = [
    'Point',
    'Plane',
    'PointCloud',
    'PlaneExtraction',
    'RansacPlaneExtractor',
    'estimate_iteration_count',
    'XYZHandler',
    'PlaneRansacError',
    'InvalidParameterError',
    'EmptyCloudError',
    'PointNotFoundError',
    'DegeneratePlaneError',
    'CloudFormatError',
]

"""
Core RANSAC Plane Extraction.

This module provides:
- estimate_iteration_count: number of trials needed for a given confidence
- RansacPlaneExtractor: finds the dominant plane of a point cloud and
  strips successive dominant planes from it
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

import numpy as np

from .exceptions import EmptyCloudError, InvalidParameterError
from .geometry import Plane
from .point_cloud import PointCloud

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.1
DEFAULT_PASS_COUNT = 3
DEFAULT_CONFIDENCE = 0.99
DEFAULT_INLIER_RATIO = 0.1


def estimate_iteration_count(confidence: float, inlier_ratio: float) -> int:
    """
    Estimate the number of RANSAC trials required.

    A 3-point sample is all inliers with probability inlier_ratio^3, so
    N = ceil(log(1 - confidence) / log(1 - inlier_ratio^3)) trials leave a
    failure probability of at most 1 - confidence.

    Args:
        confidence: Desired probability of drawing one all-inlier sample, in (0, 1)
        inlier_ratio: Assumed fraction of points on the plane, in (0, 1)

    Returns:
        Number of trials, at least 1

    Raises:
        InvalidParameterError: If either argument is outside (0, 1)
    """
    for label, value in (('confidence', confidence), ('inlier_ratio', inlier_ratio)):
        if not (0.0 < value < 1.0):
            raise InvalidParameterError(f'{label} must be in the open interval (0, 1), got {value}')

    # log1p keeps the denominator non-zero for very small ratios
    iterations = math.ceil(math.log1p(-confidence) / math.log1p(-inlier_ratio ** 3))
    return max(1, int(iterations))


@dataclass
class PlaneExtraction:
    """Result of one dominant-plane pass."""
    plane: Plane  # Plane that produced the best support
    support: PointCloud  # Inlier points, in working-cloud order
    support_indices: np.ndarray  # Indices of inliers in the cloud as it stood at this pass
    support_ratio: float  # Ratio of inliers to points in the cloud at this pass
    num_iterations: int  # Number of trials performed
    degenerate_trials: int = 0  # Trials whose sample had a zero normal

    @property
    def support_size(self) -> int:
        return len(self.support)


class RansacPlaneExtractor:
    """
    Sequential RANSAC for detecting the dominant planes of a point cloud.

    The extractor borrows the working cloud and removes the support of every
    accepted plane from it, so after run() the cloud holds the residual.
    """

    def __init__(
        self,
        point_cloud: PointCloud,
        epsilon: float = DEFAULT_EPSILON,
        confidence: float = DEFAULT_CONFIDENCE,
        inlier_ratio: float = DEFAULT_INLIER_RATIO,
        random_seed: Optional[Union[int, np.random.Generator]] = None
    ):
        """
        Initialize the extractor.

        Args:
            point_cloud: Working cloud, mutated by run()
            epsilon: Maximum distance for a point to be considered inlier
            confidence: Confidence used to size the number of trials
            inlier_ratio: Assumed fraction of remaining points on the next plane
            random_seed: Seed or generator for reproducibility
        """
        _check_epsilon(epsilon)
        self.point_cloud = point_cloud
        self.epsilon = epsilon
        self.confidence = confidence
        self.inlier_ratio = inlier_ratio
        # Same ratio for every pass even though the residual shrinks
        self.num_iterations = estimate_iteration_count(confidence, inlier_ratio)
        self.rng = np.random.default_rng(random_seed)

    def extract_dominant_plane(self, epsilon: Optional[float] = None) -> PlaneExtraction:
        """
        Run one RANSAC pass against the current working cloud.

        The working cloud is not modified. Each trial samples three points
        with replacement, so repeated or collinear samples occur; they give
        a degenerate plane that scores zero support. Ties keep the first
        plane found.

        Args:
            epsilon: Inlier threshold for this pass, defaults to self.epsilon

        Returns:
            PlaneExtraction for the best-supported plane

        Raises:
            EmptyCloudError: If the working cloud has no points
        """
        if epsilon is None:
            epsilon = self.epsilon
        _check_epsilon(epsilon)

        cloud = self.point_cloud
        n_points = len(cloud)
        if n_points == 0:
            raise EmptyCloudError('Cannot extract a plane from an empty cloud')

        coordinates = cloud.to_array()
        best_plane = None
        best_inliers = None
        best_inlier_count = -1
        degenerate_trials = 0

        for _ in range(self.num_iterations):
            plane = Plane.from_points(
                cloud.sample_one(self.rng),
                cloud.sample_one(self.rng),
                cloud.sample_one(self.rng)
            )

            if plane.is_degenerate:
                degenerate_trials += 1
                inliers = np.zeros(n_points, dtype=bool)
            else:
                inliers = plane.distances_to(coordinates) < epsilon
            inlier_count = int(np.count_nonzero(inliers))

            if inlier_count > best_inlier_count:
                best_plane = plane
                best_inliers = inliers
                best_inlier_count = inlier_count

        if degenerate_trials:
            logger.debug(f'{degenerate_trials}/{self.num_iterations} trials had degenerate samples')

        support_indices = np.flatnonzero(best_inliers)
        support = PointCloud(cloud[int(i)] for i in support_indices)

        return PlaneExtraction(
            plane=best_plane,
            support=support,
            support_indices=support_indices,
            support_ratio=best_inlier_count / n_points,
            num_iterations=self.num_iterations,
            degenerate_trials=degenerate_trials
        )

    def run(
        self,
        pass_count: int = DEFAULT_PASS_COUNT,
        epsilon: Optional[float] = None,
        min_support: Optional[int] = None,
        stop_condition: Optional[Callable[[PlaneExtraction], bool]] = None
    ) -> List[PlaneExtraction]:
        """
        Extract up to pass_count dominant planes.

        After each pass the support set is removed from the working cloud,
        so the planes have disjoint point attribution. Without a stopping
        rule exactly pass_count passes run, even on a nearly exhausted
        cloud. When min_support or stop_condition rejects a pass, that pass
        is discarded, nothing is removed and the run ends.

        Args:
            pass_count: Number of passes
            epsilon: Inlier threshold, defaults to self.epsilon
            min_support: Smallest support size worth keeping
            stop_condition: Called with each pass result; True ends the run

        Returns:
            List of accepted PlaneExtraction objects, in pass order

        Raises:
            EmptyCloudError: If a pass starts on an empty cloud. The passes
                accepted before it are attached as its ``extractions``
                attribute; their points are already removed.
        """
        if pass_count < 0:
            raise InvalidParameterError(f'pass_count must be non-negative, got {pass_count}')
        if min_support is not None and min_support < 0:
            raise InvalidParameterError(f'min_support must be non-negative, got {min_support}')

        logger.info(
            f'Extracting {pass_count} planes from {len(self.point_cloud)} points '
            f'({self.num_iterations} trials per pass)'
        )

        results = []
        for pass_index in range(1, pass_count + 1):
            try:
                extraction = self.extract_dominant_plane(epsilon)
            except EmptyCloudError as e:
                e.extractions = results
                raise

            if min_support is not None and extraction.support_size < min_support:
                logger.info(
                    f'Pass {pass_index}: support {extraction.support_size} below '
                    f'minimum {min_support}, stopping'
                )
                break
            if stop_condition is not None and stop_condition(extraction):
                logger.info(f'Pass {pass_index}: stop condition met, stopping')
                break

            self.point_cloud.remove_all(extraction.support)
            results.append(extraction)

            logger.info(
                f'Pass {pass_index}: plane {extraction.plane!r}, '
                f'inliers={extraction.support_size} ({extraction.support_ratio:.1%}), '
                f'{len(self.point_cloud)} points remaining'
            )

        return results


def _check_epsilon(epsilon: float):
    if not epsilon > 0.0:
        raise InvalidParameterError(f'epsilon must be positive, got {epsilon}')

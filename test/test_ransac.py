"""
Unit tests for RANSAC plane extraction.
"""

import pytest
import numpy as np
import sys
import os
import itertools
from collections import Counter

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plane_ransac.exceptions import EmptyCloudError, InvalidParameterError
from plane_ransac.geometry import Point
from plane_ransac.point_cloud import PointCloud
from plane_ransac.ransac_core import RansacPlaneExtractor, estimate_iteration_count
from plane_ransac.synthetic import generate_plane_with_outliers, generate_scene


class TestEstimateIterationCount:
    """Tests for the trial count estimate."""

    def test_default_policy(self):
        assert estimate_iteration_count(0.99, 0.1) == 4603

    def test_known_value(self):
        # log(0.01) / log(1 - 0.125) = 34.49
        assert estimate_iteration_count(0.99, 0.5) == 35

    def test_monotonic_in_confidence(self):
        counts = [estimate_iteration_count(c, 0.2) for c in np.linspace(0.05, 0.999, 40)]
        assert all(a <= b for a, b in zip(counts, counts[1:]))

    def test_monotonic_in_ratio(self):
        counts = [estimate_iteration_count(0.95, r) for r in np.linspace(0.01, 0.99, 40)]
        assert all(a >= b for a, b in zip(counts, counts[1:]))

    def test_at_least_one_iteration(self):
        assert estimate_iteration_count(0.01, 0.99) >= 1

    def test_tiny_ratio_is_finite(self):
        assert estimate_iteration_count(0.99, 1e-6) > 0

    @pytest.mark.parametrize('confidence, ratio', [
        (0.0, 0.1), (1.0, 0.1), (0.99, 0.0), (0.99, 1.0), (-0.5, 0.1), (0.99, 1.5)
    ])
    def test_invalid_parameters(self, confidence, ratio):
        with pytest.raises(InvalidParameterError):
            estimate_iteration_count(confidence, ratio)

    def test_invalid_parameters_at_construction(self):
        with pytest.raises(InvalidParameterError):
            RansacPlaneExtractor(PointCloud(), inlier_ratio=1.0)
        with pytest.raises(ValueError):
            RansacPlaneExtractor(PointCloud(), epsilon=0.0)


class TestExtractDominantPlane:
    """Tests for a single RANSAC pass."""

    def test_recovers_plane_with_outliers(self):
        """90 points on z = 0 and 10 at z = +/-5 give a support of 90."""
        cloud = generate_plane_with_outliers(random_seed=42)
        extractor = RansacPlaneExtractor(cloud, epsilon=0.1, random_seed=42)

        result = extractor.extract_dominant_plane()

        assert result.num_iterations >= estimate_iteration_count(0.99, 0.1)
        assert result.support_size >= 90
        normal = result.plane.unit_normal()
        assert abs(abs(normal[2]) - 1.0) < 1e-9
        assert result.support_ratio == pytest.approx(result.support_size / 100)

    def test_support_within_epsilon(self):
        cloud = generate_scene(n_ground=300, n_wall=150, n_tilted=100, random_seed=42)
        original_size = len(cloud)
        extractor = RansacPlaneExtractor(cloud, epsilon=0.05, inlier_ratio=0.3, random_seed=1)

        result = extractor.extract_dominant_plane()

        assert result.support_size <= original_size
        for point in result.support:
            assert result.plane.distance_to(point) < 0.05

    def test_does_not_modify_cloud(self):
        cloud = generate_plane_with_outliers(random_seed=3)
        before = list(cloud)
        RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=3).extract_dominant_plane()
        assert list(cloud) == before

    def test_support_indices_match_support(self):
        cloud = generate_plane_with_outliers(random_seed=5)
        result = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=5).extract_dominant_plane()
        assert [cloud[int(i)] for i in result.support_indices] == list(result.support)

    def test_epsilon_override(self):
        cloud = generate_plane_with_outliers(random_seed=42)
        extractor = RansacPlaneExtractor(cloud, epsilon=0.1, random_seed=42)
        result = extractor.extract_dominant_plane(epsilon=20.0)
        assert result.support_size == 100

    def test_same_seed_same_result(self):
        cloud = generate_scene(n_ground=200, n_wall=100, n_tilted=80, random_seed=9)
        first = RansacPlaneExtractor(cloud, inlier_ratio=0.3, random_seed=11).extract_dominant_plane()
        second = RansacPlaneExtractor(cloud, inlier_ratio=0.3, random_seed=11).extract_dominant_plane()
        np.testing.assert_array_equal(first.support_indices, second.support_indices)
        np.testing.assert_array_equal(first.plane.coefficients, second.plane.coefficients)

    def test_collinear_cloud_has_no_support(self):
        """Every sample is degenerate; the pass completes with empty support."""
        cloud = PointCloud([Point(t, 2 * t, -t) for t in range(10)])
        extractor = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=0)

        result = extractor.extract_dominant_plane()

        assert result.support_size == 0
        assert result.plane.is_degenerate
        assert result.degenerate_trials == result.num_iterations

    def test_micrometre_scale_plane(self):
        """Valid samples are not mistaken for degenerate ones at small scales."""
        rng = np.random.default_rng(42)
        plane_points = np.column_stack([
            rng.uniform(-1e-6, 1e-6, 90), rng.uniform(-1e-6, 1e-6, 90), np.zeros(90)
        ])
        outliers = np.column_stack([
            rng.uniform(-1e-6, 1e-6, 10), rng.uniform(-1e-6, 1e-6, 10), np.full(10, 5e-6)
        ])
        cloud = PointCloud.from_array(np.vstack([plane_points, outliers]))
        extractor = RansacPlaneExtractor(cloud, epsilon=1e-7, inlier_ratio=0.5, random_seed=42)

        result = extractor.extract_dominant_plane()

        assert result.support_size == 90
        assert result.degenerate_trials < result.num_iterations
        assert abs(abs(result.plane.unit_normal()[2]) - 1.0) < 1e-9

    def test_tie_keeps_first_plane_found(self):
        """Two planes with equal support: the earlier trial wins."""
        low = [Point(0.0, 0.0, 0.0), Point(1.0, 0.0, 0.0), Point(0.0, 1.0, 0.0)]
        high = [Point(0.0, 0.0, 5.0), Point(1.0, 0.0, 5.0), Point(0.0, 1.0, 5.0)]
        samples = itertools.chain(high, itertools.cycle(low))

        class ScriptedCloud(PointCloud):
            def sample_one(self, rng=None):
                return next(samples)

        cloud = ScriptedCloud(low + high)
        extractor = RansacPlaneExtractor(cloud, epsilon=0.1, inlier_ratio=0.5, random_seed=0)

        result = extractor.extract_dominant_plane()

        assert result.num_iterations > 1
        assert result.support_size == 3
        assert result.plane.get_point(0) == high[0]
        assert list(result.support) == high

    def test_single_point_cloud(self):
        cloud = PointCloud([Point(1.0, 1.0, 1.0)])
        result = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=0).extract_dominant_plane()
        assert result.support_size == 0

    def test_empty_cloud_fails(self):
        extractor = RansacPlaneExtractor(PointCloud(), random_seed=0)
        with pytest.raises(EmptyCloudError):
            extractor.extract_dominant_plane()


class TestRun:
    """Tests for multi-pass extraction."""

    def test_bookkeeping_across_passes(self):
        cloud = generate_scene(n_ground=300, n_wall=150, n_tilted=100, random_seed=42)
        original = Counter(cloud)
        original_size = len(cloud)
        extractor = RansacPlaneExtractor(cloud, epsilon=0.05, inlier_ratio=0.3, random_seed=42)

        results = extractor.run(3)

        assert len(results) == 3
        removed = sum(r.support_size for r in results)
        assert len(cloud) == original_size - removed

        residual = set(cloud)
        for result in results:
            assert residual.isdisjoint(result.support)

        combined = Counter(cloud)
        for result in results:
            combined.update(result.support)
        assert combined == original

    def test_first_plane_is_ground(self):
        cloud = generate_scene(n_ground=300, n_wall=150, n_tilted=100, random_seed=42)
        results = RansacPlaneExtractor(cloud, epsilon=0.05, inlier_ratio=0.3, random_seed=42).run(2)
        normal = results[0].plane.unit_normal()
        assert abs(abs(normal[2]) - 1.0) < 0.05
        assert results[0].support_size >= 250

    def test_residual_does_not_rediscover_removed_points(self):
        cloud = generate_plane_with_outliers(random_seed=42)
        extractor = RansacPlaneExtractor(cloud, random_seed=42)
        first = extractor.run(1)[0]

        second = extractor.extract_dominant_plane()

        assert set(second.support).isdisjoint(first.support)
        assert len(cloud) == 100 - first.support_size

    def test_size_non_increasing(self):
        cloud = generate_plane_with_outliers(random_seed=8)
        extractor = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=8)
        sizes = [len(cloud)]
        for _ in range(3):
            extractor.run(1)
            sizes.append(len(cloud))
        assert all(a >= b for a, b in zip(sizes, sizes[1:]))

    def test_degenerate_passes_remove_nothing(self):
        cloud = PointCloud([Point(t, 0.0, 0.0) for t in range(6)])
        results = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=0).run(3)
        assert len(results) == 3
        assert all(r.support_size == 0 for r in results)
        assert len(cloud) == 6

    def test_min_support_stops_early(self):
        cloud = generate_plane_with_outliers(random_seed=42)
        extractor = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=42)

        results = extractor.run(3, min_support=20)

        assert len(results) == 1
        assert results[0].support_size == 90
        assert len(cloud) == 10

    def test_stop_condition(self):
        cloud = generate_plane_with_outliers(random_seed=42)
        extractor = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=42)

        results = extractor.run(3, stop_condition=lambda extraction: True)

        assert results == []
        assert len(cloud) == 100

    def test_zero_passes(self):
        cloud = generate_plane_with_outliers(random_seed=42)
        assert RansacPlaneExtractor(cloud, random_seed=0).run(0) == []
        assert len(cloud) == 100

    def test_negative_passes_rejected(self):
        with pytest.raises(InvalidParameterError):
            RansacPlaneExtractor(PointCloud(), random_seed=0).run(-1)

    def test_exhausted_cloud_fails(self):
        """A pass on an emptied residual is a precondition violation."""
        cloud = PointCloud([Point(0, 0, 0), Point(1, 0, 0), Point(0, 1, 0)])
        extractor = RansacPlaneExtractor(cloud, inlier_ratio=0.5, random_seed=0)
        with pytest.raises(EmptyCloudError) as excinfo:
            extractor.run(2)

        accepted = excinfo.value.extractions
        assert len(accepted) == 1
        assert accepted[0].support_size == 3
        assert len(cloud) == 0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

"""
Command-line driver for dominant plane extraction.

For each input cloud the driver strips the dominant planes, writes each
pass's support set to <cloudName>_<k>.xyz and the residual cloud to
<cloudName>_p0.xyz.
"""

import argparse
import logging
import os
import time
from typing import List, Optional, Sequence

import numpy as np

from .config import RansacParameters, load_parameters
from .exceptions import CloudFormatError, InvalidParameterError, PlaneRansacError
from .logging_config import setup_logging
from .ransac_core import PlaneExtraction, RansacPlaneExtractor
from .utils import compute_plane_extent, plane_output_path, residual_output_path
from .xyz_handler import XYZHandler

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='plane-ransac',
        description='Detect and strip the dominant planes of .xyz point clouds'
    )
    parser.add_argument('inputs', nargs='+', help='Input .xyz files')
    parser.add_argument('--params-file', help='YAML parameter file')
    parser.add_argument('--epsilon', type=float, help='Inlier distance threshold')
    parser.add_argument('--passes', type=int, dest='pass_count', help='Number of planes to extract')
    parser.add_argument('--confidence', type=float, help='Confidence used to size the trial count')
    parser.add_argument('--inlier-ratio', type=float, help='Assumed fraction of points on each plane')
    parser.add_argument('--seed', type=int, dest='random_seed', help='Random seed')
    parser.add_argument('--min-support', type=int, help='Stop when a plane has fewer inliers')
    parser.add_argument('--output-dir', help='Directory for output files (default: beside input)')
    parser.add_argument('--log-level', help='DEBUG, INFO, WARNING, ERROR, CRITICAL')
    parser.add_argument('--log-file', help='Also write logs to this file')
    return parser


def _resolve_parameters(args: argparse.Namespace) -> RansacParameters:
    params = load_parameters(args.params_file) if args.params_file else RansacParameters()
    return params.with_overrides(
        epsilon=args.epsilon,
        pass_count=args.pass_count,
        confidence=args.confidence,
        inlier_ratio=args.inlier_ratio,
        random_seed=args.random_seed,
        min_support=args.min_support,
        log_level=args.log_level
    ).validate()


def _log_extraction(pass_index: int, extraction: PlaneExtraction):
    plane = extraction.plane
    if plane.is_degenerate or extraction.support_size == 0:
        logger.info(f'Plane {pass_index}: no support found')
        return

    normal = plane.unit_normal()
    width, height = compute_plane_extent(extraction.support.to_array(), plane)
    logger.info(
        f'Plane {pass_index} detected: normal=[{normal[0]:.3f}, '
        f'{normal[1]:.3f}, {normal[2]:.3f}], '
        f'inliers={extraction.support_size} ({extraction.support_ratio:.1%}), '
        f'extent={width:.2f}x{height:.2f}'
    )


def process_cloud(
    path: str,
    params: RansacParameters,
    rng: np.random.Generator,
    output_dir: Optional[str] = None
) -> List[PlaneExtraction]:
    """
    Load one cloud, extract its dominant planes and write the outputs.

    Args:
        path: Input .xyz file
        params: Validated run parameters
        rng: Random source shared across clouds
        output_dir: Directory for outputs, defaults to the input's directory

    Returns:
        List of accepted PlaneExtraction objects
    """
    start_time = time.perf_counter()
    cloud = XYZHandler.load(path)

    extractor = RansacPlaneExtractor(
        cloud,
        epsilon=params.epsilon,
        confidence=params.confidence,
        inlier_ratio=params.inlier_ratio,
        random_seed=rng
    )
    results = extractor.run(
        params.pass_count,
        min_support=params.min_support or None
    )

    for pass_index, extraction in enumerate(results, start=1):
        _log_extraction(pass_index, extraction)
        XYZHandler.save(extraction.support, plane_output_path(cloud.name, pass_index, output_dir))
    XYZHandler.save(cloud, residual_output_path(cloud.name, output_dir))

    elapsed = time.perf_counter() - start_time
    logger.info(f'Algorithm complete for {path} ({len(results)} planes, {elapsed:.3f}s)')
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        params = _resolve_parameters(args)
    except (InvalidParameterError, OSError) as e:
        parser.error(str(e))

    setup_logging(params.log_level, args.log_file)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)

    rng = np.random.default_rng(params.random_seed)
    failures = 0
    for path in args.inputs:
        try:
            process_cloud(path, params, rng, args.output_dir)
        except (OSError, CloudFormatError) as e:
            failures += 1
            logger.error(f'Something went wrong while trying to open/read {path}')
            logger.debug(f'{type(e).__name__}: {e}')
        except PlaneRansacError as e:
            failures += 1
            logger.error(f'Plane extraction failed for {path}: {e}')

    return 1 if failures else 0


if __name__ == '__main__':
    raise SystemExit(main())

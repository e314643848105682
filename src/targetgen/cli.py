#!/usr/bin/env python3
"""
Command line entry point: generate a batch of target images and their
COCO annotation file.

Example:
    targetgen -b data/backgrounds -o data/objects --output out/ -a out/annotations.json -n 100
"""

import argparse
import logging
import os
import sys

from .config import COLLISION_POLICIES, TargetGeneratorConfig, load_config, parse_color
from .errors import ConfigurationError
from .generation.target_generator import TargetGenerator
from .utils.helpers import cleanup_output

logger = logging.getLogger(__name__)


def setup_logging(verbose=False):
    """Configures logging for the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='[%(asctime)s] %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def _color(text):
    try:
        return parse_color(text)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        description='Generate synthetic target images with COCO annotations'
    )
    parser.add_argument('-b', '--backgrounds', required=True,
                        help='Directory of background images')
    parser.add_argument('-o', '--objects', required=True,
                        help='Directory of object cutouts containing objects.json')
    parser.add_argument('--output', required=True,
                        help='Directory the generated images are written to')
    parser.add_argument('-a', '--annotations', required=True,
                        help='Path of the COCO annotation file to write')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML file with generator settings')
    parser.add_argument('-n', '--num-targets', type=int, default=1,
                        help='Number of target images to generate (default: 1)')
    parser.add_argument('--num-objects', type=int, default=6,
                        help='Exclusive upper bound of objects per image (default: 6)')

    # Left as None when not given so the config file value is kept
    parser.add_argument('--visualize-bboxes', action='store_true', default=None,
                        help='Draw a green outline around each placed object')
    parser.add_argument('--maskover-color', type=_color, default=None,
                        help='Fill each object box with a color, "#RRGGBB[AA]" or "r,g,b[,a]"')
    parser.add_argument('--permit-duplicates', action='store_true', default=None,
                        help='Allow the same object more than once per image')
    parser.add_argument('--permit-collisions', action='store_true', default=None,
                        help='Allow placed objects to overlap')
    parser.add_argument('--collision-policy', choices=COLLISION_POLICIES, default=None,
                        help='What to do when an object cannot be placed')
    parser.add_argument('--cache-size', type=int, default=None,
                        help='Resize cache budget in MB')
    parser.add_argument('--worker-threads', type=int, default=None,
                        help='Number of generation threads')
    parser.add_argument('--no-compress', action='store_false', dest='compress', default=None,
                        help='Write PNGs without compression')
    parser.add_argument('--no-rotation', action='store_false', dest='do_random_rotation', default=None,
                        help='Do not rotate objects')
    parser.add_argument('--ppm', type=float, dest='pixels_per_meter', default=None,
                        help='Pixels per meter used to scale objects')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed')
    parser.add_argument('--clean-output', action='store_true',
                        help='Remove images and JSON files left in the output directory first')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    return parser


def resolve_config(args) -> TargetGeneratorConfig:
    """Config file (or defaults) with the command line flags applied on top."""
    config = load_config(args.config) if args.config else TargetGeneratorConfig()
    return config.with_overrides(
        visualize_bboxes=args.visualize_bboxes,
        maskover_color=args.maskover_color,
        permit_duplicates=args.permit_duplicates,
        permit_collisions=args.permit_collisions,
        collision_policy=args.collision_policy,
        cache_size=args.cache_size,
        worker_threads=args.worker_threads,
        compress=args.compress,
        do_random_rotation=args.do_random_rotation,
        pixels_per_meter=args.pixels_per_meter,
        seed=args.seed,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = resolve_config(args)

        if args.clean_output and os.path.isdir(args.output):
            removed = cleanup_output(args.output)
            logger.info(f"Removed {removed} files from {args.output}")

        generator = TargetGenerator(args.backgrounds, args.objects, args.annotations, config)
        try:
            generator.generate_targets(args.num_targets, args.num_objects, args.output)
        finally:
            generator.close()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())

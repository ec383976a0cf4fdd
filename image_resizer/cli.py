"""CLI runner comparing sequential and concurrent batch resizing."""

import argparse
import logging
import sys
from typing import List, Optional

from .batch import resize_images, resize_images_concurrent
from .benchmark import format_report, run_benchmark
from .cleaner import clean_directory
from .config import ResizerConfig
from .errors import ImageResizerError
from .processing import NAMING_MODES

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Resize a directory of images and time sequential vs concurrent runs"
    )

    parser.add_argument(
        "--mode",
        choices=["benchmark", "sequential", "concurrent"],
        default="benchmark",
        help="What to run (default: benchmark)",
    )

    # Paths
    parser.add_argument(
        "--source", help="Source image directory (default: ./images)"
    )
    parser.add_argument("--dest", help="Output directory (default: ./output)")

    # Resize parameters
    parser.add_argument(
        "--scale", type=float, help="Scale factor for width and height (default: 2.0)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Concurrent worker count; 0 means one worker per image",
    )
    parser.add_argument(
        "--naming",
        choices=list(NAMING_MODES),
        help="Output layout: flat (default) or mirror source subdirectories",
    )
    parser.add_argument(
        "--rounds", type=int, help="Benchmark repetitions to average (default: 1)"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ResizerConfig:
    """Merge CLI overrides on top of environment configuration."""
    base = ResizerConfig.from_env().to_dict()
    overrides = {
        "source_dir": args.source,
        "dest_dir": args.dest,
        "scale": args.scale,
        "max_workers": args.workers,
        "naming": args.naming,
        "rounds": args.rounds,
    }
    base.update({key: value for key, value in overrides.items() if value is not None})
    return ResizerConfig.from_dict(base)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    try:
        if args.mode == "benchmark":
            report = run_benchmark(config)
            print(format_report(report))
        elif args.mode == "sequential":
            clean_directory(config.dest_dir)
            result = resize_images(
                config.source_dir,
                config.dest_dir,
                config.scale,
                naming=config.naming,
                background=config.background,
            )
            print(f"Sequential: {result.elapsed_ms:.0f} ms ({result.processed} images)")
        else:
            clean_directory(config.dest_dir)
            result = resize_images_concurrent(
                config.source_dir,
                config.dest_dir,
                config.scale,
                max_workers=config.max_workers,
                naming=config.naming,
                background=config.background,
            )
            print(
                f"Concurrent ({result.workers} workers): "
                f"{result.elapsed_ms:.0f} ms ({result.processed} images)"
            )
    except ImageResizerError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

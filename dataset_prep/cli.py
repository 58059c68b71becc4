"""
Command-line entry point.

Usage:
    dataset-prep --input raw/ --output prepared/ --resize 224x224 --rotate 90 --flip horizontal
    dataset-prep --config prep.yaml --workers 8
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ProcessingConfig, VALID_ROTATIONS, FlipMode
from .errors import ConfigError, InputError, WriteError
from .pipeline import DatasetPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dataset-prep",
        description="Transform images in class subdirectories and write a training manifest",
    )
    parser.add_argument("--config", help="YAML config file (flags override its values)")
    parser.add_argument("--input", help="Input directory with one subdirectory per class")
    parser.add_argument("--output", help="Output directory for transformed images and manifest")
    parser.add_argument("--resize", help="Resize to WIDTHxHEIGHT, e.g. 800x600")
    parser.add_argument("--rotate", type=int, choices=VALID_ROTATIONS, help="Clockwise rotation in degrees")
    parser.add_argument("--flip", choices=[m.value for m in FlipMode], help="Flip mode")
    parser.add_argument("--dataset-label", help="Value of the 'data set' field (default: train)")
    parser.add_argument("--manifest-name", help="Manifest filename (default: training_data.json)")
    parser.add_argument("--workers", type=int, help="Number of worker threads (default: CPU count)")
    parser.add_argument("--extensions", help="Comma-separated image extensions, e.g. jpg,png")
    parser.add_argument(
        "--reuse-indices", action="store_true",
        help="Keep class indices from an existing manifest in the input directory",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every saved image")
    return parser


def config_from_args(args: argparse.Namespace) -> ProcessingConfig:
    """Merge YAML config (if any) with command-line overrides."""
    data = {}
    if args.config:
        data = ProcessingConfig.from_yaml(args.config).to_dict()

    overrides = {
        "input_dir": args.input,
        "output_dir": args.output,
        "resize": args.resize,
        "rotate": args.rotate,
        "flip": args.flip,
        "dataset_label": args.dataset_label,
        "manifest_name": args.manifest_name,
        "num_workers": args.workers,
        "extensions": args.extensions.split(",") if args.extensions else None,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    if args.reuse_indices:
        data["reuse_indices"] = True
    return ProcessingConfig.from_dict(data)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        config = config_from_args(args)
        result = DatasetPipeline(config).run()
    except (ConfigError, InputError, WriteError) as e:
        logger.error(str(e))
        return 1

    logger.info(f"Training data JSON file created at {result.manifest_path}")
    logger.info(f"Processed {result.images_processed} images in {result.elapsed_seconds:.3f}s")
    logger.info(f"Average time per image: {result.average_seconds_per_image:.6f} seconds")
    if result.images_skipped:
        logger.warning(f"Skipped {result.images_skipped} images that could not be processed")
    return 0


if __name__ == "__main__":
    sys.exit(main())

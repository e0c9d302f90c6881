"""
Packing Script

Pack the items of a job file into a single bin and report the result.

Usage:
    python pack.py --config config/default.yaml
    python pack.py --config config/default.yaml --metric width --save-html out/pack.html
    python pack.py --random-items 40 --width 50 --height 30 --seed 7 --time-limit 2
"""

import argparse
import logging
import sys
import time
from typing import Callable, List, Optional

from binpack2d.environment.container import Bin
from binpack2d.environment.holes import get_hole_metric
from binpack2d.environment.item import generate_random_items
from binpack2d.utils.config import (
    get_default_config,
    items_from_config,
    load_config,
    update_config_from_args,
)
from binpack2d.utils.logger import setup_logger
from binpack2d.utils.metrics import MetricsCalculator
from binpack2d.visualization.plotly_2d import PackingVisualizer, render_text


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Pack rectangles into a 2D bin")

    # Job
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML job file (built-in defaults if omitted)",
    )
    parser.add_argument(
        "--random-items",
        type=int,
        default=None,
        help="Pack this many random rotatable items instead of the job's items",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --random-items",
    )

    # Bin and packing (override config)
    parser.add_argument("--width", type=int, default=None, help="Bin width")
    parser.add_argument("--height", type=int, default=None, help="Bin height")
    parser.add_argument(
        "--metric",
        type=str,
        default=None,
        help="Hole metric: area, width, height, min_side, perimeter",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        default=None,
        help="Stop packing after this many seconds",
    )

    # Output
    parser.add_argument(
        "--save-html",
        type=str,
        default=None,
        help="Write an interactive plot of the solution to this file",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write log output to this file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every packing pass",
    )

    return parser.parse_args(argv)


def make_deadline(time_limit: Optional[float]) -> Callable[[], bool]:
    """Cancel predicate that turns True once time_limit seconds have passed."""
    if time_limit is None:
        return lambda: False
    deadline = time.monotonic() + time_limit
    return lambda: time.monotonic() >= deadline


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one packing job.

    Returns:
        0 if every item was placed, 1 if packing failed or was canceled,
        2 if the job file or command-line overrides are invalid
    """
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logger = setup_logger("binpack2d", log_file=args.log_file, level=level)

    try:
        if args.config is not None:
            logger.info(f"Loading configuration from: {args.config}")
            config = load_config(args.config)
        else:
            config = get_default_config()
        config = update_config_from_args(config, vars(args))
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid job: {e}")
        return 2

    width = config["bin"]["width"]
    height = config["bin"]["height"]
    if args.random_items is not None:
        items = generate_random_items(args.random_items, (width, height), seed=args.seed)
    else:
        items = items_from_config(config)

    metric_name = config["packing"]["hole_metric"]
    packing_bin = Bin(width, height, metric=get_hole_metric(metric_name))
    cancel = make_deadline(config["packing"]["time_limit"])

    logger.info(f"Packing {len(items)} items into {width}x{height} bin "
                f"(hole metric: {metric_name})")
    start = time.perf_counter()
    all_fit = packing_bin.place_all(items, cancel)
    elapsed = time.perf_counter() - start

    logger.info(f"Outcome: {packing_bin.outcome.value} in {elapsed:.3f}s")
    for placed in packing_bin.solution():
        logger.info(f"  {placed.item_id}: ({placed.x0}, {placed.y0}) - "
                    f"({placed.x1}, {placed.y1}){' rotated' if placed.rotated else ''}")

    metrics = MetricsCalculator.calculate_all_metrics(packing_bin, total_items=len(items))
    logger.info("\n" + MetricsCalculator.format_metrics(metrics, title="Packing Result"))
    logger.debug("\n" + render_text(packing_bin, empty="."))

    html_path = config["output"]["html"]
    if html_path is not None:
        visualizer = PackingVisualizer()
        visualizer.visualize_bin(packing_bin)
        visualizer.save_html(html_path)

    return 0 if all_fit else 1


if __name__ == "__main__":
    sys.exit(main())

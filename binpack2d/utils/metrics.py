"""
Metrics Calculator for 2D Bin Packing

Summary figures for judging how well a bin was packed.
"""

import numpy as np
from typing import Any, Dict, Optional

from ..environment.container import Bin


class MetricsCalculator:
    """
    Calculate various metrics for a packed bin.

    Metrics include:
    - Space utilization (placed area / bin area)
    - Packing ratio (items placed / total items)
    - Rotation ratio (rotated placements / placements)
    - Hole ratio (largest free rectangle / bin area)
    - Fragmentation of the remaining free space
    """

    @staticmethod
    def calculate_space_utilization(packing_bin: Bin) -> float:
        """
        Calculate space utilization ratio.

        Args:
            packing_bin: Bin with placed items

        Returns:
            Utilization ratio [0, 1]
        """
        return packing_bin.utilization

    @staticmethod
    def calculate_packing_ratio(num_placed: int, total_items: int) -> float:
        """
        Calculate packing ratio.

        Args:
            num_placed: Number of successfully placed items
            total_items: Total number of items

        Returns:
            Packing ratio [0, 1]
        """
        return num_placed / total_items if total_items > 0 else 0.0

    @staticmethod
    def calculate_rotation_ratio(packing_bin: Bin) -> float:
        """Fraction of placed items that were turned 90 degrees."""
        if not packing_bin.placed_items:
            return 0.0
        rotated = sum(1 for placed in packing_bin.placed_items if placed.rotated)
        return rotated / len(packing_bin.placed_items)

    @staticmethod
    def calculate_hole_ratio(packing_bin: Bin) -> float:
        """
        Area of the largest free rectangle relative to the bin.

        Uses the hole recorded by the last place_all, whatever metric it was
        chosen by.

        Args:
            packing_bin: Bin after packing

        Returns:
            Hole area / bin area [0, 1]
        """
        return packing_bin.get_largest_hole().area / packing_bin.area

    @staticmethod
    def calculate_fragmentation(packing_bin: Bin) -> float:
        """
        Calculate fragmentation of the free space.

        1 - (largest hole area / total free area). Zero means all free space
        forms a single rectangle; values near one mean it is scattered.

        Args:
            packing_bin: Bin after packing

        Returns:
            Fragmentation [0, 1]; 0.0 for a full bin
        """
        free_cells = int(np.count_nonzero(~packing_bin.grid.cells))
        if free_cells == 0:
            return 0.0
        return 1.0 - packing_bin.get_largest_hole().area / free_cells

    @staticmethod
    def calculate_all_metrics(packing_bin: Bin, total_items: Optional[int] = None) -> Dict[str, Any]:
        """
        Calculate all available metrics for a bin.

        Args:
            packing_bin: Bin with placed items
            total_items: Number of items offered to place_all

        Returns:
            Dictionary of all metrics
        """
        if total_items is None:
            total_items = packing_bin.num_placed
        hole = packing_bin.get_largest_hole()

        metrics = {
            "utilization": MetricsCalculator.calculate_space_utilization(packing_bin),
            "packing_ratio": MetricsCalculator.calculate_packing_ratio(
                packing_bin.num_placed, total_items
            ),
            "rotation_ratio": MetricsCalculator.calculate_rotation_ratio(packing_bin),
            "hole_ratio": MetricsCalculator.calculate_hole_ratio(packing_bin),
            "fragmentation": MetricsCalculator.calculate_fragmentation(packing_bin),
            "largest_hole": f"{hole.width}x{hole.height}",
            "num_placed": packing_bin.num_placed,
            "total_items": total_items,
        }

        return metrics

    @staticmethod
    def format_metrics(metrics: Dict[str, Any], title: str = "Metrics") -> str:
        """
        Format metrics as a text table.

        Args:
            metrics: Dictionary of metrics
            title: Table title

        Returns:
            Multi-line string
        """
        lines = ["=" * 50, f"{title:^50}", "=" * 50]

        for key, value in metrics.items():
            if isinstance(value, float):
                if "ratio" in key or "utilization" in key or "fragmentation" in key:
                    lines.append(f"{key:.<40} {value:>8.2%}")
                else:
                    lines.append(f"{key:.<40} {value:>8.4f}")
            else:
                lines.append(f"{key:.<40} {value:>8}")

        lines.append("=" * 50)
        return "\n".join(lines)

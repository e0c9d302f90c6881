"""
2D Visualization using Plotly

Interactive rendering of bin packing solutions: placed items as filled
rectangles, the occupancy grid as a heatmap, and a plain-text dump for
terminals and logs.
"""

import logging
import plotly.graph_objects as go
import plotly.express as px
from typing import Optional
from pathlib import Path

from ..environment.container import Bin
from ..environment.item import PlacedItem

logger = logging.getLogger(__name__)


class PackingVisualizer:
    """
    Interactive 2D visualization for bin packing.

    Row 0 is drawn at the top, matching the grid coordinates.

    Example:
        >>> visualizer = PackingVisualizer()
        >>> visualizer.visualize_bin(packing_bin)
        >>> visualizer.save_html("packing_result.html")
    """

    def __init__(self, color_scheme: str = "Viridis"):
        """
        Initialize visualizer.

        Args:
            color_scheme: Plotly color scale used for items
        """
        self.color_scheme = color_scheme
        self.fig = None

    def visualize_bin(
        self,
        packing_bin: Bin,
        show_bin_bounds: bool = True,
        show_labels: bool = True,
        title: Optional[str] = None,
    ) -> go.Figure:
        """
        Draw every placed item of a bin.

        Args:
            packing_bin: Bin with placed items
            show_bin_bounds: Whether to outline the bin
            show_labels: Whether to print item ids inside the rectangles
            title: Plot title

        Returns:
            Plotly figure object
        """
        fig = go.Figure()

        n_items = packing_bin.num_placed
        colors = []
        if n_items > 0:
            colors = px.colors.sample_colorscale(
                self.color_scheme, [i / n_items for i in range(n_items)]
            )

        for idx, placed in enumerate(packing_bin.placed_items):
            self._add_rect(fig, placed, colors[idx], show_labels)

        if show_bin_bounds:
            fig.add_shape(
                type="rect",
                x0=0, y0=0, x1=packing_bin.width, y1=packing_bin.height,
                line=dict(color="black", width=2),
            )

        if title is None:
            hole = packing_bin.get_largest_hole()
            title = (f"2D Bin Packing (Utilization: {packing_bin.utilization:.1%}, "
                     f"largest hole {hole.width}x{hole.height})")

        fig.update_layout(
            title=title,
            xaxis=dict(title="X", range=[0, packing_bin.width], constrain="domain"),
            yaxis=dict(title="Y", range=[packing_bin.height, 0],
                       scaleanchor="x", scaleratio=1),
            showlegend=True,
            hovermode="closest",
        )

        self.fig = fig
        return fig

    def _add_rect(self, fig: go.Figure, placed: PlacedItem, color: str,
                  show_label: bool):
        """Add one placed item as a closed, filled polygon."""
        x0, y0, x1, y1 = placed.x0, placed.y0, placed.x1, placed.y1
        name = f"Item {placed.item_id}" + (" (rotated)" if placed.rotated else "")

        fig.add_trace(
            go.Scatter(
                x=[x0, x1, x1, x0, x0],
                y=[y0, y0, y1, y1, y0],
                mode="lines",
                fill="toself",
                fillcolor=color,
                line=dict(color="black", width=1),
                opacity=0.8,
                name=name,
                hovertext=f"{name}<br>({x0}, {y0}) - ({x1}, {y1})",
                hoverinfo="text",
            )
        )

        if show_label:
            fig.add_annotation(
                x=(x0 + x1) / 2,
                y=(y0 + y1) / 2,
                text=str(placed.item_id),
                showarrow=False,
            )

    def visualize_occupancy(self, packing_bin: Bin, title: Optional[str] = None) -> go.Figure:
        """
        Visualize the occupancy grid as a heatmap.

        Args:
            packing_bin: Bin to draw
            title: Plot title

        Returns:
            Plotly figure
        """
        cells = packing_bin.grid.as_array().astype(int)

        if title is None:
            title = f"Occupancy ({packing_bin.grid.occupied_count}/{cells.size} cells)"

        fig = go.Figure(
            data=go.Heatmap(
                z=cells,
                colorscale=[[0.0, "white"], [1.0, "steelblue"]],
                showscale=False,
            )
        )

        fig.update_layout(
            title=title,
            xaxis=dict(title="Grid X"),
            yaxis=dict(title="Grid Y", autorange="reversed"),
        )

        self.fig = fig
        return fig

    def save_html(self, filepath: str):
        """
        Save current figure as HTML.

        Args:
            filepath: Path to save HTML file
        """
        if self.fig is None:
            raise ValueError("No figure to save. Call visualize_bin first.")

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        self.fig.write_html(str(filepath))
        logger.info("Visualization saved to: %s", filepath)

    def show(self):
        """Display current figure."""
        if self.fig is None:
            raise ValueError("No figure to show. Call visualize_bin first.")

        self.fig.show()


def render_text(packing_bin: Bin, empty: str = " ") -> str:
    """
    Render the solution as a character grid, one line per row.

    Each cell shows the first character of the id of the item covering it,
    or `empty` when free. Every line ends with "|" so trailing free cells
    stay visible.

    Args:
        packing_bin: Bin to render
        empty: Character for free cells

    Returns:
        Multi-line string
    """
    lines = []
    for y in range(packing_bin.height):
        row = []
        for x in range(packing_bin.width):
            owner = next((p for p in packing_bin.placed_items if p.contains((x, y))), None)
            row.append(str(owner.item_id)[:1] if owner is not None else empty)
        lines.append("".join(row) + "|")
    return "\n".join(lines)

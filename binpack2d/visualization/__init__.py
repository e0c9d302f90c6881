"""
Visualization modules for 2D bin packing

Provides interactive plotly rendering and a plain-text dump of solutions.
"""

from .plotly_2d import PackingVisualizer, render_text

__all__ = ["PackingVisualizer", "render_text"]

# mini_fair/viz - Visualization Tools
"""
VIZ: Surface Visualization
==========================

- viz3d: interactive triangle-mesh viewer (Plotly)
"""

from .viz3d import plot_surface_3d, create_surface_figure

__all__ = ['plot_surface_3d', 'create_surface_figure']

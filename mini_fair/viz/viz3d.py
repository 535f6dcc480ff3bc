# mini_fair/viz/viz3d.py
"""
3D VISUALIZATION: Interactive Surface Viewer
============================================

PURPOSE:
--------
Create interactive 3D views of a SurfaceMesh using Plotly:
- Shaded triangles, optionally colored by height or by displacement
- Wireframe edges
- Locked vertices highlighted (red) against free ones (gray)
- Export to HTML for sharing
"""

import numpy as np
from typing import Literal, Optional
import plotly.graph_objects as go

from ..surface.model import SurfaceMesh


def create_surface_figure(
    mesh: SurfaceMesh,
    locked: Optional[np.ndarray] = None,
    reference: Optional[np.ndarray] = None,
    title: str = "Surface",
    color_by: Literal['none', 'height', 'displacement'] = 'none',
    show_edges: bool = True,
    show_vertices: bool = True,
) -> go.Figure:
    """
    Create a Plotly figure for a triangle mesh.

    Parameters:
    -----------
    mesh : SurfaceMesh
        The surface to draw

    locked : Optional[np.ndarray]
        Boolean mask of locked vertices (e.g. FairingResult.locked)

    reference : Optional[np.ndarray]
        (n, 3) positions before fairing, required for color_by='displacement'

    title : str
        Plot title

    color_by : str
        - 'none': uniform color
        - 'height': color by z
        - 'displacement': color by distance from `reference`

    show_edges : bool
        Whether to draw the wireframe

    show_vertices : bool
        Whether to draw vertex markers

    Returns:
    --------
    go.Figure
    """
    P = mesh.points
    F = mesh.faces
    fig = go.Figure()

    # =========================================================================
    # DRAW TRIANGLES
    # =========================================================================

    mesh_kwargs = dict(
        x=P[:, 0], y=P[:, 1], z=P[:, 2],
        i=F[:, 0], j=F[:, 1], k=F[:, 2],
        name='Surface',
        flatshading=True,
    )
    if color_by == 'height':
        mesh_kwargs.update(intensity=P[:, 2], colorscale='Viridis', colorbar=dict(title='z'))
    elif color_by == 'displacement':
        if reference is None:
            raise ValueError("color_by='displacement' needs reference positions")
        moved = np.linalg.norm(P - np.asarray(reference), axis=1)
        mesh_kwargs.update(intensity=moved, colorscale='Reds', colorbar=dict(title='|dx|'))
    elif color_by == 'none':
        mesh_kwargs.update(color='lightsteelblue', opacity=0.9)
    else:
        raise ValueError(f"Unknown color_by: {color_by}")

    fig.add_trace(go.Mesh3d(**mesh_kwargs))

    # =========================================================================
    # DRAW EDGES
    # =========================================================================

    if show_edges and len(F):
        edge_x, edge_y, edge_z = [], [], []
        for a, b in mesh.edges():
            # None breaks the line between segments
            edge_x.extend([P[a, 0], P[b, 0], None])
            edge_y.extend([P[a, 1], P[b, 1], None])
            edge_z.extend([P[a, 2], P[b, 2], None])

        fig.add_trace(go.Scatter3d(
            x=edge_x, y=edge_y, z=edge_z,
            mode='lines',
            line=dict(color='steelblue', width=2),
            name='Edges',
            hoverinfo='skip',
        ))

    # =========================================================================
    # DRAW VERTICES
    # =========================================================================

    if show_vertices and mesh.n_vertices:
        texts = [f"Vertex {v}: ({p[0]:.3f}, {p[1]:.3f}, {p[2]:.3f})" for v, p in enumerate(P)]

        if locked is not None:
            locked = np.asarray(locked, dtype=bool)
            colors = np.where(locked, 'red', 'darkgray').tolist()
            sizes = np.where(locked, 5, 3).tolist()
        else:
            colors = 'darkgray'
            sizes = 3

        fig.add_trace(go.Scatter3d(
            x=P[:, 0], y=P[:, 1], z=P[:, 2],
            mode='markers',
            marker=dict(size=sizes, color=colors, line=dict(width=1, color='black')),
            name='Vertices',
            text=texts,
            hoverinfo='text',
        ))

    # =========================================================================
    # LAYOUT
    # =========================================================================

    fig.update_layout(
        title=dict(text=title, font=dict(size=16)),
        scene=dict(
            xaxis=dict(title='X'),
            yaxis=dict(title='Y'),
            zaxis=dict(title='Z'),
            aspectmode='data',
            camera=dict(eye=dict(x=1.5, y=1.5, z=1.0)),
        ),
        showlegend=True,
        legend=dict(x=0.02, y=0.98),
        margin=dict(l=0, r=0, t=40, b=0),
    )

    return fig


def plot_surface_3d(
    mesh: SurfaceMesh,
    locked: Optional[np.ndarray] = None,
    title: str = "Surface",
    outpath: Optional[str] = None,
    show: bool = True,
    **kwargs
) -> go.Figure:
    """
    Create and optionally display/save a 3D surface visualization.

    Parameters:
    -----------
    mesh, locked, title:
        See create_surface_figure()

    outpath : Optional[str]
        If provided, save as HTML file

    show : bool
        Whether to display the figure (default: True)

    **kwargs:
        Additional arguments passed to create_surface_figure()

    Example:
    --------
    >>> result = fair(mesh, 2)
    >>> plot_surface_3d(mesh, locked=result.locked, color_by='height',
    ...                 outpath="artifacts/faired.html", show=False)
    """
    fig = create_surface_figure(mesh, locked=locked, title=title, **kwargs)

    if outpath:
        import os
        os.makedirs(os.path.dirname(outpath) if os.path.dirname(outpath) else '.', exist_ok=True)
        fig.write_html(outpath)
        print(f"3D visualization saved to: {outpath}")

    if show:
        fig.show()

    return fig

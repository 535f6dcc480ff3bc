# mini_fair/generative/grids.py
"""
GRID GENERATOR: Parametric Test Surfaces
========================================

PURPOSE:
--------
Generate triangle meshes from a handful of parameters, for demos, tests
and benchmarks of the fairing kernel:

1. A (nx+1) x (ny+1) grid of vertices over a rectangular footprint
2. A heightfield (flat, dome, ridge, saddle) lifting the grid into 3D
3. Two triangles per cell, split along alternating or uniform diagonals
4. A closed octahedron, for surfaces without boundary

Vertex handles follow the grid: vertex (ix, iy) has handle iy*(nx+1) + ix.

HEIGHTFIELDS:
-------------
- 'flat': z = 0 everywhere
- 'paraboloid': dome, `height` at the center and 0 at the corners
- 'ridge': peaked along the X centerline (like a tent)
- 'saddle': hyperbolic paraboloid from 0 to `height`
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Literal

from ..surface.model import SurfaceMesh


@dataclass
class GridParams:
    """
    Parameters defining a grid patch.

    Geometry:
    ---------
    width : float
        Footprint width in X direction
    depth : float
        Footprint depth in Y direction
    nx : int
        Number of cells in X direction
    ny : int
        Number of cells in Y direction
    height : float
        Peak height of the heightfield

    Shape:
    ------
    heightfield : str
        'flat', 'paraboloid', 'ridge' or 'saddle'

    Triangulation:
    --------------
    diagonals : str
        'alternating': cell diagonals flip in a checkerboard pattern
        'uniform': every cell split bottom-left to top-right
    """
    width: float = 1.0
    depth: float = 1.0
    nx: int = 8
    ny: int = 8
    height: float = 0.0

    heightfield: Literal['flat', 'paraboloid', 'ridge', 'saddle'] = 'flat'
    diagonals: Literal['alternating', 'uniform'] = 'alternating'


def _compute_heightfield(x: float, y: float, params: GridParams) -> float:
    """Z-coordinate at (x, y), in [0, height]."""
    # Normalize coordinates to [-1, 1] range centered on footprint
    xn = 2 * (x / params.width) - 1
    yn = 2 * (y / params.depth) - 1

    if params.heightfield == 'flat':
        return 0.0

    elif params.heightfield == 'paraboloid':
        # 1 at center, 0 at corners
        return params.height * (1 - (xn**2 + yn**2) / 2)

    elif params.heightfield == 'ridge':
        return params.height * (1 - abs(yn))

    elif params.heightfield == 'saddle':
        return params.height * (xn**2 - yn**2 + 1) / 2

    else:
        raise ValueError(f"Unknown heightfield: {params.heightfield}")


def grid_index(ix: int, iy: int, nx: int) -> int:
    """Convert grid indices to vertex handle."""
    return iy * (nx + 1) + ix


def generate_grid(params: GridParams) -> SurfaceMesh:
    """
    Generate a triangulated grid patch.

    Returns:
    --------
    SurfaceMesh
        (nx+1)*(ny+1) vertices and 2*nx*ny counter-clockwise triangles.
        The boundary is the outer rectangle.

    Example:
    --------
    >>> mesh = generate_grid(GridParams(nx=4, ny=4, heightfield='paraboloid', height=0.5))
    >>> mesh.n_vertices, mesh.n_faces
    (25, 32)
    """
    if params.nx < 1 or params.ny < 1:
        raise ValueError(f"Grid needs at least one cell per direction, got nx={params.nx}, ny={params.ny}")
    if params.diagonals not in ('alternating', 'uniform'):
        raise ValueError(f"Unknown diagonals: {params.diagonals}")

    nx, ny = params.nx, params.ny
    mesh = SurfaceMesh()

    for iy in range(ny + 1):
        for ix in range(nx + 1):
            x = ix * params.width / nx
            y = iy * params.depth / ny
            mesh.add_vertex([x, y, _compute_heightfield(x, y, params)])

    for iy in range(ny):
        for ix in range(nx):
            bl = grid_index(ix, iy, nx)
            br = grid_index(ix + 1, iy, nx)
            tl = grid_index(ix, iy + 1, nx)
            tr = grid_index(ix + 1, iy + 1, nx)

            if params.diagonals == 'uniform' or (ix + iy) % 2 == 0:
                # Diagonal: bottom-left to top-right
                mesh.add_triangle(bl, br, tr)
                mesh.add_triangle(bl, tr, tl)
            else:
                # Diagonal: bottom-right to top-left
                mesh.add_triangle(bl, br, tl)
                mesh.add_triangle(br, tr, tl)

    return mesh


def grid_boundary(params: GridParams) -> List[int]:
    """Handles of the vertices on the outer rectangle, sorted."""
    nx, ny = params.nx, params.ny
    edge_nodes = set()

    for ix in range(nx + 1):
        edge_nodes.add(grid_index(ix, 0, nx))
        edge_nodes.add(grid_index(ix, ny, nx))

    for iy in range(ny + 1):
        edge_nodes.add(grid_index(0, iy, nx))
        edge_nodes.add(grid_index(nx, iy, nx))

    return sorted(edge_nodes)


def generate_octahedron(radius: float = 1.0) -> SurfaceMesh:
    """Closed octahedron centered at the origin (6 vertices, 8 faces, no boundary)."""
    r = radius
    points = [
        [r, 0, 0], [-r, 0, 0],
        [0, r, 0], [0, -r, 0],
        [0, 0, r], [0, 0, -r],
    ]
    faces = [
        [0, 2, 4], [2, 1, 4], [1, 3, 4], [3, 0, 4],
        [2, 0, 5], [1, 2, 5], [3, 1, 5], [0, 3, 5],
    ]
    return SurfaceMesh(points, faces)


def bump(mesh: SurfaceMesh, vertices: Iterable[int], offset) -> None:
    """Displace the given vertices by `offset` (scalar along z, or a 3-vector), in place."""
    offset = np.asarray(offset, dtype=float)
    if offset.ndim == 0:
        offset = np.array([0.0, 0.0, float(offset)])
    idx = list(vertices)
    mesh.points[idx] += offset

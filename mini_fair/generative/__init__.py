# mini_fair/generative - Parametric Mesh Generators
"""
GENERATIVE: Parametric Test Surfaces
====================================

Turn a few parameters into a SurfaceMesh to fair.

Available Generators:
---------------------
- grids: rectangular grid patches with heightfields, closed octahedron

USAGE:
------
    from mini_fair.generative import generate_grid, GridParams, bump

    params = GridParams(nx=10, ny=10, heightfield='saddle', height=0.3)
    mesh = generate_grid(params)
    bump(mesh, [60], 0.5)
"""

from .grids import (
    GridParams,
    generate_grid,
    grid_index,
    grid_boundary,
    generate_octahedron,
    bump,
)

__all__ = [
    'GridParams', 'generate_grid', 'grid_index', 'grid_boundary',
    'generate_octahedron', 'bump',
]

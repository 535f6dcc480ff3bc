# mini_fair/surface - Triangle Mesh and Differential Operators
"""
SURFACE: MESH MODEL AND LAPLACE ASSEMBLY
========================================

This package provides the geometry side of fairing:
- SurfaceMesh: triangles, one-rings, boundary/isolation tests, vertex properties
- stiffness_matrix / mass_matrix: cotangent Laplacian pair (S, M)

USAGE:
------
    from mini_fair.surface import SurfaceMesh, stiffness_matrix, mass_matrix

    mesh = SurfaceMesh(points, faces)
    S = stiffness_matrix(mesh)          # symmetric, negative semi-definite
    M = mass_matrix(mesh)               # diagonal vertex areas
"""

from .model import SurfaceMesh, POINT_PROPERTY, select_vertices
from .laplace import (
    cotan_weights,
    stiffness_matrix,
    mass_matrix,
    inverse_mass,
    triangle_areas,
)

__all__ = [
    'SurfaceMesh', 'POINT_PROPERTY', 'select_vertices',
    'cotan_weights', 'stiffness_matrix', 'mass_matrix', 'inverse_mass', 'triangle_areas',
]

# mini_fair/surface/laplace.py
"""
LAPLACE: Cotangent Stiffness and Mass Matrices
==============================================

PURPOSE:
--------
Build the discrete Laplace-Beltrami operator of a triangle mesh as a pair:

    S : stiffness matrix (cotangent weights), symmetric, negative semi-definite
    M : mass matrix (per-vertex area), diagonal, non-negative

This is the surface analogue of element stiffness assembly: every triangle
contributes a small matrix, and the contributions are scatter-added into a
global sparse matrix.

COTANGENT WEIGHTS:
------------------
For an interior edge (i, j) with opposite angles alpha and beta:

    w_ij = 0.5 * (cot(alpha) + cot(beta))

A boundary edge has only one opposite angle. The stiffness matrix is then

    S_ij = w_ij            (i != j, edge exists)
    S_ii = -sum_j w_ij

so constant functions are in the null space (rows sum to zero).

MASS:
-----
    barycentric : one third of each incident triangle's area (default)
    voronoi     : mixed Voronoi areas (Meyer et al. 2003)

Both are lumped (diagonal) so M^-1 is trivial.
"""

import numpy as np
import scipy.sparse as sp
from typing import Tuple

from .model import SurfaceMesh

# cot(3 degrees); keeps weights finite on needle triangles
COT_BOUND = 19.1


def _cotangent(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Row-wise cot of the angle between vectors u and v, bounded to +-COT_BOUND."""
    cross = np.linalg.norm(np.cross(u, v), axis=1)
    dot = np.einsum("ij,ij->i", u, v)
    cot = np.zeros_like(dot)
    ok = cross > np.finfo(float).tiny
    cot[ok] = np.clip(dot[ok] / cross[ok], -COT_BOUND, COT_BOUND)
    return cot


def _corner_cotangents(points: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    Cotangent at every triangle corner.

    Returns an (m, 3) array whose column c is the cotangent of the angle at
    vertex faces[:, c].
    """
    cots = np.zeros(faces.shape, dtype=float)
    for c in range(3):
        p = points[faces[:, c]]
        q = points[faces[:, (c + 1) % 3]]
        r = points[faces[:, (c + 2) % 3]]
        cots[:, c] = _cotangent(q - p, r - p)
    return cots


def triangle_areas(mesh: SurfaceMesh) -> np.ndarray:
    """Area of every face, shape (m,)."""
    faces = mesh.faces
    P = mesh.points
    if len(faces) == 0:
        return np.zeros(0)
    e1 = P[faces[:, 1]] - P[faces[:, 0]]
    e2 = P[faces[:, 2]] - P[faces[:, 0]]
    return 0.5 * np.linalg.norm(np.cross(e1, e2), axis=1)


def cotan_weights(mesh: SurfaceMesh, clamp: bool = False) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compute the cotangent weight of every undirected edge.

    Parameters:
    -----------
    mesh : SurfaceMesh
        The surface (only read, never modified)
    clamp : bool
        If True, negative edge weights (edges opposite obtuse angles whose
        cotangents sum below zero) are clamped to zero

    Returns:
    --------
    i, j : np.ndarray
        Edge endpoints with i < j
    w : np.ndarray
        Edge weights 0.5 * (cot(alpha) + cot(beta))
    """
    n = mesh.n_vertices
    faces = mesh.faces
    if len(faces) == 0:
        empty = np.zeros(0, dtype=int)
        return empty, empty, np.zeros(0)

    cots = _corner_cotangents(mesh.points, faces)

    # corner c is opposite edge (c+1, c+2)
    rows, cols, vals = [], [], []
    for c in range(3):
        a = faces[:, (c + 1) % 3]
        b = faces[:, (c + 2) % 3]
        rows.append(np.minimum(a, b))
        cols.append(np.maximum(a, b))
        vals.append(0.5 * cots[:, c])

    W = sp.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(n, n),
    ).tocsr().tocoo()

    w = W.data.copy()
    if clamp:
        w = np.maximum(w, 0.0)
    return W.row.astype(int), W.col.astype(int), w


def mass_matrix(mesh: SurfaceMesh, voronoi: bool = False) -> sp.dia_matrix:
    """
    Build the lumped (diagonal) mass matrix.

    Parameters:
    -----------
    mesh : SurfaceMesh
        The surface
    voronoi : bool
        False: barycentric areas (one third of every incident triangle)
        True: mixed Voronoi areas, falling back to area/2 or area/4 on
        obtuse triangles

    Returns:
    --------
    sp.dia_matrix
        Diagonal (n, n) matrix. Isolated vertices get zero mass.
    """
    n = mesh.n_vertices
    faces = mesh.faces
    mass = np.zeros(n, dtype=float)
    if len(faces) == 0:
        return sp.diags(mass)

    area = triangle_areas(mesh)

    if not voronoi:
        for c in range(3):
            np.add.at(mass, faces[:, c], area / 3.0)
        return sp.diags(mass)

    P = mesh.points
    cots = _corner_cotangents(P, faces)
    obtuse = cots < 0.0
    any_obtuse = obtuse.any(axis=1)

    for c in range(3):
        c1, c2 = (c + 1) % 3, (c + 2) % 3
        p = P[faces[:, c]]
        len1 = np.sum((P[faces[:, c1]] - p) ** 2, axis=1)  # edge (c, c1), opposite c2
        len2 = np.sum((P[faces[:, c2]] - p) ** 2, axis=1)  # edge (c, c2), opposite c1
        share = (len1 * cots[:, c2] + len2 * cots[:, c1]) / 8.0
        share = np.where(any_obtuse, np.where(obtuse[:, c], area / 2.0, area / 4.0), share)
        np.add.at(mass, faces[:, c], share)

    return sp.diags(mass)


def inverse_mass(M) -> sp.dia_matrix:
    """
    Invert a diagonal mass matrix.

    Zero entries stay zero. They only occur for vertices without incident
    faces, whose stiffness rows and columns are empty.
    """
    diag = np.asarray(M.diagonal(), dtype=float)
    inv = np.zeros_like(diag)
    nonzero = diag != 0.0
    inv[nonzero] = 1.0 / diag[nonzero]
    return sp.diags(inv)


def stiffness_matrix(mesh: SurfaceMesh, clamp: bool = False, two_step: bool = True) -> sp.csr_matrix:
    """
    Assemble the cotangent stiffness matrix S.

    Parameters:
    -----------
    mesh : SurfaceMesh
        The surface (geometry is read, not modified)
    clamp : bool
        Clamp negative cotangent weights to zero (see cotan_weights)
    two_step : bool
        True: return the raw stiffness S, meant to be paired with a separate
        mass matrix (normalization happens later, e.g. S M^-1 S).
        False: return the mass-normalized Laplace-Beltrami operator M^-1 S.

    Returns:
    --------
    sp.csr_matrix
        (n, n) sparse matrix. For two_step=True it is symmetric and negative
        semi-definite with zero row sums.
    """
    n = mesh.n_vertices
    i, j, w = cotan_weights(mesh, clamp=clamp)

    rows = np.concatenate([i, j, i, j])
    cols = np.concatenate([j, i, i, j])
    data = np.concatenate([w, w, -w, -w])
    S = sp.coo_matrix((data, (rows, cols)), shape=(n, n)).tocsr()

    if not two_step:
        S = (inverse_mass(mass_matrix(mesh)) @ S).tocsr()
    return S

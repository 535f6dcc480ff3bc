# mini_fair/kernel/operators.py
"""
OPERATORS: k-th Order Fairing Operator
======================================

The k-th order fairing energy is built from the base stiffness S and the
lumped mass M by repeated mass-normalized application:

    A_1     = S
    A_{i+1} = S M^-1 A_i

    k = 1  ->  S              (membrane / area)
    k = 2  ->  S M^-1 S       (thin plate / curvature)
    k = 3  ->  S M^-1 S M^-1 S

A is symmetric because M is diagonal. Its sign alternates with k: negative
semi-definite for odd k, positive semi-definite for even k.
"""

import logging
from typing import Tuple

import scipy.sparse as sp

from ..surface.model import SurfaceMesh
from ..surface.laplace import stiffness_matrix, mass_matrix, inverse_mass

_LOGGER = logging.getLogger(__name__)


def compose_operator(S: sp.spmatrix, M: sp.spmatrix, k: int) -> sp.csr_matrix:
    """
    Compose the k-th order operator from stiffness S and diagonal mass M.

    Parameters:
    -----------
    S : sparse (n, n)
        Base stiffness matrix
    M : sparse diagonal (n, n)
        Mass matrix; zero entries are treated as having zero inverse
    k : int
        Order, k >= 1

    Returns:
    --------
    sp.csr_matrix
        A_k as defined above
    """
    if k < 1:
        raise ValueError(f"Operator order must be >= 1, got {k}")

    S = sp.csr_matrix(S)
    invM = inverse_mass(M)
    A = S
    for _ in range(1, k):
        A = (S @ (invM @ A)).tocsr()
    return A


def build_fairing_system(
    mesh: SurfaceMesh,
    k: int,
    clamp: bool = False,
    two_step: bool = True,
    voronoi: bool = False,
) -> Tuple[sp.csr_matrix, sp.dia_matrix]:
    """
    Assemble (A, M) for k-th order fairing of `mesh`.

    Reads positions and connectivity only; the mesh is not modified.

    With two_step=False the stiffness is normalized once, L = M^-1 S, and
    A_k = L^k. Its rows are the rows of the two-step operator scaled by
    M^-1, so both modes share the same minimizer. A_k is not symmetric in
    this mode.
    """
    S = stiffness_matrix(mesh, clamp=clamp)
    M = mass_matrix(mesh, voronoi=voronoi)
    if two_step:
        A = compose_operator(S, M, k)
    else:
        L = (inverse_mass(M) @ S).tocsr()
        A = compose_operator(L, sp.identity(mesh.n_vertices, format="dia"), k)
    _LOGGER.debug("assembled order-%d operator: n=%d, nnz=%d", k, A.shape[0], A.nnz)
    return A, M

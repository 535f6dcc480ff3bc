# energies, residuals, displacement after a fairing run

import numpy as np
from typing import Optional

from .surface.model import SurfaceMesh
from .surface.laplace import stiffness_matrix, mass_matrix
from .kernel.operators import compose_operator


def dirichlet_energy(mesh: SurfaceMesh) -> float:
    """
    Membrane energy of the current positions.

    E = -1/2 trace(X^T S X) = 1/2 sum_edges w_ij |x_i - x_j|^2

    With S assembled from the same positions this is the total surface
    area (each triangle contributes 1/4 sum cot_k |e_k|^2 = its area), up
    to the cotangent bound on needle triangles.
    """
    S = stiffness_matrix(mesh)
    X = mesh.points
    return float(-0.5 * np.sum(X * (S @ X)))


def fairing_energy(mesh: SurfaceMesh, k: int) -> float:
    """
    k-th order fairing energy 1/2 |trace(X^T A_k X)| of the current positions.

    The operator is assembled from the geometry at evaluation time, so this
    is a diagnostic for comparing surfaces, not the exact quantity a
    fairing call minimizes.
    """
    A = compose_operator(stiffness_matrix(mesh), mass_matrix(mesh), k)
    X = mesh.points
    return float(0.5 * abs(np.sum(X * (A @ X))))


def laplace_residual(
    mesh: SurfaceMesh,
    locked: np.ndarray,
    S=None,
) -> float:
    """
    Largest |(S X)_i| over free vertices i.

    After fair(mesh, 1) this is ~0 when S is the stiffness matrix assembled
    from the geometry *before* fairing: each free vertex is the cotangent
    weighted average of its neighbors.

    Parameters:
    -----------
    mesh : SurfaceMesh
        Surface holding the positions X
    locked : np.ndarray
        Boolean locked mask (rows excluded from the check)
    S : sparse, optional
        Stiffness matrix; assembled from the current mesh if omitted
    """
    if S is None:
        S = stiffness_matrix(mesh)
    free = ~np.asarray(locked, dtype=bool)
    if not np.any(free):
        return 0.0
    R = S @ mesh.points
    return float(np.max(np.linalg.norm(R[free], axis=1)))


def displacement(before: np.ndarray, after: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
    """Per-vertex distance moved, optionally restricted to `mask`."""
    d = np.linalg.norm(np.asarray(after) - np.asarray(before), axis=1)
    if mask is not None:
        d = d[np.asarray(mask, dtype=bool)]
    return d

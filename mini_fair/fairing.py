# mini_fair/fairing.py
"""
FAIRING: Public Entry Points
============================

    minimize_area(mesh)        k = 1, membrane energy
    minimize_curvature(mesh)   k = 2, thin-plate energy
    fair(mesh, k)              general k-th order energy

One call runs the whole pipeline:

    CLASSIFY   locked mask from selection, boundary rings, isolated vertices
    ASSEMBLE   A = S (M^-1 S)^(k-1), B = M·0
    SOLVE      A·X = B per coordinate, locked rows pinned to current positions
    WRITE      solved rows copied back to "v:point"

Positions are only written after a successful solve, so a failure in any
stage leaves the mesh exactly as it was. The locked mask is local to the
call and never stored on the mesh.
"""

import logging
import numbers
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import CONFIG, FairingConfig
from .surface.model import SurfaceMesh
from .kernel.constraints import classify_locked, require_locked
from .kernel.operators import build_fairing_system
from .kernel.solve import get_solver

_LOGGER = logging.getLogger(__name__)


class InvalidOrderError(ValueError):
    """Raised when the fairing order k is not a positive integer."""
    pass


@dataclass
class FairingResult:
    """
    Summary of a finished fairing call.

    Attributes:
    -----------
    order : int
        The k that was used
    locked : np.ndarray
        Boolean mask of the vertices held fixed
    solver : str
        Name of the solver backend
    max_displacement : float
        Largest distance any vertex moved
    """
    order: int
    locked: np.ndarray
    solver: str
    max_displacement: float

    @property
    def n_locked(self) -> int:
        return int(self.locked.sum())

    @property
    def n_free(self) -> int:
        return int((~self.locked).sum())


def _check_order(k) -> int:
    if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1:
        raise InvalidOrderError(f"Fairing order k must be a positive integer, got {k!r}")
    return int(k)


def _write_positions(mesh: SurfaceMesh, X: np.ndarray) -> None:
    mesh.points[:] = X


def fair(mesh: SurfaceMesh, k: int = 2, *, solver=None,
         config: Optional[FairingConfig] = None) -> FairingResult:
    """
    Reposition the free vertices of `mesh` to minimize the k-th order energy.

    Parameters:
    -----------
    mesh : SurfaceMesh
        Surface to fair; positions are updated in place on success
    k : int
        Energy order (1 = area, 2 = curvature, >2 = higher order)
    solver : str or ConstrainedSolver, optional
        'direct', 'cg', or a solver instance; defaults to config.solver
    config : FairingConfig, optional
        Overrides the global CONFIG

    Returns:
    --------
    FairingResult

    Raises:
    -------
    InvalidOrderError
        If k is not a positive integer
    MissingConstraintsError
        If no vertex is locked (closed surface without selection)
    SingularSystemError
        If the reduced system cannot be solved; the mesh is unchanged
    ConvergenceError
        If an iterative backend fails to converge; the mesh is unchanged
    ValueError
        If the CG backend is given a non-symmetric operator (two_step=False)
    """
    k = _check_order(k)
    config = config or CONFIG
    backend = get_solver(solver, config)

    selection = mesh.get_vertex_property(config.selection_property)
    locked = classify_locked(mesh, k, selection, max_rings=config.max_boundary_rings)
    require_locked(locked)

    n = mesh.n_vertices
    X = mesh.points.copy()
    B = np.zeros((n, 3))

    A, M = build_fairing_system(
        mesh, k,
        clamp=config.clamp_weights,
        two_step=config.two_step,
        voronoi=config.voronoi_mass,
    )
    B = M @ B

    X_new = backend.solve(A, B, locked, X)
    _write_positions(mesh, X_new)

    moved = float(np.max(np.linalg.norm(X_new - X, axis=1))) if n else 0.0
    _LOGGER.debug("fair(k=%d): %d free, %d locked, max displacement %.3e",
                  k, int((~locked).sum()), int(locked.sum()), moved)

    return FairingResult(order=k, locked=locked, solver=backend.name, max_displacement=moved)


def minimize_area(mesh: SurfaceMesh, **kwargs) -> FairingResult:
    """Membrane fairing, equivalent to fair(mesh, 1)."""
    return fair(mesh, 1, **kwargs)


def minimize_curvature(mesh: SurfaceMesh, **kwargs) -> FairingResult:
    """Thin-plate fairing, equivalent to fair(mesh, 2)."""
    return fair(mesh, 2, **kwargs)

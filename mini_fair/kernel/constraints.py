# mini_fair/kernel/constraints.py
"""
CONSTRAINTS: Which Vertices Stay Put
====================================

PURPOSE:
--------
Fairing moves "free" vertices and keeps "locked" ones fixed. The locked
vertices are the boundary conditions: without at least one of them the
operator keeps its translational null space and cannot be solved.

LOCKING RULES:
--------------
1. A selection only counts if it exists and at least one vertex is selected.
2. Boundary vertices are locked. A k-th order energy needs k boundary rows,
   so for k >= 2 the 1-ring of the boundary is locked and for k >= 3 the
   2-ring too. Expansion stops at `max_rings` rings (default 2) however
   large k gets.
3. Unselected vertices are locked when the selection counts.
4. Isolated vertices are always locked; they have no energy contribution.
"""

import logging
from typing import Optional

import numpy as np

from ..surface.model import SurfaceMesh

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_RINGS = 2


class MissingConstraintsError(ValueError):
    """Raised when no vertex is locked, so the fairing system is under-constrained."""
    pass


def has_selection(selection: Optional[np.ndarray]) -> bool:
    """True if a selection property exists and selects at least one vertex."""
    return selection is not None and bool(np.any(selection))


def boundary_rings(mesh: SurfaceMesh, rings: int) -> np.ndarray:
    """
    Mask of boundary vertices plus their `rings`-ring neighborhood.

    rings=0 gives the boundary itself, rings=1 adds every one-ring neighbor
    of a boundary vertex, and so on.
    """
    locked = mesh.boundary_mask()
    frontier = np.flatnonzero(locked)

    for _ in range(rings):
        reached = set()
        for v in frontier:
            reached.update(mesh.neighbors(v))
        reached.difference_update(np.flatnonzero(locked).tolist())
        if not reached:
            break
        frontier = np.fromiter(reached, dtype=int)
        locked[frontier] = True

    return locked


def classify_locked(
    mesh: SurfaceMesh,
    k: int,
    selection: Optional[np.ndarray] = None,
    max_rings: int = DEFAULT_MAX_RINGS,
) -> np.ndarray:
    """
    Decide, per vertex, whether it is locked during k-th order fairing.

    Parameters:
    -----------
    mesh : SurfaceMesh
        The surface
    k : int
        Fairing order (1 = area, 2 = curvature, ...)
    selection : np.ndarray, optional
        Boolean per-vertex selection. None or all-False means "no selection".
    max_rings : int
        Cap on the number of boundary rings locked for large k

    Returns:
    --------
    np.ndarray
        Boolean mask of length n_vertices, True = locked
    """
    if max_rings < 0:
        raise ValueError(f"max_rings must be non-negative, got {max_rings}")

    rings = min(max(k - 1, 0), max_rings)
    locked = boundary_rings(mesh, rings)

    if has_selection(selection):
        selected = np.asarray(selection, dtype=bool)
        if selected.shape != (mesh.n_vertices,):
            raise ValueError(
                f"Selection has shape {selected.shape}, expected ({mesh.n_vertices},)"
            )
        locked |= ~selected

    locked |= mesh.isolated_mask()

    _LOGGER.debug(
        "classified %d/%d vertices as locked (k=%d, rings=%d, selection=%s)",
        int(locked.sum()), mesh.n_vertices, k, rings, has_selection(selection),
    )
    return locked


def require_locked(locked: np.ndarray) -> None:
    """
    Check that at least one vertex is locked.

    Raises:
    -------
    MissingConstraintsError
        If the mask is empty or all False
    """
    if not np.any(locked):
        raise MissingConstraintsError(
            "fair: Missing boundary constraints. Lock vertices by selecting "
            "a region or use a mesh with a boundary."
        )

# mini_fair/kernel/solve.py
"""Constrained sparse solve: locked rows keep their values, free rows satisfy A·X = B."""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

import numpy as np
import scipy.sparse as sp
from scipy.sparse.csgraph import connected_components
from scipy.sparse.linalg import splu, cg

from ..config import CONFIG, FairingConfig

_LOGGER = logging.getLogger(__name__)


class SingularSystemError(RuntimeError):
    """Raised when the reduced (free-row) system cannot be solved."""
    pass


class ConvergenceError(RuntimeError):
    """Raised when an iterative solution does not converge."""
    pass


def check_pinned(A: sp.spmatrix, locked: np.ndarray) -> None:
    """
    Check that every free row is coupled, through A, to some locked row.

    A connected piece of the operator graph with no locked vertex keeps its
    translational null space after elimination, so the reduced system is
    singular.

    Raises:
    -------
    SingularSystemError
        If some free vertices are not connected to any locked vertex
    """
    G = abs(sp.csr_matrix(A))
    G.eliminate_zeros()
    n_comp, labels = connected_components(G, directed=False)

    pinned = np.zeros(n_comp, dtype=bool)
    pinned[labels[locked]] = True
    floating = ~locked & ~pinned[labels]

    if np.any(floating):
        n_floating = int(floating.sum())
        n_pieces = len(np.unique(labels[floating]))
        raise SingularSystemError(
            f"Singular system: {n_floating} free vertices in {n_pieces} component(s) "
            f"are not connected to any locked vertex. Check constraints."
        )


class ConstrainedSolver(ABC):
    """
    Solve A·X = B where locked rows of X are pinned to their input values.

    Locked unknowns are eliminated: with f = free rows and l = locked rows,

        A_ff X_f = B_f - A_fl X_l

    and the reduced system is handed to `_solve_reduced`. Subclasses only
    choose how to solve that system; partitioning, validation and the
    null-space check are shared.
    """

    name = "abstract"

    def solve(self, A, B, locked, X) -> np.ndarray:
        """
        Parameters:
        -----------
        A : sparse (n, n)
            System operator
        B : np.ndarray (n, d)
            Right-hand side
        locked : np.ndarray (n,) bool
            True where the row of X is fixed
        X : np.ndarray (n, d)
            Constraint values for locked rows and initial guess for free rows

        Returns:
        --------
        np.ndarray
            New (n, d) array; locked rows are copied from X unchanged
        """
        A = sp.csr_matrix(A)
        B = np.asarray(B, dtype=float)
        X0 = np.array(X, dtype=float)
        locked = np.asarray(locked, dtype=bool)

        n = A.shape[0]
        if A.shape != (n, n):
            raise ValueError(f"Operator must be square, got shape {A.shape}")
        if X0.ndim != 2 or X0.shape[0] != n:
            raise ValueError(f"X has shape {X0.shape}, expected ({n}, d)")
        if B.shape != X0.shape:
            raise ValueError(f"B has shape {B.shape}, expected {X0.shape}")
        if locked.shape != (n,):
            raise ValueError(f"Locked mask has shape {locked.shape}, expected ({n},)")

        free = np.flatnonzero(~locked)
        fixed = np.flatnonzero(locked)
        if free.size == 0:
            return X0

        check_pinned(A, locked)

        A_free_rows = A[free]
        A_ff = A_free_rows[:, free]
        A_fl = A_free_rows[:, fixed]
        rhs = B[free] - A_fl @ X0[fixed]

        _LOGGER.debug("%s solve: %d free, %d locked, %d columns",
                      self.name, free.size, fixed.size, X0.shape[1])

        X_free = self._solve_reduced(A_ff, np.ascontiguousarray(rhs), X0[free])

        if not np.all(np.isfinite(X_free)):
            raise SingularSystemError("Singular system: solution contains non-finite values.")

        result = X0.copy()
        result[free] = X_free
        return result

    @abstractmethod
    def _solve_reduced(self, A_ff: sp.csr_matrix, rhs: np.ndarray, x0: np.ndarray) -> np.ndarray:
        ...


class DirectSolver(ConstrainedSolver):
    """Sparse LU (SuperLU) factorization, computed once and reused for every column."""

    name = "direct"

    def _solve_reduced(self, A_ff, rhs, x0):
        try:
            lu = splu(sp.csc_matrix(A_ff))
        except RuntimeError as exc:
            raise SingularSystemError(f"Singular system: factorization failed ({exc}).") from exc
        return lu.solve(rhs)


class ConjugateGradientSolver(ConstrainedSolver):
    """
    Jacobi-preconditioned conjugate gradients, one column at a time.

    The fairing operator is negative definite for odd k, so the reduced
    system is negated when its diagonal is negative. CG requires a symmetric
    operator; a non-symmetric one (e.g. from two_step=False) raises
    ValueError and should go to the direct solver instead.
    """

    name = "cg"
    symmetry_tol = 1e-8

    def __init__(self, rtol: float = 1e-10, maxiter: Optional[int] = None):
        self.rtol = rtol
        self.maxiter = maxiter

    def _solve_reduced(self, A_ff, rhs, x0):
        asym = abs(A_ff - A_ff.T).max()
        scale = abs(A_ff).max()
        if asym > self.symmetry_tol * scale:
            raise ValueError(
                f"CG needs a symmetric operator (max asymmetry {asym:.2e}); "
                f"use the direct solver for two_step=False."
            )

        sign = -1.0 if A_ff.diagonal().sum() < 0 else 1.0
        K = (sign * A_ff).tocsr()
        b = sign * rhs

        diag = K.diagonal()
        if np.any(diag <= 0):
            raise SingularSystemError(
                "Singular system: reduced operator has non-positive diagonal entries."
            )
        precond = sp.diags(1.0 / diag)

        out = np.empty_like(b)
        for col in range(b.shape[1]):
            x, info = cg(K, b[:, col], x0=x0[:, col], rtol=self.rtol,
                         maxiter=self.maxiter, M=precond)
            if info > 0:
                raise ConvergenceError(
                    f"CG did not converge for column {col} after {info} iterations "
                    f"(rtol={self.rtol:.1e})."
                )
            if info < 0:
                raise SingularSystemError(f"Singular system: CG breakdown (info={info}).")
            out[:, col] = x
        return out


def get_solver(
    solver: Union[str, ConstrainedSolver, None] = None,
    config: Optional[FairingConfig] = None,
) -> ConstrainedSolver:
    """Resolve a solver name ('direct', 'cg') or instance; None uses the config default."""
    if isinstance(solver, ConstrainedSolver):
        return solver
    config = config or CONFIG
    name = solver or config.solver

    if name == 'direct':
        return DirectSolver()
    elif name == 'cg':
        return ConjugateGradientSolver(rtol=config.cg_rtol, maxiter=config.cg_maxiter)
    else:
        raise ValueError(f"Unknown solver: {name}")


def solve_constrained(A, B, locked, X, solver=None) -> np.ndarray:
    """Solve A·X = B with locked rows of X held fixed (see ConstrainedSolver.solve)."""
    return get_solver(solver).solve(A, B, locked, X)

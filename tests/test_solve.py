"""
CONSTRAINED SOLVE TESTS
=======================

The solver only sees a matrix, a locked mask and a dense array, so most
checks here use a path graph (a 1D Laplacian) where the answer is known:
with both ends pinned, the harmonic solution interpolates linearly.

    0 ─── 1 ─── 2 ─── 3 ─── 4
    ●                       ●     (● locked)
"""

import numpy as np
import pytest
import scipy.sparse as sp

from mini_fair.kernel.solve import (
    DirectSolver,
    ConjugateGradientSolver,
    SingularSystemError,
    ConvergenceError,
    check_pinned,
    get_solver,
    solve_constrained,
)
from mini_fair.config import FairingConfig


def path_laplacian(n: int) -> sp.csr_matrix:
    """Graph Laplacian of a path, negative semi-definite like the stiffness matrix."""
    main = -2.0 * np.ones(n)
    main[0] = main[-1] = -1.0
    off = np.ones(n - 1)
    return sp.diags([off, main, off], [-1, 0, 1]).tocsr()


@pytest.fixture(params=[DirectSolver(), ConjugateGradientSolver(rtol=1e-12)], ids=['direct', 'cg'])
def solver(request):
    return request.param


class TestPathGraph:

    def test_linear_interpolation(self, solver):
        A = path_laplacian(5)
        locked = np.array([True, False, False, False, True])
        X = np.array([[0.0, 10.0], [7.0, 7.0], [-3.0, 0.0], [1.0, 1.0], [4.0, 2.0]])
        B = np.zeros_like(X)

        result = solver.solve(A, B, locked, X)

        np.testing.assert_allclose(result[:, 0], [0, 1, 2, 3, 4], atol=1e-9)
        np.testing.assert_allclose(result[:, 1], [10, 8, 6, 4, 2], atol=1e-9)

    def test_locked_rows_are_exact_and_input_untouched(self, solver):
        A = path_laplacian(6)
        locked = np.array([True, False, True, False, False, True])
        X = np.random.default_rng(3).normal(size=(6, 3))
        X_before = X.copy()

        result = solver.solve(A, np.zeros_like(X), locked, X)

        np.testing.assert_array_equal(result[locked], X_before[locked])
        np.testing.assert_array_equal(X, X_before)

    def test_nothing_free_returns_copy(self, solver):
        A = path_laplacian(3)
        X = np.arange(9.0).reshape(3, 3)
        result = solver.solve(A, np.zeros_like(X), np.ones(3, dtype=bool), X)
        np.testing.assert_array_equal(result, X)
        assert result is not X

    def test_nonzero_rhs(self, solver):
        # -u'' = 1 on a path with u = 0 at both ends
        A = -path_laplacian(5)
        locked = np.array([True, False, False, False, True])
        X = np.zeros((5, 1))
        B = np.ones((5, 1))
        result = solver.solve(A, B, locked, X)
        np.testing.assert_allclose(result[:, 0], [0.0, 1.5, 2.0, 1.5, 0.0], atol=1e-9)


class TestValidation:

    def test_shape_mismatches(self):
        A = path_laplacian(4)
        X = np.zeros((4, 3))
        locked = np.array([True, False, False, True])
        solver = DirectSolver()
        with pytest.raises(ValueError):
            solver.solve(A, np.zeros((3, 3)), locked, X)
        with pytest.raises(ValueError):
            solver.solve(A, np.zeros((4, 3)), locked[:3], X)
        with pytest.raises(ValueError):
            solver.solve(A, np.zeros((5, 3)), locked, np.zeros((5, 3)))

    def test_unknown_solver_name(self):
        with pytest.raises(ValueError, match="Unknown solver"):
            get_solver("qr")

    def test_get_solver_from_config(self):
        solver = get_solver(None, FairingConfig(solver='cg', cg_rtol=1e-6, cg_maxiter=50))
        assert isinstance(solver, ConjugateGradientSolver)
        assert solver.rtol == 1e-6
        assert solver.maxiter == 50
        assert isinstance(get_solver('direct'), DirectSolver)

    def test_instance_passes_through(self):
        solver = ConjugateGradientSolver()
        assert get_solver(solver) is solver


class TestSingular:

    def test_floating_component_detected(self, solver):
        # two disjoint paths, only the first one has a locked vertex
        A = sp.block_diag([path_laplacian(3), path_laplacian(3)]).tocsr()
        locked = np.array([True, False, False, False, False, False])
        X = np.zeros((6, 3))
        with pytest.raises(SingularSystemError, match="not connected"):
            solver.solve(A, np.zeros_like(X), locked, X)

    def test_check_pinned_accepts_pinned_components(self):
        A = sp.block_diag([path_laplacian(3), path_laplacian(2)]).tocsr()
        check_pinned(A, np.array([False, True, False, True, False]))

    def test_exactly_singular_factorization(self):
        A = sp.csr_matrix(np.ones((3, 3)))
        locked = np.array([True, False, False])
        X = np.zeros((3, 3))
        with pytest.raises(SingularSystemError):
            DirectSolver().solve(A, np.zeros_like(X), locked, X)

    def test_singular_error_is_runtime_error(self):
        assert issubclass(SingularSystemError, RuntimeError)


def test_cg_reports_non_convergence():
    n = 60
    A = path_laplacian(n)
    locked = np.zeros(n, dtype=bool)
    locked[[0, -1]] = True
    X = np.zeros((n, 1))
    X[-1, 0] = 1.0
    solver = ConjugateGradientSolver(rtol=1e-14, maxiter=1)
    with pytest.raises(ConvergenceError):
        solver.solve(A, np.zeros_like(X), locked, X)


def test_solve_constrained_convenience():
    A = path_laplacian(3)
    X = np.array([[0.0], [5.0], [2.0]])
    locked = np.array([True, False, True])
    result = solve_constrained(A, np.zeros_like(X), locked, X)
    np.testing.assert_allclose(result[:, 0], [0.0, 1.0, 2.0])


def test_cg_rejects_non_symmetric_operator():
    n = 6
    scale = sp.diags(np.linspace(1.0, 3.0, n))
    A = (scale @ path_laplacian(n)).tocsr()
    locked = np.zeros(n, dtype=bool)
    locked[[0, -1]] = True
    X = np.zeros((n, 1))
    X[-1, 0] = 1.0

    with pytest.raises(ValueError, match="symmetric"):
        ConjugateGradientSolver().solve(A, np.zeros_like(X), locked, X)

    # row scaling does not change the harmonic solution
    result = DirectSolver().solve(A, np.zeros_like(X), locked, X)
    np.testing.assert_allclose(result[:, 0], np.linspace(0.0, 1.0, n), atol=1e-12)

# mini_fair/kernel - Mesh-agnostic fairing core
"""
KERNEL: CONSTRAINTS, OPERATORS, CONSTRAINED SOLVE
=================================================

This package contains the three stages every fairing run goes through:

    constraints.py   locked/free classification (selection, boundary rings, isolation)
    operators.py     k-th order operator A = S (M^-1 S)^(k-1)
    solve.py         A·X = B with locked rows pinned, pluggable backends

The solve stage does not know about meshes at all: it sees a sparse matrix,
a boolean mask and a dense (n, 3) array, so it works for any operator.
"""

from .constraints import classify_locked, require_locked, MissingConstraintsError
from .operators import compose_operator, build_fairing_system
from .solve import (
    ConstrainedSolver,
    DirectSolver,
    ConjugateGradientSolver,
    SingularSystemError,
    ConvergenceError,
    get_solver,
    solve_constrained,
)

__all__ = [
    'classify_locked', 'require_locked', 'MissingConstraintsError',
    'compose_operator', 'build_fairing_system',
    'ConstrainedSolver', 'DirectSolver', 'ConjugateGradientSolver',
    'SingularSystemError', 'ConvergenceError', 'get_solver', 'solve_constrained',
]

# mini_fair - Constrained Surface Fairing
"""
MINI-FAIR: Smooth Triangle Meshes Under Fixed-Vertex Constraints
================================================================

This package provides:
- Surface fairing of order k (area, curvature, higher order)
- Cotangent stiffness / lumped mass assembly
- Pluggable constrained sparse solvers (direct LU, conjugate gradients)
- Parametric test surfaces and a Plotly viewer

ARCHITECTURE:
-------------
    surface/        SurfaceMesh model, cotangent Laplacian (S, M)
    kernel/         Mesh-agnostic core (locked mask, operator, constrained solve)
    fairing.py      fair / minimize_area / minimize_curvature
    post.py         Energies and residual diagnostics
    config.py       FairingConfig defaults
    generative/     Grid patches and closed test meshes
    viz/            Visualization
"""

from .surface import SurfaceMesh, select_vertices
from .kernel import (
    MissingConstraintsError,
    SingularSystemError,
    ConvergenceError,
    ConstrainedSolver,
    DirectSolver,
    ConjugateGradientSolver,
)
from .fairing import fair, minimize_area, minimize_curvature, FairingResult, InvalidOrderError
from .config import FairingConfig, CONFIG

__version__ = "0.1.0"

__all__ = [
    'SurfaceMesh', 'select_vertices',
    'fair', 'minimize_area', 'minimize_curvature', 'FairingResult',
    'MissingConstraintsError', 'SingularSystemError', 'ConvergenceError', 'InvalidOrderError',
    'ConstrainedSolver', 'DirectSolver', 'ConjugateGradientSolver',
    'FairingConfig', 'CONFIG',
]

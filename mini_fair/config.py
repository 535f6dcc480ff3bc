# mini_fair/config.py
"""
Fairing configuration and defaults.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class FairingConfig:
    """Global fairing configuration."""

    # Name of the boolean vertex property holding the user selection
    selection_property: str = "v:selected"

    # Operator assembly
    clamp_weights: bool = False   # keep negative cotangent weights
    two_step: bool = True         # raw S, normalized later by M^-1
    voronoi_mass: bool = False    # barycentric lumped mass

    # Boundary rings locked around border vertices are min(k - 1, this)
    max_boundary_rings: int = 2

    # Linear solve
    solver: str = "direct"
    cg_rtol: float = 1e-10
    cg_maxiter: Optional[int] = None

    # Available options
    solvers: List[str] = None

    def __post_init__(self):
        if self.solvers is None:
            self.solvers = ['direct', 'cg']


# Global config instance
CONFIG = FairingConfig()

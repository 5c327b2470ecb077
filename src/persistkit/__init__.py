"""
persistkit: persistent homology over Z2.

Build a filtration from a point cloud (Vietoris-Rips) or a weighted graph
(clique complex), reduce its boundary matrix, and read off one persistence
diagram per homology dimension.

    from persistkit import Filtration, compute
    diagrams = compute(Filtration.vietoris_rips(points, max_dimension=2))
"""

__version__ = "0.1.0"

from persistkit.config import PersistenceConfig, load_config
from persistkit.diagram import Diagram, DiagramSummary
from persistkit.errors import (
    DegenerateInputError,
    FiltrationIssue,
    InputError,
    InvalidFiltrationError,
    PersistkitError,
)
from persistkit.filtration import Filtration, Step
from persistkit.persistence import (
    betti_numbers,
    build_boundary_matrix,
    compute,
    compute_rips,
    matrix_rank,
    reduce,
    validate_boundary_property,
)

__all__ = [
    "PersistenceConfig",
    "load_config",
    "Diagram",
    "DiagramSummary",
    "DegenerateInputError",
    "FiltrationIssue",
    "InputError",
    "InvalidFiltrationError",
    "PersistkitError",
    "Filtration",
    "Step",
    "betti_numbers",
    "build_boundary_matrix",
    "compute",
    "compute_rips",
    "matrix_rank",
    "reduce",
    "validate_boundary_property",
]

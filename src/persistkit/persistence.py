"""
Persistent homology over Z2 by boundary matrix reduction.

    filtration -> boundary matrix -> reduced matrix -> one diagram per dimension

Everything here is a pure function of its arguments: the boundary matrix and
its reduction live for the duration of one call, so independent calls can run
in parallel without coordination.
"""
from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional

import networkx as nx
import numpy as np

from persistkit.boundary import BoundaryMatrix
from persistkit.config import ALGORITHMS, PersistenceConfig
from persistkit.diagram import Diagram, Pair
from persistkit.errors import DegenerateInputError, InputError, InvalidFiltrationError
from persistkit.filtration import Filtration
from persistkit.reduce import REDUCERS, ReductionResult, reduce_twist

logger = logging.getLogger(__name__)


def build_boundary_matrix(filtration: Filtration) -> BoundaryMatrix:
    return BoundaryMatrix.from_filtration(filtration)


def reduce(matrix: BoundaryMatrix, algorithm: str = "standard") -> ReductionResult:
    """
    Reduce a copy of the matrix; the argument is left untouched.
    algorithm is "standard" (left-to-right) or "twist" (with clearing).
    """
    reducer = REDUCERS.get(algorithm)
    if reducer is None:
        raise InputError(f"unknown algorithm '{algorithm}', expected one of {ALGORITHMS}")
    result = reducer(matrix.copy())
    stats = result.stats
    logger.debug(
        f"{algorithm} reduction of {matrix.size} columns: {stats.column_additions} additions, "
        f"{stats.pivots_finalized} pivots, {stats.columns_cleared} cleared"
    )
    return result


def extract_pairs(
    result: ReductionResult,
    filtration: Filtration,
    max_dimension: Optional[int] = None,
) -> List[Diagram]:
    """
    Read birth/death pairs off a reduction.

    A column j with pivot row i kills the class born at i: the pair is
    (scale[i], scale[j]) in the dimension of simplex i. A simplex whose column
    reduced to zero and which no column uses as pivot is never killed: it
    gives (scale[j], inf). Returns diagrams for dimensions 0..max_dimension
    (default: the top simplex dimension of the filtration).
    """
    top = filtration.max_dimension if max_dimension is None else max_dimension
    pairs: Dict[int, List[Pair]] = {dim: [] for dim in range(top + 1)}

    # paired intervals (birth -> death)
    for birth_row, death_col in result.birth_to_death.items():
        born = filtration[birth_row]
        if born.dim in pairs:
            pairs[born.dim].append((born.scale, filtration[death_col].scale))

    # essential intervals
    used_births = set(result.birth_to_death)
    for col, low in enumerate(result.lowest_row_of_col):
        if low is None and col not in used_births:
            s = filtration[col]
            if s.dim in pairs:
                pairs[s.dim].append((s.scale, math.inf))

    return [Diagram(dim, tuple(sorted(ps))) for dim, ps in sorted(pairs.items())]


def compute(
    filtration: Filtration,
    max_dimension: Optional[int] = None,
    algorithm: str = "standard",
    check: bool = True,
) -> List[Diagram]:
    """
    Persistence diagrams of a filtration, one per homology dimension.

    With check=True (the default) the filtration is validated first and an
    InvalidFiltrationError carrying the structured issue is raised before any
    reduction happens. check=False skips the scan for callers that validated
    already; a missing face still raises while the matrix is built, but
    unsorted scales would silently give meaningless pairs.
    """
    if len(filtration) == 0:
        raise DegenerateInputError("cannot compute persistence of an empty filtration")
    if check:
        issue = filtration.validate()
        if issue is not None:
            raise InvalidFiltrationError(issue)

    matrix = build_boundary_matrix(filtration)
    result = reduce(matrix, algorithm=algorithm)
    diagrams = extract_pairs(result, filtration, max_dimension)
    logger.debug(f"persistence: {[len(d.pairs) for d in diagrams]} pairs per dimension")
    return diagrams


def compute_rips(points: np.ndarray, config: Optional[PersistenceConfig] = None) -> List[Diagram]:
    """Vietoris-Rips filtration + compute, driven by a PersistenceConfig."""
    config = config or PersistenceConfig()
    filtration = Filtration.vietoris_rips(
        points,
        metric=config.metric,
        max_dimension=config.max_dimension,
        max_scale=config.max_scale,
    )
    return compute(filtration, max_dimension=config.max_dimension,
                   algorithm=config.algorithm, check=config.check)


# -------- Betti numbers --------

def _boundary_ranks(filtration: Filtration) -> Dict[int, int]:
    """rank of the boundary map out of each dimension, over Z2."""
    if len(filtration) == 0:
        return {}
    matrix = build_boundary_matrix(filtration)
    result = reduce_twist(matrix)
    ranks: Dict[int, int] = {}
    for death_col in result.birth_to_death.values():
        dim = matrix.dims[death_col]
        ranks[dim] = ranks.get(dim, 0) + 1
    return ranks


def betti_numbers(filtration: Filtration, epsilon: float, max_dimension: int = 2) -> Dict[int, int]:
    """
    Betti numbers of the complex at scale epsilon.

    b0 is the number of connected components of the 1-skeleton. b1 is the
    cycle rank E - V + C of that graph minus the rank of the boundary of the
    triangles present (zero when there are none). bk for k >= 2 is
    n_k - rank(d_k) - rank(d_k+1), ranks from a Z2 reduction of the complex.
    """
    complex_ = filtration.complex_at(epsilon)

    g = nx.Graph()
    g.add_nodes_from(s[0] for s in complex_.get(0, []))
    g.add_edges_from(complex_.get(1, []))
    components = nx.number_connected_components(g)

    needs_ranks = max_dimension >= 2 or (max_dimension >= 1 and complex_.get(2))
    ranks = _boundary_ranks(filtration.truncate(epsilon)) if needs_ranks else {}

    betti: Dict[int, int] = {}
    for dim in range(max_dimension + 1):
        if dim == 0:
            betti[dim] = components
        elif dim == 1:
            betti[dim] = g.number_of_edges() - g.number_of_nodes() + components - ranks.get(2, 0)
        else:
            betti[dim] = len(complex_.get(dim, [])) - ranks.get(dim, 0) - ranks.get(dim + 1, 0)
    return betti


# -------- matrix checks --------

def matrix_rank(matrix: BoundaryMatrix) -> int:
    """Number of non-zero columns; the Z2 rank once the matrix is reduced."""
    return sum(1 for rows in matrix.columns if rows)


def validate_boundary_property(matrix: BoundaryMatrix, filtration: Filtration) -> Optional[str]:
    """
    Check d(d(s)) == 0 for every column of an unreduced boundary matrix:
    counting, over all faces of s, how often each codimension-2 face shows
    up must give an even number. Return None if ok, else an error string.
    """
    if matrix.size != len(filtration):
        raise InputError(f"matrix has {matrix.size} columns, filtration has {len(filtration)} steps")

    for col, rows in enumerate(matrix.columns):
        counts: Dict[int, int] = {}
        for row in rows:
            for inner in matrix.columns[row]:
                counts[inner] = counts.get(inner, 0) + 1
        odd = sorted(r for r, c in counts.items() if c % 2)
        if odd:
            return (
                f"Boundary property violated for simplex {list(filtration[col].vert)}: "
                f"face {list(filtration[odd[0]].vert)} appears {counts[odd[0]]} times"
            )
    return None

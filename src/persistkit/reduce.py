from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from persistkit.boundary import BoundaryMatrix


@dataclass
class ReductionStats:
    """
    Simple counters used for performance tracking.
    """
    column_additions: int = 0
    pivots_finalized: int = 0
    columns_cleared: int = 0


@dataclass
class ReductionResult:
    """
    Result of the boundary matrix reduction.

    - matrix: the reduced matrix
    - lowest_row_of_col[j]: pivot row index for column j, or None if empty
    - birth_to_death: map from birth row -> death column
    """
    matrix: BoundaryMatrix
    lowest_row_of_col: List[Optional[int]]
    birth_to_death: Dict[int, int]
    stats: ReductionStats = field(default_factory=ReductionStats)


def _reduce_column(
    boundary: BoundaryMatrix,
    col: int,
    lowest_row_of_col: List[Optional[int]],
    birth_to_death: Dict[int, int],
    stats: ReductionStats,
) -> Optional[int]:
    while True:
        pivot_row = boundary.lowest_one(col)
        if pivot_row is None:
            # column is empty: it creates a new feature
            return None

        existing_col = birth_to_death.get(pivot_row)
        if existing_col is None:
            # first time we see this pivot row: finalize
            lowest_row_of_col[col] = pivot_row
            birth_to_death[pivot_row] = col
            stats.pivots_finalized += 1
            return pivot_row

        # otherwise, cancel the pivot by XORing the two columns
        boundary.add_column(col, existing_col)
        stats.column_additions += 1


# ---------------------------------------------------------------------
# Standard algorithm: process columns left-to-right and eliminate conflicts
# ---------------------------------------------------------------------
def reduce_standard(boundary: BoundaryMatrix) -> ReductionResult:
    """
    Gaussian elimination on Z2, in place. Each column is processed in
    order, adding the earlier column that owns its lowest one until the
    pivot is new or the column is zero. Column j depends on every reduced
    column before it, so this loop is inherently sequential.
    """
    n = boundary.size
    lowest_row_of_col: List[Optional[int]] = [None] * n
    birth_to_death: Dict[int, int] = {}
    stats = ReductionStats()

    for col in range(n):
        _reduce_column(boundary, col, lowest_row_of_col, birth_to_death, stats)

    return ReductionResult(boundary, lowest_row_of_col, dict(birth_to_death), stats)


# ---------------------------------------------------------------------
# Twist: reduce by decreasing dimension and clear columns of paired births
# ---------------------------------------------------------------------
def reduce_twist(boundary: BoundaryMatrix) -> ReductionResult:
    """
    Same pairs as reduce_standard with less work. Columns are processed by
    decreasing dimension, left-to-right inside a dimension. Once column j
    takes pivot i, simplex i is a paired birth and its own column must
    reduce to zero, so it is cleared before it is ever visited.
    """
    n = boundary.size
    lowest_row_of_col: List[Optional[int]] = [None] * n
    birth_to_death: Dict[int, int] = {}
    stats = ReductionStats()

    by_dim: Dict[int, List[int]] = {}
    for col, dim in enumerate(boundary.dims):
        by_dim.setdefault(dim, []).append(col)

    for dim in sorted(by_dim, reverse=True):
        for col in by_dim[dim]:
            if not boundary.columns[col]:
                continue
            pivot_row = _reduce_column(boundary, col, lowest_row_of_col, birth_to_death, stats)
            if pivot_row is not None and boundary.columns[pivot_row]:
                boundary.clear_column(pivot_row)
                stats.columns_cleared += 1

    return ReductionResult(boundary, lowest_row_of_col, dict(birth_to_death), stats)


REDUCERS = {
    "standard": reduce_standard,
    "twist": reduce_twist,
}

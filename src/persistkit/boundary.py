from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from persistkit import simplex as sx
from persistkit.errors import MISSING_FACE, FiltrationIssue, InvalidFiltrationError
from persistkit.filtration import Filtration


@dataclass
class BoundaryMatrix:
    """
    Sparse Z2 boundary matrix attached to a filtration.

    Storage:
      - dims: simplex dimension per filtration position
      - columns: one set of row indices per position, B[row, col] == 1 iff row in columns[col]

    Notes:
      - Coefficients are in Z2. Column addition is XOR of row index sets.
      - Rows and columns follow the same order (the filtration order), so
        for a valid filtration every row index is smaller than its column.
    """
    dims: List[int]
    columns: List[Set[int]]

    @property
    def size(self) -> int:
        """Number of simplices (matrix is size x size)."""
        return len(self.columns)

    @classmethod
    def from_filtration(cls, filtration: Filtration) -> BoundaryMatrix:
        """
        Build the boundary from a filtration, in filtration order.
        Raise InvalidFiltrationError when a face is missing or comes later.
        """
        index_of: Dict[Tuple[int, ...], int] = {}
        dims: List[int] = []
        cols: List[Set[int]] = []

        for col, s in enumerate(filtration):
            rows: Set[int] = set()
            if s.dim > 0:
                for face in sx.faces(s.vert):
                    row = index_of.get(face)
                    if row is None:
                        raise InvalidFiltrationError(FiltrationIssue(
                            MISSING_FACE, col, s.vert, s.scale, face=face,
                            message=f"Simplex {list(s.vert)} appears before its face {list(face)}",
                        ))
                    rows.add(row)
            index_of[s.vert] = col
            dims.append(s.dim)
            cols.append(rows)

        return cls(dims=dims, columns=cols)

    # ---------------- reduction helpers (Z2) ----------------

    def lowest_one(self, col: int) -> Optional[int]:
        """
        Return the largest row index with a 1 in column col, or None if empty.
        """
        s = self.columns[col]
        return max(s) if s else None

    def add_column(self, dst_col: int, src_col: int) -> None:
        """
        dst_col <- dst_col XOR src_col (Z2 column addition).
        No-op if src == dst.
        """
        if dst_col == src_col:
            return
        self.columns[dst_col] ^= self.columns[src_col]

    def clear_column(self, col: int) -> None:
        self.columns[col] = set()

    def nnz(self) -> int:
        return sum(len(rows) for rows in self.columns)

    def copy(self) -> BoundaryMatrix:
        """
        Deep copy of the sparse structure.
        """
        return BoundaryMatrix(dims=list(self.dims), columns=[set(rows) for rows in self.columns])

    # ---------------- debug / inspection ----------------

    def to_dense(self) -> List[List[int]]:
        """0/1 rows, for small cases and sanity checks."""
        n = self.size
        return [[1 if i in self.columns[j] else 0 for j in range(n)] for i in range(n)]

    def __repr__(self) -> str:
        nonzero = sum(1 for rows in self.columns if rows)
        return f"BoundaryMatrix(n={self.size}, nnz={self.nnz()}, cols={nonzero})"

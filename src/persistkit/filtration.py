from __future__ import annotations
import logging
import math
import operator
from dataclasses import dataclass
from itertools import combinations
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import networkx as nx
import numpy as np
from scipy.spatial.distance import pdist, squareform

from persistkit import simplex as sx
from persistkit.errors import (
    DUPLICATE,
    EMPTY_SIMPLEX,
    MISSING_FACE,
    NEGATIVE_VERTEX,
    OUT_OF_ORDER,
    UNNORMALIZED,
    DegenerateInputError,
    FiltrationIssue,
    InputError,
)

logger = logging.getLogger(__name__)

Metric = Union[str, Callable[[np.ndarray, np.ndarray], float]]


@dataclass(frozen=True)
class Step:
    """
    One filtration entry.
    - scale: filtration value (time of appearance)
    - vert: integer vertex ids as given; validate() reports anything negative, unsorted or repeated
    """
    scale: float
    vert: Tuple[int, ...]

    @property
    def dim(self) -> int:
        return len(self.vert) - 1


def _coerce(item: Union[Step, Tuple[float, Iterable[int]]]) -> Step:
    if isinstance(item, Step):
        return item
    scale, verts = item
    verts = list(verts)
    try:
        vert = tuple(operator.index(v) for v in verts)
    except TypeError as e:
        raise InputError(f"vertex ids must be integers, got {verts}") from e
    return Step(scale=float(scale), vert=vert)


def _order_key(step: Step) -> Tuple[float, int, Tuple[int, ...]]:
    return (step.scale, step.dim, step.vert)


class Filtration:
    """
    An ordered sequence of (scale, simplex) steps.

    The order given at construction is kept as is: builders emit steps sorted
    by (scale, dim, vertices), hand-written filtrations are taken literally so
    that validate() can report what is wrong with them.
    """

    def __init__(self, steps: Iterable[Union[Step, Tuple[float, Iterable[int]]]] = ()) -> None:
        self._steps: Tuple[Step, ...] = tuple(_coerce(s) for s in steps)

    # -------- builders --------

    @classmethod
    def vietoris_rips(
        cls,
        points: np.ndarray,
        metric: Metric = "euclidean",
        max_dimension: int = 2,
        max_scale: Optional[float] = None,
    ) -> Filtration:
        """
        Vietoris-Rips filtration of a point cloud.

        Vertices are born at 0. A simplex is born at the largest pairwise
        distance among its vertices. Every (d+1)-subset is enumerated for
        d <= max_dimension, so the size is C(n, max_dimension + 1): cap n
        before calling this on large clouds. Simplices born after max_scale
        are dropped (their faces are born no later, so the result stays valid).
        """
        pts = np.asarray(points, dtype=np.float64)
        if pts.ndim == 1:
            pts = pts.reshape(-1, 1)
        n = len(pts)
        if n < 2:
            raise DegenerateInputError(f"Vietoris-Rips needs at least 2 points, got {n}")
        if max_dimension < 0:
            raise InputError(f"max_dimension must be >= 0, got {max_dimension}")

        dist = squareform(pdist(pts, metric=metric))

        steps: List[Step] = [Step(0.0, (v,)) for v in range(n)]
        for d in range(1, max_dimension + 1):
            for combo in combinations(range(n), d + 1):
                birth = max(float(dist[i, j]) for i, j in combinations(combo, 2))
                if max_scale is not None and birth > max_scale:
                    continue
                steps.append(Step(birth, combo))

        steps.sort(key=_order_key)
        logger.debug(f"Vietoris-Rips on {n} points up to dim {max_dimension}: {len(steps)} simplices")
        return cls(steps)

    @classmethod
    def from_graph(cls, graph: nx.Graph, max_dimension: int = 2, weight: str = "weight") -> Filtration:
        """
        Filtration of a weighted graph's clique complex: vertices at 0, edges
        at their weight (0 when the attribute is missing), higher cliques at
        their largest edge weight. Self loops are ignored.
        """
        try:
            vertices = sorted(operator.index(v) for v in graph.nodes)
        except TypeError as e:
            raise InputError("graph vertices must be non-negative integers") from e
        if vertices and vertices[0] < 0:
            raise InputError(f"graph vertices must be non-negative integers, got {vertices[0]}")

        weights: Dict[Tuple[int, int], float] = {}
        for u, v, data in graph.edges(data=True):
            if u == v:
                continue
            w = data.get(weight)
            weights[(min(u, v), max(u, v))] = 0.0 if w is None else float(w)

        steps: List[Step] = [Step(0.0, (v,)) for v in vertices]
        if max_dimension >= 1:
            steps.extend(Step(w, edge) for edge, w in weights.items())
        if max_dimension >= 2:
            cliques = sx.clique_complex(graph, max_dimension=max_dimension)
            for d in range(2, max_dimension + 1):
                for s in cliques.get(d, []):
                    birth = max(weights[pair] for pair in combinations(s, 2))
                    steps.append(Step(birth, s))

        steps.sort(key=_order_key)
        logger.debug(f"graph filtration with {len(vertices)} vertices up to dim {max_dimension}: {len(steps)} simplices")
        return cls(steps)

    @classmethod
    def from_file(cls, path: str | Path, *, allow_comments: bool = True) -> Filtration:
        """
        Parse a text file with lines "f dim v0 ... v_dim".
        Empty lines are skipped. If allow_comments is True, lines starting
        with '#' are skipped. Lines are kept in file order.
        """
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(p)

        steps: List[Step] = []
        with p.open("r", encoding="utf-8") as f:
            for lineno, raw in enumerate(f, start=1):
                line = raw.strip()
                if not line:
                    continue
                if allow_comments and line.startswith("#"):
                    continue

                parts = line.split()
                if len(parts) < 2:
                    raise InputError(f"{p}:{lineno}: need at least 2 tokens, got {len(parts)}")

                try:
                    val = float(parts[0])
                except ValueError as e:
                    raise InputError(f"{p}:{lineno}: invalid float '{parts[0]}'") from e

                try:
                    dim = int(parts[1])
                except ValueError as e:
                    raise InputError(f"{p}:{lineno}: invalid dim '{parts[1]}'") from e

                # expect exactly k+1 vertices
                expected = 2 + (dim + 1)
                if len(parts) != expected:
                    raise InputError(
                        f"{p}:{lineno}: expected {expected} tokens for dim={dim}, got {len(parts)}"
                    )

                try:
                    verts_set = {int(v) for v in parts[2:]}
                except ValueError as e:
                    raise InputError(f"{p}:{lineno}: vertices must be integers") from e
                verts = tuple(sorted(verts_set))

                if len(verts) != (dim + 1):
                    raise InputError(
                        f"{p}:{lineno}: need exactly {dim+1} distinct vertices, got {len(verts)}"
                    )

                steps.append(Step(val, verts))

        logger.info(f"Read {len(steps)} simplices from {p}")
        return cls(steps)

    # -------- collection API --------

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> Step:
        return self._steps[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Filtration):
            return NotImplemented
        return self._steps == other._steps

    def steps(self) -> List[Step]:
        return list(self._steps)

    def scales(self) -> List[float]:
        return [s.scale for s in self._steps]

    @property
    def max_dimension(self) -> int:
        """Top simplex dimension present, -1 when empty."""
        return max((s.dim for s in self._steps), default=-1)

    # -------- queries --------

    def complex_at(self, epsilon: float) -> Dict[int, List[Tuple[int, ...]]]:
        """Simplices born at or before epsilon, grouped by dimension."""
        grouped: Dict[int, List[Tuple[int, ...]]] = {}
        for s in self._steps:
            if s.scale <= epsilon:
                grouped.setdefault(s.dim, []).append(s.vert)
        return {dim: grouped[dim] for dim in sorted(grouped)}

    def truncate(self, epsilon: float) -> Filtration:
        """Prefix of steps born at or before epsilon, in filtration order."""
        return Filtration(s for s in self._steps if s.scale <= epsilon)

    def critical_values(self) -> List[float]:
        return sorted(set(self.scales()))

    def sorted(self) -> Filtration:
        """Copy ordered by (scale, dim, vertices)."""
        return Filtration(sorted(self._steps, key=_order_key))

    def count_by_dim(self) -> Dict[int, int]:
        """Return a histogram of simplex counts per dimension."""
        hist: Dict[int, int] = {}
        for s in self._steps:
            hist[s.dim] = hist.get(s.dim, 0) + 1
        return hist

    # -------- validation --------

    def validate(self) -> Optional[FiltrationIssue]:
        """
        Check that the filtration can be reduced: every simplex non-empty
        with non-negative, sorted, unique vertex ids, scales non-decreasing,
        and every codimension-1 face present at an earlier position. Return
        None if ok, else the first issue found. Scale order is checked over
        the whole sequence before faces are looked at.
        """
        prev: Optional[Step] = None
        for pos, s in enumerate(self._steps):
            if s.dim < 0:
                return FiltrationIssue(EMPTY_SIMPLEX, pos, s.vert, s.scale,
                                       message=f"Empty simplex at position {pos}")
            if min(s.vert) < 0:
                return FiltrationIssue(
                    NEGATIVE_VERTEX, pos, s.vert, s.scale,
                    message=f"Simplex {list(s.vert)} at position {pos} has a negative vertex id",
                )
            if any(a >= b for a, b in zip(s.vert, s.vert[1:])):
                return FiltrationIssue(
                    UNNORMALIZED, pos, s.vert, s.scale,
                    message=f"Simplex {list(s.vert)} at position {pos} is not sorted with distinct vertices",
                )
            if math.isnan(s.scale):
                return FiltrationIssue(OUT_OF_ORDER, pos, s.vert, s.scale,
                                       message=f"Simplex {list(s.vert)} has a NaN scale")
            if prev is not None and s.scale < prev.scale:
                return FiltrationIssue(
                    OUT_OF_ORDER, pos, s.vert, s.scale, face=prev.vert,
                    message=(
                        f"Simplex {list(s.vert)} at scale {s.scale} follows "
                        f"{list(prev.vert)} at scale {prev.scale}"
                    ),
                )
            prev = s

        seen: Dict[Tuple[int, ...], int] = {}
        for pos, s in enumerate(self._steps):
            if s.vert in seen:
                return FiltrationIssue(
                    DUPLICATE, pos, s.vert, s.scale, face=s.vert,
                    message=f"Simplex {list(s.vert)} appears twice (positions {seen[s.vert]} and {pos})",
                )
            if s.dim > 0:
                for face in sx.faces(s.vert):
                    if face not in seen:
                        return FiltrationIssue(
                            MISSING_FACE, pos, s.vert, s.scale, face=face,
                            message=f"Simplex {list(s.vert)} appears before its face {list(face)}",
                        )
            seen[s.vert] = pos
        return None

    def __repr__(self) -> str:
        n = len(self._steps)
        dims = sorted(self.count_by_dim().items())
        dims_str = ", ".join(f"{d}:{c}" for d, c in dims)
        return f"Filtration(n={n}, dims={{ {dims_str} }})"

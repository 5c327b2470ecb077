"""
Persistence diagrams and what can be computed from them.

A diagram is the multiset of (birth, death) pairs of one homology dimension.
A feature that never dies has death == math.inf. Points far from the
diagonal are long-lived features; points on or near it are noise.
"""
from __future__ import annotations
import math
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from persistkit.errors import InputError

Pair = Tuple[float, float]  # (birth, death); death may be math.inf

# stand-in lifetime for infinite points in the greedy distances
INFINITE_OFFSET = 1000.0


@dataclass(frozen=True)
class Diagram:
    dimension: int
    pairs: Tuple[Pair, ...] = ()

    def __post_init__(self) -> None:
        pairs = tuple((float(b), float(d)) for b, d in self.pairs)
        for b, d in pairs:
            if math.isnan(b) or math.isnan(d) or d < b:
                raise InputError(f"invalid pair (birth={b}, death={d}) in H{self.dimension}")
        object.__setattr__(self, "pairs", pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def finite_pairs(self) -> List[Pair]:
        return [(b, d) for b, d in self.pairs if not math.isinf(d)]


@dataclass(frozen=True)
class DiagramSummary:
    """
    count / finite_count / infinite_count cover every point. The persistence
    figures only use finite points with non-zero persistence.
    """
    count: int
    finite_count: int
    infinite_count: int
    total_persistence: float
    max_persistence: float
    mean_persistence: float
    entropy: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


# -------- persistence values --------

def persistences(diagram: Diagram) -> List[float]:
    """death - birth per point, math.inf for points that never die."""
    return [d - b for b, d in diagram.pairs]


def _lifetimes(diagram: Diagram) -> List[float]:
    # finite, non-zero persistence only
    return [p for p in persistences(diagram) if not math.isinf(p) and p > 0.0]


def total_persistence(diagram: Diagram) -> float:
    return float(sum(_lifetimes(diagram)))


def entropy(diagram: Diagram) -> float:
    """
    Persistence entropy -sum(p_i / L * log(p_i / L)), L the total persistence.
    Infinite and zero-length points are left out; 0.0 when nothing remains.
    """
    lifetimes = _lifetimes(diagram)
    total = sum(lifetimes)
    if not lifetimes or total == 0.0:
        return 0.0
    h = 0.0
    for p in lifetimes:
        prob = p / total
        h -= prob * math.log(prob)
    return h


def summary_statistics(diagram: Diagram) -> DiagramSummary:
    all_persts = persistences(diagram)
    infinite_count = sum(1 for p in all_persts if math.isinf(p))
    lifetimes = _lifetimes(diagram)
    return DiagramSummary(
        count=len(all_persts),
        finite_count=len(all_persts) - infinite_count,
        infinite_count=infinite_count,
        total_persistence=float(sum(lifetimes)),
        max_persistence=max(lifetimes, default=0.0),
        mean_persistence=float(np.mean(lifetimes)) if lifetimes else 0.0,
        entropy=entropy(diagram),
    )


def filter_by_persistence(
    diagram: Diagram,
    min_persistence: float = 0.0,
    max_persistence: float = math.inf,
) -> Diagram:
    """
    Keep points with min_persistence <= persistence <= max_persistence.
    An infinite point is kept only when max_persistence is itself infinite.
    """
    kept = []
    for b, d in diagram.pairs:
        p = d - b
        if math.isinf(p):
            if math.isinf(max_persistence):
                kept.append((b, d))
        elif min_persistence <= p <= max_persistence:
            kept.append((b, d))
    return Diagram(diagram.dimension, tuple(kept))


# -------- comparison --------

def _prepare_points(diagram: Diagram) -> np.ndarray:
    pts = [(b, b + INFINITE_OFFSET if math.isinf(d) else d) for b, d in diagram.pairs]
    return np.asarray(pts, dtype=np.float64).reshape(-1, 2)


def _diagonal_projections(points: np.ndarray) -> np.ndarray:
    mid = points.mean(axis=1)
    return np.column_stack([mid, mid])


def _cross_distances(diagram1: Diagram, diagram2: Diagram) -> np.ndarray:
    """
    Chebyshev distances over the full cross product of the two point sets,
    each extended with the diagonal projections of the other.
    """
    p1 = _prepare_points(diagram1)
    p2 = _prepare_points(diagram2)
    all1 = np.vstack([p1, _diagonal_projections(p2)])
    all2 = np.vstack([p2, _diagonal_projections(p1)])
    diff = np.abs(all1[:, None, :] - all2[None, :, :])
    return diff.max(axis=2).ravel()


def bottleneck_distance(diagram1: Diagram, diagram2: Diagram) -> float:
    """
    Greedy bottleneck-style distance: the largest Chebyshev distance between
    any point of one extended diagram and any point of the other.

    This is NOT the optimal-matching bottleneck distance. It is symmetric and
    non-negative, but it is an upper bound rather than the infimum over
    matchings, and a diagram is generally not at distance 0 from itself.
    Infinite deaths are replaced by birth + INFINITE_OFFSET before comparing.
    """
    distances = _cross_distances(diagram1, diagram2)
    if distances.size == 0:
        return 0.0
    return float(distances.max())


def wasserstein_distance(diagram1: Diagram, diagram2: Diagram, p: float = 2) -> float:
    """
    Greedy p-Wasserstein-style distance: the p-mean of the Chebyshev
    distances over the same cross product as bottleneck_distance. Same
    caveats: symmetric, non-negative, not an optimal matching. p=inf gives
    the bottleneck value.
    """
    if p < 1:
        raise InputError(f"p must be >= 1, got {p}")
    if math.isinf(p):
        return bottleneck_distance(diagram1, diagram2)
    distances = _cross_distances(diagram1, diagram2)
    if distances.size == 0:
        return 0.0
    return float(np.mean(distances ** p) ** (1.0 / p))


def same_dimension(diagram1: Diagram, diagram2: Diagram) -> bool:
    return diagram1.dimension == diagram2.dimension


# -------- transforms --------

def project_infinite(diagram: Diagram, max_death: Optional[float] = None) -> Diagram:
    """
    Replace infinite deaths by max_death, 1.5x the largest finite death by
    default (1.5 when no point is finite).
    """
    if max_death is None:
        max_death = 1.5 * max((d for _, d in diagram.finite_pairs()), default=1.0)
    pairs = tuple((b, max(b, max_death) if math.isinf(d) else d) for b, d in diagram.pairs)
    return Diagram(diagram.dimension, pairs)


def to_persistence_birth_coordinates(diagram: Diagram) -> List[Tuple[float, float]]:
    """(persistence, birth) for every finite point."""
    return [(d - b, b) for b, d in diagram.finite_pairs()]


def persistence_landscape(diagram: Diagram, t_values: Iterable[float], level: int = 1) -> List[float]:
    """
    lambda_k(t) for each t: the k-th largest tent value
    max(0, min(t - birth, death - t)) over finite points, 0 when fewer than
    k points are active at t.
    """
    if level < 1:
        raise InputError(f"landscape level must be >= 1, got {level}")
    finite = diagram.finite_pairs()
    values: List[float] = []
    for t in t_values:
        tents = sorted((max(0.0, min(t - b, d - t)) for b, d in finite), reverse=True)
        values.append(tents[level - 1] if len(tents) >= level else 0.0)
    return values


def diagrams_by_dimension(diagrams: Sequence[Diagram]) -> Dict[int, Diagram]:
    return {d.dimension: d for d in diagrams}

"""
Topological fragility: how much the diagrams move when the input is perturbed.

Every function here is a repeated caller of the persistence pipeline. The
recomputations share no state, so point removal can fan out over worker
processes (PersistenceConfig.n_jobs). Distances between diagram sets are sums
of the greedy bottleneck distance over dimensions; see diagram.bottleneck_distance
for what that metric does and does not guarantee.
"""
from __future__ import annotations
import logging
import math
from concurrent.futures import ProcessPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np
from scipy.spatial.distance import cdist

from persistkit.config import PersistenceConfig
from persistkit.diagram import Diagram, bottleneck_distance, diagrams_by_dimension, persistences
from persistkit.errors import DegenerateInputError, InputError
from persistkit.filtration import Filtration
from persistkit.persistence import compute, compute_rips

logger = logging.getLogger(__name__)


def _as_points(points: np.ndarray) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim == 1:
        pts = pts.reshape(-1, 1)
    return pts


def diagram_set_distance(a: Sequence[Diagram], b: Sequence[Diagram]) -> float:
    """Sum over homology dimensions of the bottleneck distance; a missing dimension counts as empty."""
    by_a = diagrams_by_dimension(a)
    by_b = diagrams_by_dimension(b)
    total = 0.0
    for dim in sorted(set(by_a) | set(by_b)):
        total += bottleneck_distance(by_a.get(dim, Diagram(dim)), by_b.get(dim, Diagram(dim)))
    return total


def _removal_score(points: np.ndarray, index: int, baseline: List[Diagram], config: PersistenceConfig) -> float:
    rest = np.delete(points, index, axis=0)
    if len(rest) < 2:
        return 0.0
    return diagram_set_distance(baseline, compute_rips(rest, config))


def point_removal_sensitivity(points: np.ndarray, config: Optional[PersistenceConfig] = None) -> Dict[int, float]:
    """
    For every point i, the distance between the diagrams of the cloud and
    the diagrams of the cloud without i. Higher means more fragile.
    """
    config = config or PersistenceConfig()
    pts = _as_points(points)
    n = len(pts)
    baseline = compute_rips(pts, config)
    logger.info(f"Point removal sensitivity on {n} points (n_jobs={config.n_jobs})")

    if config.n_jobs == 1:
        return {i: _removal_score(pts, i, baseline, config) for i in range(n)}

    with ProcessPoolExecutor(max_workers=config.n_jobs) as pool:
        futures = {i: pool.submit(_removal_score, pts, i, baseline, config) for i in range(n)}
        return {i: fut.result() for i, fut in futures.items()}


def edge_perturbation_sensitivity(
    graph: nx.Graph,
    perturbation: float = 0.1,
    max_dimension: int = 1,
    weight: str = "weight",
) -> Dict[Tuple[int, int], float]:
    """
    For every edge, the distance between the graph's diagrams and the
    diagrams after adding `perturbation` to that edge's weight.
    """
    baseline = compute(Filtration.from_graph(graph, max_dimension, weight), max_dimension)

    scores: Dict[Tuple[int, int], float] = {}
    for u, v, data in graph.edges(data=True):
        if u == v:
            continue
        perturbed = graph.copy()
        perturbed[u][v][weight] = (data.get(weight) or 0.0) + perturbation
        diagrams = compute(Filtration.from_graph(perturbed, max_dimension, weight), max_dimension)
        scores[(u, v)] = diagram_set_distance(baseline, diagrams)
    return scores


def feature_stability_scores(diagram: Diagram, normalize: bool = True) -> List[float]:
    """Finite persistences, divided by the largest one when normalize is set."""
    finite = [p for p in persistences(diagram) if not math.isinf(p)]
    if not normalize or not finite:
        return finite
    top = max(finite)
    if top <= 0:
        return [0.0 for _ in finite]
    return [p / top for p in finite]


def identify_critical_points(
    scores: Dict[int, float],
    threshold: Optional[float] = None,
    top_k: Optional[int] = None,
) -> List[int]:
    """
    Indices with score >= threshold (default mean + one standard deviation),
    most fragile first. top_k overrides the threshold and takes the k highest.
    """
    if not scores:
        return []
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    if top_k is not None:
        return [idx for idx, _ in ranked[:top_k]]
    if threshold is None:
        values = np.fromiter(scores.values(), dtype=np.float64)
        threshold = float(values.mean() + values.std())
    return [idx for idx, score in ranked if score >= threshold]


def local_fragility(
    points: np.ndarray,
    index: int,
    k: int = 5,
    config: Optional[PersistenceConfig] = None,
) -> Dict[str, object]:
    """
    Removal impact of one point compared with its k nearest neighbours.
    """
    config = config or PersistenceConfig()
    pts = _as_points(points)
    n = len(pts)
    if not 0 <= index < n:
        raise InputError(f"index {index} out of range for {n} points")
    if k > n - 1:
        raise DegenerateInputError(f"asked for {k} neighbours but only {n - 1} other points exist")

    all_scores = point_removal_sensitivity(pts, config)
    removal_impact = all_scores[index]

    row = cdist(pts[index:index + 1], pts, metric=config.metric)[0]
    order = [int(i) for i in np.argsort(row, kind="stable") if i != index]
    neighbor_indices = order[:k]

    neighbor_scores = [all_scores[i] for i in neighbor_indices]
    neighborhood_mean = float(np.mean(neighbor_scores)) if neighbor_scores else 0.0

    return {
        "removal_impact": removal_impact,
        "neighborhood_mean_fragility": neighborhood_mean,
        "relative_fragility": removal_impact / neighborhood_mean if neighborhood_mean > 0 else 0.0,
        "neighbor_indices": neighbor_indices,
    }


def bottleneck_stability(
    points: np.ndarray,
    num_samples: int = 10,
    max_perturbation: float = 1.0,
    tolerance: float = 0.1,
    seed: Optional[int] = None,
    config: Optional[PersistenceConfig] = None,
) -> float:
    """
    Smallest uniform noise level (out of num_samples evenly spaced levels up
    to max_perturbation) at which the diagrams move by more than tolerance;
    max_perturbation if none does.

    The greedy distance does not vanish between a diagram set and itself, so
    movement is measured as the excess over the baseline's self-distance.
    """
    config = config or PersistenceConfig()
    pts = _as_points(points)
    rng = np.random.default_rng(seed)

    baseline = compute_rips(pts, config)
    floor = diagram_set_distance(baseline, baseline)

    for step in range(1, num_samples + 1):
        level = step * max_perturbation / num_samples
        noise = rng.uniform(-level, level, size=pts.shape)
        moved = diagram_set_distance(baseline, compute_rips(pts + noise, config)) - floor
        logger.debug(f"noise level {level:.4f}: diagrams moved by {moved:.4f}")
        if moved > tolerance:
            return level
    return max_perturbation


def robustness_score(
    points: np.ndarray,
    config: Optional[PersistenceConfig] = None,
    **stability_kwargs,
) -> float:
    """
    Score in [0, 1], higher is more robust: the average of 1 / (1 + mean
    removal fragility) and t / (t + 1) for the bottleneck stability level t.
    """
    config = config or PersistenceConfig()
    removal = point_removal_sensitivity(points, config)
    mean_fragility = float(np.mean(list(removal.values())))
    threshold = bottleneck_stability(points, config=config, **stability_kwargs)

    fragility_component = 1.0 / (1.0 + mean_fragility)
    stability_component = threshold / (threshold + 1.0)
    return (fragility_component + stability_component) / 2.0

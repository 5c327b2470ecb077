"""
Simplices as sorted vertex tuples.

A k-simplex is a tuple of k+1 distinct vertex ids in ascending order:
    (3,)        a point
    (0, 2)      an edge
    (0, 1, 2)   a triangle
The empty tuple is the empty simplex (dimension -1). Functions accept any
iterable of ints and normalize before doing anything with it.
"""
from __future__ import annotations
import logging
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

logger = logging.getLogger(__name__)

Simplex = Tuple[int, ...]
Chain = List[Tuple[int, Simplex]]  # (sign, face)
Complex = Dict[int, List[Simplex]]  # dim -> simplices


def normalize(simplex: Iterable[int]) -> Simplex:
    """Sort and deduplicate vertex ids."""
    return tuple(sorted(set(simplex)))


def dimension(simplex: Iterable[int]) -> int:
    return len(tuple(simplex)) - 1


def faces(simplex: Iterable[int]) -> List[Simplex]:
    """
    Return all codimension-1 faces, one per removed vertex, in ascending
    order of the removed vertex: faces((0, 1, 2)) == [(1, 2), (0, 2), (0, 1)].
    """
    verts = normalize(simplex)
    n = len(verts)
    return [verts[:i] + verts[i + 1:] for i in range(n)]


def k_faces(simplex: Iterable[int], k: int) -> List[Simplex]:
    """All k-dimensional faces, i.e. every (k+1)-combination of the vertices."""
    if k < 0:
        return []
    return list(combinations(normalize(simplex), k + 1))


def boundary(simplex: Iterable[int]) -> Chain:
    """
    Signed boundary chain: the face obtained by dropping the i-th vertex
    carries sign (-1)**i.
    """
    return [(1 if i % 2 == 0 else -1, face) for i, face in enumerate(faces(simplex))]


def double_boundary(simplex: Iterable[int]) -> Dict[Simplex, int]:
    """
    Apply the boundary operator twice and sum the signs per codimension-2 face.
    Every value is 0 for a correct boundary operator.
    """
    totals: Dict[Simplex, int] = {}
    for sign, face in boundary(simplex):
        for inner_sign, inner in boundary(face):
            totals[inner] = totals.get(inner, 0) + sign * inner_sign
    return totals


def is_face(face: Iterable[int], simplex: Iterable[int]) -> bool:
    return set(face) <= set(simplex)


# -------- complexes --------

def clique_complex(graph: nx.Graph, max_dimension: int = 2) -> Complex:
    """
    Clique (flag) complex of a graph up to max_dimension.

    Dimension 0 is the vertex set. Dimension d is grown from dimension d-1 by
    appending a vertex larger than the current maximum, which visits each
    candidate once; a candidate is kept when it is adjacent to every vertex
    already in the simplex, so every pairwise sub-edge is a graph edge.
    Cost grows exponentially with clique size: meant for graphs with up to a
    few hundred vertices and a small max_dimension.
    """
    vertices = sorted(graph.nodes)
    complex_: Complex = {0: [(v,) for v in vertices]}

    for dim in range(1, max_dimension + 1):
        layer: List[Simplex] = []
        for simplex in complex_[dim - 1]:
            top = simplex[-1]
            for v in vertices:
                if v <= top:
                    continue
                if all(u != v and graph.has_edge(u, v) for u in simplex):
                    layer.append(simplex + (v,))
        complex_[dim] = layer
        logger.debug(f"clique complex: {len(layer)} simplices in dim {dim}")
        if not layer:
            # nothing left to extend; keep the remaining keys present but empty
            for rest in range(dim + 1, max_dimension + 1):
                complex_[rest] = []
            break

    return complex_


def all_simplices(complex_: Complex, max_dimension: Optional[int] = None) -> List[Simplex]:
    """Flatten a complex, lowest dimension first."""
    dims = sorted(complex_) if max_dimension is None else range(max_dimension + 1)
    return [s for dim in dims for s in complex_.get(dim, [])]


def skeleton(complex_: Complex, k: int) -> Complex:
    """Keep dimensions 0..k."""
    return {dim: list(simplices) for dim, simplices in complex_.items() if dim <= k}

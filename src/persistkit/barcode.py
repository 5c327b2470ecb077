# barcode.py
from __future__ import annotations
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from persistkit.diagram import Diagram, Pair
from persistkit.errors import InputError

logger = logging.getLogger(__name__)

Interval = Tuple[int, float, float]  # (dim, birth, death|inf)
Record = Tuple[int, List[Pair]]  # (dim, [(birth, death), ...])


def intervals(diagrams: Iterable[Diagram]) -> List[Interval]:
    """Flatten diagrams to (dim, birth, death), sorted with infinite bars last per birth."""
    out = [(d.dimension, b, death) for d in diagrams for b, death in d.pairs]
    out.sort(key=lambda t: (t[0], t[1], t[2]))
    return out


# ---- Records (interop with other TDA tools) ----

def to_records(diagrams: Iterable[Diagram]) -> List[Record]:
    return [(d.dimension, list(d.pairs)) for d in diagrams]


def from_records(records: Iterable[Tuple[int, Iterable[Sequence[float]]]]) -> List[Diagram]:
    out = []
    for dim, pairs in records:
        out.append(Diagram(int(dim), tuple((float(b), float(d)) for b, d in pairs)))
    return out


# ---- Text files ----

def write_barcode(diagrams: Iterable[Diagram], outfile: str | Path) -> None:
    """Write the barcode sorted logically: one "dim birth death" line per bar, inf for essentials."""
    lines = [f"{k} {b} {'inf' if math.isinf(d) else d}" for k, b, d in intervals(diagrams)]
    path = Path(outfile)
    with path.open("w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
    logger.info(f"Wrote {len(lines)} bars to {path}")


def read_barcode(path: str | Path) -> List[Diagram]:
    """Read a file written by write_barcode. Dimensions without bars are filled in empty."""
    p = Path(path)
    by_dim: Dict[int, List[Pair]] = {}
    with p.open("r", encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            if len(parts) != 3:
                raise InputError(f"{p}:{lineno}: expected 'dim birth death', got {line!r}")
            try:
                dim = int(parts[0])
                birth = float(parts[1])
                death = float(parts[2])  # float("inf") parses "inf"
            except ValueError as e:
                raise InputError(f"{p}:{lineno}: cannot parse {line!r}") from e
            by_dim.setdefault(dim, []).append((birth, death))

    top = max(by_dim, default=-1)
    return [Diagram(dim, tuple(sorted(by_dim.get(dim, [])))) for dim in range(top + 1)]


# ---- Filtering & Betti ----

def filter_by_length(
    diagrams: Iterable[Diagram],
    *,
    min_length: float = 0.0,
    relative: bool = False,
) -> List[Diagram]:
    """Drop finite bars with length < min_length. If relative=True, threshold is fraction of global span."""
    diagrams = list(diagrams)
    if min_length <= 0:
        return diagrams
    finite_vals = [x for dg in diagrams for b, d in dg.pairs for x in (b, b if math.isinf(d) else d)]
    if not finite_vals:
        return diagrams
    span = max(1e-12, max(finite_vals) - min(finite_vals))
    thr = min_length * span if relative else min_length

    out: List[Diagram] = []
    for dg in diagrams:
        kept = tuple((b, d) for b, d in dg.pairs if math.isinf(d) or d - b >= thr)
        out.append(Diagram(dg.dimension, kept))
    return out


def betti_from_diagrams(diagrams: Iterable[Diagram]) -> Dict[int, int]:
    """Count infinite bars per dimension."""
    betti: Dict[int, int] = {}
    for dg in diagrams:
        betti[dg.dimension] = sum(1 for _, d in dg.pairs if math.isinf(d))
    return betti

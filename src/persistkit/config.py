from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from persistkit.errors import InputError

logger = logging.getLogger(__name__)

ALGORITHMS = ("standard", "twist")


@dataclass
class PersistenceConfig:
    """
    Knobs shared by the point-cloud entry points (fragility analysis, batch runs).
    - max_dimension: top simplex dimension built, and top homology dimension reported
    - metric: scipy pdist metric name
    - algorithm: "standard" or "twist" column reduction
    - check: validate the filtration before reducing
    - max_scale: drop simplices born after this scale (None keeps everything)
    - n_jobs: worker processes for independent recomputations
    """
    max_dimension: int = 1
    metric: str = "euclidean"
    algorithm: str = "standard"
    check: bool = True
    max_scale: Optional[float] = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.max_dimension < 0:
            raise InputError(f"max_dimension must be >= 0, got {self.max_dimension}")
        if self.algorithm not in ALGORITHMS:
            raise InputError(f"unknown algorithm '{self.algorithm}', expected one of {ALGORITHMS}")
        if self.n_jobs < 1:
            raise InputError(f"n_jobs must be >= 1, got {self.n_jobs}")

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> PersistenceConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise InputError(f"unknown config keys: {unknown}")
        return cls(**raw)


def load_config(path: str | Path) -> PersistenceConfig:
    """Read a PersistenceConfig from a YAML mapping. An empty file gives the defaults."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise InputError(f"{path}: expected a mapping at top level, got {type(raw).__name__}")
    logger.debug(f"Loaded config from {path}: {raw}")
    return PersistenceConfig.from_dict(raw)


def dump_config(config: PersistenceConfig, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config.as_dict(), f, sort_keys=False)

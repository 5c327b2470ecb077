from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


# issue kinds reported by Filtration.validate
EMPTY_SIMPLEX = "empty-simplex"
UNNORMALIZED = "unnormalized"
NEGATIVE_VERTEX = "negative-vertex"
DUPLICATE = "duplicate"
OUT_OF_ORDER = "out-of-order"
MISSING_FACE = "missing-face"


@dataclass(frozen=True)
class FiltrationIssue:
    """
    First problem found in a filtration.
    - kind: one of the issue kinds above
    - position: index of the offending step
    - simplex: vertices of the offending step, as stored
    - scale: scale of the offending step
    - face: the missing face, or the step it collides with, when relevant
    """
    kind: str
    position: int
    simplex: Tuple[int, ...]
    scale: float
    face: Optional[Tuple[int, ...]] = None
    message: str = ""

    def __str__(self) -> str:
        return self.message or f"{self.kind} at position {self.position}: {list(self.simplex)}"


class PersistkitError(Exception):
    """Root of every error raised by this package."""


class InputError(PersistkitError, ValueError):
    """Malformed simplex, filtration or file content."""


class InvalidFiltrationError(InputError):
    """A filtration failed validation; the structured issue is attached."""

    def __init__(self, issue: FiltrationIssue) -> None:
        super().__init__(str(issue))
        self.issue = issue


class DegenerateInputError(PersistkitError, ValueError):
    """Input is well formed but too small to say anything (too few points, empty filtration)."""

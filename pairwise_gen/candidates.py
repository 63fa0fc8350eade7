"""Scores candidate (parameter, value) assignments during one greedy step."""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .model import value_key


class EmptyCandidateError(LookupError):
    """Raised when a best candidate is requested but none was ever added."""


@dataclass(frozen=True)
class Candidate:
    param: str
    value: Any
    score: int = 0


class CandidateScorer:
    """
    Accumulates scores for candidates. A new scorer is built for every
    greedy step and thrown away afterwards.

    The best candidate only changes when a score becomes strictly greater
    than the current best, so the earliest registered candidate wins ties.
    """

    def __init__(self):
        self._scores: Dict[Tuple[str, Tuple[str, Any]], int] = {}
        self._best: Optional[Candidate] = None

    def __len__(self) -> int:
        return len(self._scores)

    def add(self, param: str, value: Any) -> None:
        key = (param, value_key(value))
        if key not in self._scores:
            self._scores[key] = 0
        if self._best is None:
            self._best = Candidate(param, value, 0)

    def increment(self, param: str, value: Any) -> None:
        key = (param, value_key(value))
        score = self._scores.get(key)
        if score is None:
            return
        score += 1
        self._scores[key] = score
        if score > self._best.score:
            self._best = Candidate(param, value, score)

    def score_of(self, param: str, value: Any) -> Optional[int]:
        return self._scores.get((param, value_key(value)))

    def get_best_candidate(self) -> Candidate:
        if self._best is None:
            raise EmptyCandidateError("No candidates were added, can't compute best candidate.")
        return self._best

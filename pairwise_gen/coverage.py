"""Tracks which value pairs are still missing from the emitted solutions."""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .model import values_equal

ConfigEntries = Sequence[Tuple[str, Sequence[Any]]]


class InvalidConfigurationError(ValueError):
    """Raised when a configuration cannot be generated from (e.g. it has no parameters)."""


@dataclass(frozen=True)
class UncoveredEntry:
    value1: Any
    value2: Any


@dataclass
class Pair:
    """Two distinct parameters, in configuration order, and their missing value pairs."""
    param1: str
    param2: str
    uncovered: List[UncoveredEntry] = field(default_factory=list)


def generate_uncovered(values1: Sequence[Any], values2: Sequence[Any]) -> List[UncoveredEntry]:
    return [UncoveredEntry(v1, v2) for v1 in values1 for v2 in values2]


class CoverageTracker:
    """
    Owns one Pair per unordered combination of parameters, each seeded with
    the full cross product of the two value lists.

    Pairs are stored in creation order: (0, 1), (0, 2), ..., (1, 2), ...
    Selection of the most uncovered pair uses a strictly-greater comparison so
    the first pair in that order wins ties.
    """

    def __init__(self, entries: ConfigEntries):
        if not entries:
            raise InvalidConfigurationError("Can't track coverage without any parameters.")

        self._pairs: List[Pair] = []
        self._most_uncovered: Optional[Pair] = None

        for i in range(len(entries) - 1):
            for j in range(i + 1, len(entries)):
                param1, values1 = entries[i]
                param2, values2 = entries[j]
                pair = Pair(param1, param2, generate_uncovered(values1, values2))
                self._pairs.append(pair)
                if self._most_uncovered is None or len(pair.uncovered) > len(self._most_uncovered.uncovered):
                    self._most_uncovered = pair

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def is_empty(self) -> bool:
        return not self._pairs

    def remaining(self) -> int:
        """Total number of uncovered entries across all pairs."""
        return sum(len(p.uncovered) for p in self._pairs)

    def best_partial_solution(self) -> Dict[str, Any]:
        """
        Returns a new solution holding the first uncovered entry of the pair
        with the most uncovered entries, or an empty solution if none remain.
        """
        solution: Dict[str, Any] = {}
        pair = self._most_uncovered
        if pair is not None and pair.uncovered:
            entry = pair.uncovered[0]
            solution[pair.param1] = entry.value1
            solution[pair.param2] = entry.value2
        return solution

    def mark_solution_covered(self, solution: Dict[str, Any]) -> None:
        """
        Removes every uncovered entry matched by `solution` and drops pairs
        with nothing left. Pairs whose parameters are not both assigned by
        the solution are left untouched.
        """
        remaining_pairs = []
        self._most_uncovered = None

        for pair in self._pairs:
            if pair.param1 in solution and pair.param2 in solution:
                value1 = solution[pair.param1]
                value2 = solution[pair.param2]
                pair.uncovered = [
                    entry for entry in pair.uncovered
                    if not (values_equal(entry.value1, value1) and values_equal(entry.value2, value2))
                ]

            if not pair.uncovered:
                continue
            remaining_pairs.append(pair)
            if self._most_uncovered is None or len(pair.uncovered) > len(self._most_uncovered.uncovered):
                self._most_uncovered = pair

        self._pairs = remaining_pairs

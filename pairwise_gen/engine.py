"""Greedy pairwise generation and suite orchestration."""
import sys
from collections.abc import Mapping
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .bounds import compute_pairwise_lower_bound
from .candidates import CandidateScorer
from .coverage import CoverageTracker, InvalidConfigurationError
from .model import is_supported_value, value_key
from .preflight import validate_configuration
from .verify import verify_pairwise_coverage

Solution = Dict[str, Any]


class GenerationVerificationError(Exception):
    """Raised when verified output is required but the suite misses pairs."""
    def __init__(self, message: str, missing_pairs: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_pairs = missing_pairs or []


class GenerationLimitError(Exception):
    """Raised when a suite needs more solutions than `max_cases` allows."""


def score_candidates(tracker: CoverageTracker,
                     entries: Sequence[Tuple[str, Sequence[Any]]],
                     solution: Solution) -> CandidateScorer:
    """
    Builds a scorer for every value of every parameter missing from
    `solution`, scored by the uncovered entries that value would resolve.
    Reads the tracker without modifying it.
    """
    scorer = CandidateScorer()
    for param, values in entries:
        if param not in solution:
            for value in values:
                scorer.add(param, value)

    for pair in tracker:
        has_param1 = pair.param1 in solution
        has_param2 = pair.param2 in solution
        if has_param1 and has_param2:
            continue
        for entry in pair.uncovered:
            if has_param1 and value_key(entry.value1) == value_key(solution[pair.param1]):
                scorer.increment(pair.param2, entry.value2)
            elif has_param2 and value_key(entry.value2) == value_key(solution[pair.param2]):
                scorer.increment(pair.param1, entry.value1)
            else:
                # an assigned parameter has no candidates, so only the open side scores
                scorer.increment(pair.param1, entry.value1)
                scorer.increment(pair.param2, entry.value2)
    return scorer


def _config_entries(configuration: Mapping) -> List[Tuple[str, List[Any]]]:
    if not isinstance(configuration, Mapping):
        raise InvalidConfigurationError("Configuration must map parameter names to value lists.")
    if not configuration:
        raise InvalidConfigurationError("Configuration must contain at least 1 parameter.")
    return [(param, list(values)) for param, values in configuration.items()]


def _generate(entries: List[Tuple[str, List[Any]]],
              include: List[Solution]) -> Iterator[Solution]:
    if len(entries) == 1:
        # no pairs to seed from: emit every declared value not already included
        param, values = entries[0]
        seen = set()
        for solution in include:
            if param in solution and is_supported_value(solution[param]):
                seen.add(value_key(solution[param]))
            yield solution
        for value in values:
            if value_key(value) in seen:
                continue
            yield {param: value}
        return

    tracker = CoverageTracker(entries)

    for solution in include:
        tracker.mark_solution_covered(solution)
        yield solution

    while not tracker.is_empty():
        solution = tracker.best_partial_solution()
        while len(solution) < len(entries):
            best = score_candidates(tracker, entries, solution).get_best_candidate()
            solution[best.param] = best.value
        tracker.mark_solution_covered(solution)
        yield solution


def pairwise(configuration: Mapping[str, Sequence[Any]],
             include: Optional[Iterable[Solution]] = None) -> Iterator[Solution]:
    """
    Lazily generates solutions covering every pair of values of every two
    parameters in `configuration`.

    `include` solutions are emitted first, unchanged and in order, and count
    toward coverage. The configuration is validated when this is called; the
    solutions themselves are computed one per pull.
    """
    entries = _config_entries(configuration)
    return _generate(entries, list(include) if include is not None else [])


class GenerationResult:
    def __init__(self, solutions: List[Solution], headers: List[str],
                 lb: int, included: int, passed_verification: bool,
                 missing_pairs: List[str]):
        self.solutions = solutions
        self.headers = headers
        self.lb = lb
        self.n = len(solutions)
        self.included = included
        self.passed_verification = passed_verification
        self.missing_pairs = missing_pairs


def generate_suite(configuration: Mapping[str, Sequence[Any]],
                   include: Optional[Iterable[Solution]] = None,
                   verify: bool = True,
                   max_cases: Optional[int] = None,
                   verbose: bool = False) -> GenerationResult:
    """Runs the generator to completion and checks the resulting suite."""
    report = validate_configuration(
        configuration, max_params=None, max_values_per_param=None, max_total_values=None
    )
    if not report.ok:
        raise InvalidConfigurationError(report.summary())

    include_list = list(include) if include is not None else []
    headers = list(configuration.keys())
    lb = compute_pairwise_lower_bound([len(v) for v in configuration.values()])

    generator = pairwise(configuration, include_list)
    if max_cases is not None:
        generator = islice(generator, max_cases + 1)

    solutions: List[Solution] = []
    for solution in generator:
        if max_cases is not None and len(solutions) == max_cases:
            raise GenerationLimitError(
                f"Suite needs more than {max_cases} cases; raise --max-cases to generate it."
            )
        solutions.append(solution)
        if verbose:
            kind = "included" if len(solutions) <= len(include_list) else "generated"
            print(f"Case {len(solutions)} ({kind}): {solution}", file=sys.stderr)

    passed = False
    missing: List[str] = []
    if verify:
        passed, missing = verify_pairwise_coverage(configuration, solutions, strict=False)
        if not passed:
            raise GenerationVerificationError(
                "Generated suite failed coverage verification.", missing_pairs=missing
            )

    if verbose:
        flag = " (PROVABLY MINIMUM)" if len(solutions) == lb else ""
        print(
            f"Generated {len(solutions)} cases ({len(include_list)} included), lower bound {lb}{flag}.",
            file=sys.stderr
        )

    return GenerationResult(solutions, headers, lb, len(include_list), passed, missing)

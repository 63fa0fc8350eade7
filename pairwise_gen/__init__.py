"""Greedy pairwise (2-way) covering array generator."""
__version__ = "1.0.0"

EXIT_SUCCESS = 0
EXIT_VALIDATION = 2
EXIT_GENERATION_ERR = 3
EXIT_VERIF_ERR = 4

from .candidates import Candidate, CandidateScorer, EmptyCandidateError
from .coverage import CoverageTracker, InvalidConfigurationError, Pair, UncoveredEntry
from .engine import (
    GenerationLimitError,
    GenerationResult,
    GenerationVerificationError,
    generate_suite,
    pairwise,
)
from .model import PairwiseModel, Parameter
from .preflight import validate_configuration
from .verify import verify_pairwise_coverage

__all__ = [
    "Candidate",
    "CandidateScorer",
    "CoverageTracker",
    "EmptyCandidateError",
    "GenerationLimitError",
    "GenerationResult",
    "GenerationVerificationError",
    "InvalidConfigurationError",
    "Pair",
    "PairwiseModel",
    "Parameter",
    "UncoveredEntry",
    "generate_suite",
    "pairwise",
    "validate_configuration",
    "verify_pairwise_coverage",
]

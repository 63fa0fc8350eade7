"""Computes the pairwise lower bound for a given configuration."""
from itertools import combinations
from typing import List


def compute_pairwise_lower_bound(counts: List[int]) -> int:
    """
    Computes the maximum product of any two parameter value counts.
    LB = max_{i<j} (v_i * v_j).
    A single parameter needs one solution per value, so its bound is its
    value count. An empty configuration has a bound of 0.
    """
    if not counts:
        return 0
    if len(counts) == 1:
        return counts[0]
    return max(a * b for a, b in combinations(counts, 2))

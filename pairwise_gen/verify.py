"""Pairwise coverage verification logic."""
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .model import is_supported_value, value_key
from .output import render_value

MAX_REPORTED_MISSING = 20


def _unique_values(values: Sequence[Any]) -> List[Any]:
    """Drops repeated values, keeping the first occurrence."""
    seen = set()
    unique = []
    for v in values:
        key = value_key(v)
        if key not in seen:
            seen.add(key)
            unique.append(v)
    return unique


def verify_pairwise_coverage(configuration: Mapping[str, Sequence[Any]],
                             solutions: Sequence[Mapping[str, Any]],
                             strict: bool = True) -> Tuple[bool, List[str]]:
    """
    Verifies that all possible pairs of parameter values are covered by `solutions`.

    Solutions may be partial; a pair only counts as covered by a solution that
    assigns both of its parameters. With `strict`, a value outside a
    parameter's declared values (including one that is not a boolean, number
    or string) raises ValueError; otherwise it is ignored. Repeated declared
    values count once. A single-parameter configuration is checked for
    one-value coverage.
    """
    names = list(configuration.keys())
    declared = [_unique_values(configuration[name]) for name in names]
    value_maps = [{value_key(v): idx for idx, v in enumerate(values)} for values in declared]

    # indices[row][param] = value index, or None when unassigned
    indices: List[List[Any]] = []
    for row_idx, solution in enumerate(solutions):
        row = []
        for i, name in enumerate(names):
            if name not in solution:
                row.append(None)
                continue
            value = solution[name]
            idx = value_maps[i].get(value_key(value)) if is_supported_value(value) else None
            if idx is None and strict:
                raise ValueError(
                    f"Value '{render_value(value)}' at row {row_idx+1} is not a valid "
                    f"value for parameter '{name}'."
                )
            row.append(idx)
        indices.append(row)

    missing_pairs: List[str] = []

    if len(names) == 1:
        seen = {row[0] for row in indices if row[0] is not None}
        for idx, v in enumerate(declared[0]):
            if idx not in seen:
                missing_pairs.append(f"({names[0]}: {render_value(v)})")
                if len(missing_pairs) >= MAX_REPORTED_MISSING:
                    break
        return len(missing_pairs) == 0, missing_pairs

    covered_pairs: Dict[Tuple[int, int], set] = {}
    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            covered_pairs[(i, j)] = {
                (row[i], row[j]) for row in indices
                if row[i] is not None and row[j] is not None
            }

    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            values1 = declared[i]
            values2 = declared[j]
            if len(covered_pairs[(i, j)]) == len(values1) * len(values2):
                continue

            for v1_idx, v1 in enumerate(values1):
                for v2_idx, v2 in enumerate(values2):
                    if (v1_idx, v2_idx) not in covered_pairs[(i, j)]:
                        missing_pairs.append(
                            f"({names[i]}: {render_value(v1)}, {names[j]}: {render_value(v2)})"
                        )
                        if len(missing_pairs) >= MAX_REPORTED_MISSING:
                            return False, missing_pairs

    return len(missing_pairs) == 0, missing_pairs

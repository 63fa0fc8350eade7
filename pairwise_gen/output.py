"""Formats generated solutions as a table, CSV or JSON."""
import csv
import io
import json
from typing import Any, Dict, List, Mapping, Optional, Sequence


def render_value(value: Any) -> str:
    """Renders a value the way model files write it (booleans as true/false)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _rows(headers: List[str], solutions: Sequence[Mapping[str, Any]]) -> List[List[str]]:
    # include entries may be partial; unassigned cells render empty
    return [
        [render_value(s[h]) if h in s else "" for h in headers]
        for s in solutions
    ]


def format_table(headers: List[str], solutions: Sequence[Mapping[str, Any]]) -> str:
    if not headers:
        return ""

    rows = _rows(headers, solutions)
    widths = [len(h) for h in headers]
    for row in rows:
        for col_idx, val in enumerate(row):
            widths[col_idx] = max(widths[col_idx], len(val))

    header_str = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    lines = [header_str.rstrip()]
    for row in rows:
        lines.append("  ".join(v.ljust(w) for v, w in zip(row, widths)).rstrip())

    return "\n".join(lines)


def format_csv(headers: List[str], solutions: Sequence[Mapping[str, Any]]) -> str:
    f = io.StringIO()
    writer = csv.writer(f)
    writer.writerow(headers)
    writer.writerows(_rows(headers, solutions))
    return f.getvalue()


def format_json(headers: List[str], solutions: Sequence[Mapping[str, Any]],
                metadata: Optional[Dict[str, Any]] = None) -> str:
    """JSON keeps typed values; keys follow `headers` order."""
    cases = [{h: s[h] for h in headers if h in s} for s in solutions]
    if metadata is None:
        return json.dumps(cases, indent=2)
    return json.dumps({"metadata": metadata, "test_cases": cases}, indent=2)

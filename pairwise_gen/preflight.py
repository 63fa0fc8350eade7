"""Shared structural preflight validation for generation paths."""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .model import is_supported_value, value_key


@dataclass(frozen=True)
class PreflightIssue:
    code: str
    message: str
    field: Optional[str] = None


@dataclass
class PreflightReport:
    issues: List[PreflightIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def summary(self) -> str:
        return "; ".join(issue.message for issue in self.issues)


def validate_configuration(
    configuration: Any,
    max_params: Optional[int] = 50,
    max_values_per_param: Optional[int] = 50,
    max_total_values: Optional[int] = 500,
) -> PreflightReport:
    """
    Validates structural generation preconditions without raising.
    A limit of None disables that check.
    """
    report = PreflightReport()
    seen_keys = set()

    def add_issue(code: str, message: str, field_name: Optional[str] = None) -> None:
        key = (code, field_name)
        if key in seen_keys:
            return
        seen_keys.add(key)
        report.issues.append(PreflightIssue(code=code, message=message, field=field_name))

    if configuration is None:
        add_issue("config_missing", "Input Error: Configuration is missing.", "configuration")
        return report

    if not isinstance(configuration, Mapping):
        add_issue(
            "config_malformed",
            "Input Error: Configuration must map parameter names to value lists.",
            "configuration",
        )
        return report

    param_count = len(configuration)
    if param_count < 1:
        add_issue("no_params", "Input Error: At least 1 parameter is required.", "configuration")
    if max_params is not None and param_count > max_params:
        add_issue(
            "limit_max_params",
            f"Model Safety Violation: Configuration has {param_count} parameters, exceeding limit of {max_params}.",
            "configuration",
        )

    total_values = 0

    for p_idx, (name, values) in enumerate(configuration.items()):
        p_field = f"configuration[{name!r}]"
        if not isinstance(name, str) or not name.strip():
            add_issue("empty_param_name", f"Input Error: Parameter #{p_idx + 1} has an empty name.", p_field)

        if values is None or isinstance(values, (str, bytes, Mapping)):
            add_issue(
                "values_missing",
                f"Input Error: Parameter #{p_idx + 1} has an invalid values list.",
                p_field,
            )
            continue

        try:
            values = list(values)
        except TypeError:
            add_issue(
                "values_missing",
                f"Input Error: Parameter #{p_idx + 1} has an invalid values list.",
                p_field,
            )
            continue

        value_count = len(values)
        total_values += value_count

        if value_count < 1:
            add_issue(
                "no_values",
                f"Input Error: Parameter #{p_idx + 1} must have at least 1 value.",
                p_field,
            )
        if max_values_per_param is not None and value_count > max_values_per_param:
            add_issue(
                "limit_max_values_per_param",
                (
                    f"Model Safety Violation: Parameter #{p_idx + 1} has {value_count} values, "
                    f"exceeding limit of {max_values_per_param}."
                ),
                p_field,
            )

        seen_values = set()
        for v_idx, value in enumerate(values):
            v_field = f"{p_field}[{v_idx}]"
            if not is_supported_value(value):
                add_issue(
                    "unsupported_value",
                    f"Input Error: Parameter #{p_idx + 1} has a value that is not a boolean, number or string.",
                    v_field,
                )
                continue
            if isinstance(value, str) and not value.strip():
                add_issue("empty_value", f"Input Error: Parameter #{p_idx + 1} contains an empty value.", v_field)
                continue

            key = value_key(value)
            if key in seen_values:
                add_issue(
                    "duplicate_value",
                    f"Input Error: Parameter #{p_idx + 1} contains duplicate values.",
                    p_field,
                )
            else:
                seen_values.add(key)

    if max_total_values is not None and total_values > max_total_values:
        add_issue(
            "limit_max_total_values",
            f"Model Safety Violation: Configuration has {total_values} total values, exceeding limit of {max_total_values}.",
            "configuration",
        )

    return report

"""Defines the pairwise model, parameters, value typing and serialization."""
import json
import re
from typing import Any, Dict, List, Mapping, Tuple, Union

Value = Union[bool, int, float, str]

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


def value_key(value: Any) -> Tuple[str, Any]:
    """
    Returns a hashable key that compares the way model values compare.
    Booleans never collide with numbers (True is not 1), numbers never
    collide with strings, and ints compare equal to floats of the same value.
    """
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    return (type(value).__name__, value)


def values_equal(a: Any, b: Any) -> bool:
    return value_key(a) == value_key(b)


def is_supported_value(value: Any) -> bool:
    return isinstance(value, (bool, int, float, str))


class Parameter:
    def __init__(self, name: str, values: List[Value]):
        self.name = name
        self.values = values


class PairwiseModel:
    def __init__(self):
        self.parameters: List[Parameter] = []

    def add_parameter(self, name: str, values: List[Value]) -> Parameter:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Parameter name cannot be empty.")
        name = name.strip()

        if any(p.name == name for p in self.parameters):
            raise ValueError(f"Duplicate parameter name detected: '{name}'")

        cleaned_values = []
        seen_values = set()
        for v in values:
            if not is_supported_value(v):
                raise ValueError(
                    f"Parameter '{name}' value {v!r} is not a boolean, number or string."
                )
            if isinstance(v, str):
                v = v.strip()
                if not v:
                    raise ValueError(f"Parameter '{name}' contains an empty value.")
                if ',' in v or '\t' in v or '\n' in v:
                    raise ValueError(f"Parameter '{name}' value '{v}' contains invalid characters (comma, tab, newline).")
            key = value_key(v)
            if key in seen_values:
                raise ValueError(f"Parameter '{name}' contains duplicate value: '{v}'")
            seen_values.add(key)
            cleaned_values.append(v)

        if not cleaned_values:
            raise ValueError(f"Parameter '{name}' must have at least 1 value.")

        param = Parameter(name, cleaned_values)
        self.parameters.append(param)
        return param

    def get_counts(self) -> List[int]:
        return [len(p.values) for p in self.parameters]

    def get_names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def to_configuration(self) -> Dict[str, List[Value]]:
        """Returns the ordered mapping consumed by `pairwise()`."""
        return {p.name: list(p.values) for p in self.parameters}

    def to_text(self) -> str:
        from .output import render_value
        lines = []
        for p in self.parameters:
            vals_str = ", ".join(render_value(v) for v in p.values)
            lines.append(f"{p.name}: {vals_str}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def coerce_value(text: str) -> Value:
        """
        Types a value written in a text model or a CSV cell.
        `true`/`false` (any case) become booleans, integer and decimal
        literals become numbers, anything else stays a string.
        """
        text = text.strip()
        lowered = text.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        if _INT_RE.match(text):
            return int(text)
        if _FLOAT_RE.match(text):
            return float(text)
        return text

    @classmethod
    def from_text(cls, content: str) -> "PairwiseModel":
        model = cls()
        for i, line in enumerate(content.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith('#') or line.startswith('//'):
                continue
            if ':' not in line:
                raise ValueError(f"Line {i}: Missing colon in parameter definition: '{line}'")

            name_part, vals_part = line.split(':', 1)
            name = name_part.strip()
            if not name:
                raise ValueError(f"Line {i}: Parameter name is empty.")

            raw_values = [v.strip() for v in vals_part.split(',')]
            if any(not v for v in raw_values):
                raise ValueError(f"Line {i}: Parameter '{name}' contains an empty value.")
            try:
                model.add_parameter(name, [cls.coerce_value(v) for v in raw_values])
            except ValueError as e:
                raise ValueError(f"Line {i}: {str(e)}")

        if not model.parameters:
            raise ValueError("Model must contain at least 1 parameter.")

        return model

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "PairwiseModel":
        if not isinstance(mapping, Mapping):
            raise ValueError("Model must be an object mapping parameter names to value lists.")
        model = cls()
        for name, values in mapping.items():
            if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
                raise ValueError(f"Parameter '{name}' must map to a list of values.")
            model.add_parameter(name, list(values))
        if not model.parameters:
            raise ValueError("Model must contain at least 1 parameter.")
        return model

    @classmethod
    def from_json(cls, content: str) -> "PairwiseModel":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Model JSON is invalid: {e}")
        return cls.from_mapping(data)

    def validate_limits(self, max_params: int = 50, max_values_per_param: int = 50, max_total_values: int = 500):
        """Throws ValueError if model size exceeds limits."""
        if len(self.parameters) > max_params:
            raise ValueError(f"Model has {len(self.parameters)} parameters, exceeding limit of {max_params}. Use --max-params to override.")

        total_vals = 0
        for p in self.parameters:
            count = len(p.values)
            if count > max_values_per_param:
                raise ValueError(f"Parameter '{p.name}' has {count} values, exceeding limit of {max_values_per_param}. Use --max-values-per-param to override.")
            total_vals += count

        if total_vals > max_total_values:
            raise ValueError(f"Model has {total_vals} total values, exceeding limit of {max_total_values}. Use --max-total-values to override.")

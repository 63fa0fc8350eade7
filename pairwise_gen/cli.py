"""Command-line interface."""
import sys
import argparse
import csv
import json
import os

from . import __version__
from .model import PairwiseModel, is_supported_value, value_key
from .output import format_table, format_csv, format_json
from .engine import (
    generate_suite,
    GenerationLimitError,
    GenerationVerificationError,
)
from .candidates import EmptyCandidateError
from .verify import verify_pairwise_coverage


def _read_text(path: str, what: str) -> str:
    from . import EXIT_VALIDATION

    if not os.path.exists(path):
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read()
    except UnicodeDecodeError:
        print(f"Validation error: {what} file is not valid UTF-8 text: {path}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)
    except OSError as e:
        print(f"Validation error: Could not read {what.lower()} file: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)


def load_model(path: str) -> PairwiseModel:
    from . import EXIT_VALIDATION

    content = _read_text(path, "Model")
    try:
        if path.endswith(".json"):
            return PairwiseModel.from_json(content)
        return PairwiseModel.from_text(content)
    except ValueError as e:
        print(f"Validation error: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)


def _load_json_cases(content: str, what: str):
    """Accepts both {"metadata": ..., "test_cases": [...]} and [...]."""
    from . import EXIT_VALIDATION

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        print(f"Validation error: {what} JSON is invalid: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)

    if isinstance(data, dict) and "test_cases" in data:
        cases = data["test_cases"]
    else:
        cases = data

    if not isinstance(cases, list):
        print(f"Validation error: {what} JSON must be an array or contain a 'test_cases' array.", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)
    for test_case in cases:
        if not isinstance(test_case, dict):
            print(f"Validation error: Each {what.lower()} JSON case must be an object.", file=sys.stderr)
            sys.exit(EXIT_VALIDATION)
        for name, value in test_case.items():
            if not is_supported_value(value):
                print(
                    f"Validation error: {what} JSON value for '{name}' must be a boolean, number or string.",
                    file=sys.stderr
                )
                sys.exit(EXIT_VALIDATION)
    return cases


def _load_csv_cases(content: str, model: PairwiseModel):
    """Types CSV cells with the text model rules, then matches them to model values."""
    from . import EXIT_VALIDATION

    names = model.get_names()
    typed = {p.name: {value_key(v): v for v in p.values} for p in model.parameters}

    try:
        reader = csv.reader(content.splitlines())
        headers = next(reader, None)
        if not headers:
            print("Error: Cases file is empty", file=sys.stderr)
            sys.exit(EXIT_VALIDATION)

        headers = [h.strip() for h in headers]
        missing = [n for n in names if n not in headers]
        if missing:
            print(f"Validation error: missing required columns: {', '.join(missing)}", file=sys.stderr)
            sys.exit(EXIT_VALIDATION)

        header_idx = {h: i for i, h in enumerate(headers)}
        cases = []
        for line in reader:
            if not any(cell.strip() for cell in line):
                continue
            case = {}
            for name in names:
                idx = header_idx[name]
                if idx >= len(line):
                    continue
                cell = line[idx].strip()
                value = PairwiseModel.coerce_value(cell)
                case[name] = typed[name].get(value_key(value), cell)
            cases.append(case)
        return cases
    except csv.Error as e:
        print(f"Validation error: Cases CSV is invalid: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)


def cmd_generate(args):
    from . import EXIT_SUCCESS, EXIT_VALIDATION, EXIT_GENERATION_ERR, EXIT_VERIF_ERR

    if args.max_cases is not None and args.max_cases < 1:
        print("Validation error: --max-cases must be >= 1.", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)

    model = load_model(args.model)
    try:
        model.validate_limits(
            max_params=args.max_params,
            max_values_per_param=args.max_values_per_param,
            max_total_values=args.max_total_values
        )
    except ValueError as e:
        print(f"Validation error: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)

    include = None
    if args.include:
        include = _load_json_cases(_read_text(args.include, "Include"), "Include")

    if args.dry_run:
        print("Model parsing valid.", file=sys.stderr)
        print("Parsed model:", file=sys.stderr)
        print("-" * 40, file=sys.stderr)
        print(model.to_text().strip(), file=sys.stderr)
        print("-" * 40, file=sys.stderr)
        print(f"Included cases: {len(include) if include else 0}", file=sys.stderr)
        sys.exit(EXIT_SUCCESS)

    try:
        res = generate_suite(
            model.to_configuration(),
            include=include,
            verify=args.verify,
            max_cases=args.max_cases,
            verbose=args.verbose
        )
    except GenerationVerificationError as e:
        print("Error: Coverage verification failed.", file=sys.stderr)
        for pair in e.missing_pairs[:20]:
            print(f" Missing pair: {pair}", file=sys.stderr)
        sys.exit(EXIT_VERIF_ERR)
    except GenerationLimitError as e:
        print(f"Validation error: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)
    except (ValueError, EmptyCandidateError) as e:
        print(f"Validation error: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)
    except Exception as e:
        print(f"Generation error: {e}", file=sys.stderr)
        if os.environ.get("PAIRWISEGEN_DEBUG") == "1":
            import traceback
            traceback.print_exc()
        sys.exit(EXIT_GENERATION_ERR)

    n = res.n
    print_output = True

    if not args.out and args.format != 'json' and n > args.max_output_cases and not args.print_all:
        print(f"Warning: Generated {n} tests exceeding --max-output-cases limit of {args.max_output_cases}.", file=sys.stderr)
        print("To see this output to console, pass --print-all or write to a file using --out FILE", file=sys.stderr)
        print_output = False

    out_str = ""
    if print_output or args.out:
        if args.format == 'table':
            out_str = format_table(res.headers, res.solutions)
        elif args.format == 'csv':
            out_str = format_csv(res.headers, res.solutions)
        elif args.format == 'json':
            metadata = {
                "lb": res.lb,
                "n": n,
                "included": res.included,
                "verified": res.passed_verification
            }
            out_str = format_json(res.headers, res.solutions, metadata=metadata)

    if args.out:
        with open(args.out, "w", encoding="utf-8", newline="") as f:
            f.write(out_str)
            if args.format == 'table':
                f.write('\n')
    elif print_output:
        print(out_str)

    sys.exit(EXIT_SUCCESS)


def cmd_verify(args):
    from . import EXIT_SUCCESS, EXIT_VALIDATION, EXIT_VERIF_ERR

    model = load_model(args.model)
    content = _read_text(args.cases, "Cases")

    if args.cases.endswith(".json"):
        cases = _load_json_cases(content, "Cases")
    else:
        cases = _load_csv_cases(content, model)

    try:
        passed, missing = verify_pairwise_coverage(model.to_configuration(), cases)
    except ValueError as e:
        print(f"Validation error: {e}", file=sys.stderr)
        sys.exit(EXIT_VALIDATION)

    if not passed:
        print("Error: Coverage verification failed.", file=sys.stderr)
        for pair in missing[:20]:
            print(f" Missing pair: {pair}", file=sys.stderr)
        sys.exit(EXIT_VERIF_ERR)

    print("Coverage verified successfully.", file=sys.stderr)
    sys.exit(EXIT_SUCCESS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pairwise-Gen: Greedy pairwise (2-way) test case generator.")
    subparsers = parser.add_subparsers(dest="command")

    gen_parser = subparsers.add_parser("generate", help="Generate tests from a model file")
    gen_parser.add_argument("--model", required=True, help="Path to the model file (text, or .json object)")
    gen_parser.add_argument("--include", help="JSON file with cases that must appear first in the output")
    gen_parser.add_argument("--format", choices=["table", "csv", "json"], default="table", help="Output format")
    gen_parser.add_argument("--out", help="Output file (prints to standard output if not provided)")
    gen_parser.add_argument("--max-cases", type=int, default=None, help="Fail if the suite needs more cases than this")

    # Limits and Boundaries
    gen_parser.add_argument("--max-params", type=int, default=50, help="Maximum number of parameters allowed (default: 50)")
    gen_parser.add_argument("--max-values-per-param", type=int, default=50, help="Maximum number of values per parameter allowed (default: 50)")
    gen_parser.add_argument("--max-total-values", type=int, default=500, help="Maximum total sum of all values allowed (default: 500)")
    gen_parser.add_argument("--max-output-cases", type=int, default=100000, help="Output block limit on table and csv prints (default: 100000)")

    # Booleans
    gen_parser.add_argument("--print-all", action="store_true", help="Force print output even if exceeding max bounds")
    gen_parser.add_argument("--dry-run", action="store_true", help="Parse and validate the model but do not generate")
    gen_parser.add_argument("--verify", action="store_true", dest="verify", help="Enable pair coverage verification (default)")
    gen_parser.add_argument("--no-verify", action="store_false", dest="verify", help="Disable pair coverage verification")
    gen_parser.add_argument("--verbose", action="store_true", help="Print each case to stderr as it is generated")
    gen_parser.set_defaults(verify=True)

    ver_parser = subparsers.add_parser("verify", help="Verify coverage of a generated suite")
    ver_parser.add_argument("--model", required=True, help="Path to the model file")
    ver_parser.add_argument("--cases", required=True, help="Path to the cases file (CSV or JSON)")

    subparsers.add_parser("version", help="Print version information")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "generate":
        cmd_generate(args)
    elif args.command == "verify":
        cmd_verify(args)
    elif args.command == "version":
        print(f"pairwise-gen {__version__}")
    else:
        parser.print_help()


if __name__ == "__main__":
    main()

"""CLI contract regression tests."""
import json
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
MODEL_PATH = REPO_ROOT / "examples" / "sample.model"
JSON_MODEL_PATH = REPO_ROOT / "examples" / "sample.json"
INCLUDE_PATH = REPO_ROOT / "examples" / "include.json"
CMD = [sys.executable, "-m", "pairwise_gen"]


def run_cli(args, timeout=30):
    return subprocess.run(CMD + args, capture_output=True, text=True, timeout=timeout, cwd=REPO_ROOT)


def assert_no_traceback(result):
    assert "Traceback (most recent call last)" not in result.stdout
    assert "Traceback (most recent call last)" not in result.stderr


def generate_csv_cases(tmp_path):
    csv_path = tmp_path / "generated_cases.csv"
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--format", "csv", "--out", str(csv_path)])
    assert result.returncode == 0, result.stderr
    assert csv_path.exists()
    assert_no_traceback(result)
    return csv_path


def test_generate_json_from_json_model():
    result = run_cli(["generate", "--model", str(JSON_MODEL_PATH), "--format", "json"])
    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["metadata"] == {"lb": 6, "n": 6, "included": 0, "verified": True}
    assert payload["test_cases"][0] == {"a": 1, "b": "a", "c": True}
    assert payload["test_cases"][-1] == {"a": 3, "b": "b", "c": False}


def test_generate_table_output():
    result = run_cli(["generate", "--model", str(JSON_MODEL_PATH)])
    assert result.returncode == 0, result.stderr
    lines = result.stdout.splitlines()
    assert lines[0] == "a  b  c"
    assert lines[1] == "1  a  true"
    assert len(lines) == 7


def test_generate_with_include_emits_includes_first():
    result = run_cli([
        "generate", "--model", str(MODEL_PATH), "--include", str(INCLUDE_PATH), "--format", "json",
    ])
    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    included = json.loads(INCLUDE_PATH.read_text(encoding="utf-8"))
    assert payload["metadata"]["included"] == 2
    assert payload["metadata"]["verified"] is True
    assert payload["test_cases"][:2] == included


def test_no_verify_sets_verified_false():
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--no-verify", "--format", "json"])
    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["metadata"]["verified"] is False


def test_json_output_stays_pure_when_verbose():
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--format", "json", "--verbose"])
    assert result.returncode == 0, result.stderr
    json.loads(result.stdout)
    assert "Case 1 (generated)" in result.stderr


def test_dry_run_does_not_generate():
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--dry-run"])
    assert result.returncode == 0
    assert result.stdout == ""
    assert "Model parsing valid." in result.stderr
    assert "Screen Size: 15, 17, 21" in result.stderr


def test_max_cases_exceeded_is_validation_error():
    result = run_cli(["generate", "--model", str(JSON_MODEL_PATH), "--max-cases", "3"])
    assert result.returncode == 2
    assert "more than 3 cases" in result.stderr
    assert_no_traceback(result)


def test_limits_are_enforced():
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--max-params", "2"])
    assert result.returncode == 2
    assert "exceeding limit of 2" in result.stderr


def test_missing_model_file():
    result = run_cli(["generate", "--model", "does-not-exist.model"])
    assert result.returncode == 2
    assert "File not found" in result.stderr


def test_malformed_model_is_validation_error(tmp_path):
    bad = tmp_path / "bad.model"
    bad.write_text("a: 1, 2\nnot a parameter\n", encoding="utf-8")
    result = run_cli(["generate", "--model", str(bad)])
    assert result.returncode == 2
    assert "Line 2: Missing colon" in result.stderr
    assert_no_traceback(result)


def test_invalid_include_json(tmp_path):
    bad = tmp_path / "include.json"
    bad.write_text('{"test_cases": 3}', encoding="utf-8")
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--include", str(bad)])
    assert result.returncode == 2
    assert "must be an array" in result.stderr


def test_version():
    result = run_cli(["version"])
    assert result.returncode == 0
    assert result.stdout.startswith("pairwise-gen ")


def test_verify_roundtrip_generated_csv_succeeds_no_traceback(tmp_path):
    csv_path = generate_csv_cases(tmp_path)

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(csv_path)])
    assert result.returncode == 0, result.stderr
    assert "Coverage verified successfully." in result.stderr
    assert_no_traceback(result)


def test_verify_roundtrip_generated_json_succeeds(tmp_path):
    json_path = tmp_path / "cases.json"
    result = run_cli(["generate", "--model", str(MODEL_PATH), "--format", "json", "--out", str(json_path)])
    assert result.returncode == 0, result.stderr

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(json_path)])
    assert result.returncode == 0, result.stderr


def test_verify_bom_header_csv_succeeds_no_traceback(tmp_path):
    csv_path = generate_csv_cases(tmp_path)
    bom_path = tmp_path / "generated_cases_bom.csv"
    bom_path.write_text(csv_path.read_text(encoding="utf-8"), encoding="utf-8-sig")

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(bom_path)])
    assert result.returncode == 0, result.stderr
    assert_no_traceback(result)


def test_verify_missing_required_column_returns_validation_no_traceback(tmp_path):
    missing_col = tmp_path / "missing_col.csv"
    with open(missing_col, "w", encoding="utf-8", newline="") as f:
        f.write("Language,Color,Display Mode,Fonts,Dark Mode\r\n")
        f.write("English,Monochrome,Text-only,Standard,true\r\n")

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(missing_col)])
    assert result.returncode == 2
    assert "Validation error: missing required columns: Screen Size" in result.stderr
    assert_no_traceback(result)


def test_verify_csv_blank_rows_ignored_no_traceback(tmp_path):
    csv_path = generate_csv_cases(tmp_path)
    blank_rows = tmp_path / "with_blank_rows.csv"
    lines = csv_path.read_text(encoding="utf-8").splitlines()
    with open(blank_rows, "w", encoding="utf-8", newline="") as f:
        for i, line in enumerate(lines):
            f.write(line + "\r\n")
            if i > 0:
                f.write("   \t  \r\n")

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(blank_rows)])
    assert result.returncode == 0, result.stderr
    assert_no_traceback(result)


def test_verify_invalid_cell_value_returns_validation_no_traceback(tmp_path):
    csv_path = generate_csv_cases(tmp_path)
    invalid_value_csv = tmp_path / "invalid_value.csv"
    lines = csv_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) > 1
    first_row = lines[1].split(",")
    first_row[0] = "INVALID_LANGUAGE"
    lines[1] = ",".join(first_row)
    with open(invalid_value_csv, "w", encoding="utf-8", newline="") as f:
        f.write("\r\n".join(lines) + "\r\n")

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(invalid_value_csv)])
    assert result.returncode == 2
    assert "Validation error:" in result.stderr
    assert_no_traceback(result)


def test_verify_incomplete_suite_returns_verification_error(tmp_path):
    csv_path = generate_csv_cases(tmp_path)
    truncated = tmp_path / "truncated.csv"
    lines = csv_path.read_text(encoding="utf-8").splitlines()
    truncated.write_text("\n".join(lines[:3]) + "\n", encoding="utf-8")

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(truncated)])
    assert result.returncode == 4
    assert "Missing pair:" in result.stderr


def test_verify_csv_extra_columns_ignored_if_required_present(tmp_path):
    csv_path = generate_csv_cases(tmp_path)
    extra_col_csv = tmp_path / "with_extra_col.csv"
    lines = csv_path.read_text(encoding="utf-8").splitlines()
    with open(extra_col_csv, "w", encoding="utf-8", newline="") as f:
        for i, line in enumerate(lines):
            if i == 0:
                f.write(line + ",Extra Column\r\n")
            else:
                f.write(line + ",extra\r\n")

    result = run_cli(["verify", "--model", str(MODEL_PATH), "--cases", str(extra_col_csv)])
    assert result.returncode == 0, result.stderr
    assert_no_traceback(result)


def test_verify_csv_cells_use_model_value_spelling(tmp_path):
    model = tmp_path / "spelled.model"
    model.write_text("flag: TRUE, FALSE\nn: 01, 2\n", encoding="utf-8")
    cases = tmp_path / "spelled.csv"
    cases.write_text("flag,n\nTRUE,01\nTRUE,2\nFALSE,01\nFALSE,2\n", encoding="utf-8")

    result = run_cli(["verify", "--model", str(model), "--cases", str(cases)])
    assert result.returncode == 0, result.stderr
    assert "Coverage verified successfully." in result.stderr


def test_verify_json_case_with_list_value_is_validation_error(tmp_path):
    model = tmp_path / "ab.model"
    model.write_text("a: 1, 2\nb: x, y\n", encoding="utf-8")
    cases = tmp_path / "cases.json"
    cases.write_text('[{"a": [1], "b": "x"}]', encoding="utf-8")

    result = run_cli(["verify", "--model", str(model), "--cases", str(cases)])
    assert result.returncode == 2
    assert "must be a boolean, number or string" in result.stderr
    assert_no_traceback(result)


def test_include_with_object_value_is_validation_error(tmp_path):
    include = tmp_path / "include.json"
    include.write_text('[{"a": {"nested": 1}, "b": "a"}]', encoding="utf-8")

    result = run_cli(["generate", "--model", str(JSON_MODEL_PATH), "--include", str(include)])
    assert result.returncode == 2
    assert "Include JSON value for 'a'" in result.stderr
    assert_no_traceback(result)

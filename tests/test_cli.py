import json
import sys
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from monk import monk_cli

GOOD_SOURCE = "let x = 1 + 2 * 3;"
BAD_SOURCE = "let = 5;"


def test_run_monk_string_input_prints(capsys: pytest.CaptureFixture[str]) -> None:
    errors = monk_cli.run_monk(source=GOOD_SOURCE, is_string=True)
    out = capsys.readouterr().out.strip()
    assert errors == []
    assert out == "let x = (1 + (2 * 3));"


def test_run_monk_file_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    file_path = tmp_path / "input.monk"
    file_path.write_text("add(1, 2)")
    monk_cli.run_monk(source=str(file_path))
    assert capsys.readouterr().out.strip() == "add(1, 2)"


def test_run_monk_rejects_other_extensions(tmp_path: Path) -> None:
    file_path = tmp_path / "input.txt"
    file_path.write_text(GOOD_SOURCE)
    with pytest.raises(ValueError, match="Only .monk files"):
        monk_cli.run_monk(source=str(file_path))


def test_run_monk_json_output(capsys: pytest.CaptureFixture[str]) -> None:
    monk_cli.run_monk(source="x;", is_string=True, json_output=True)
    data = json.loads(capsys.readouterr().out)
    assert data == {
        "kind": "Program",
        "statements": [
            {
                "kind": "ExpressionStatement",
                "expression": {"kind": "Identifier", "value": "x"},
            }
        ],
    }


def test_run_monk_tokens_output(capsys: pytest.CaptureFixture[str]) -> None:
    monk_cli.run_monk(source="let x", is_string=True, tokens=True)
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == ["1:1\tLET\t'let'", "1:5\tIDENT\t'x'", "1:6\tEOF\t'EOF'"]


def test_run_monk_pretty_output(capsys: pytest.CaptureFixture[str]) -> None:
    monk_cli.run_monk(source=GOOD_SOURCE, is_string=True, pretty=True)
    out = capsys.readouterr().out
    assert "Program" in out
    assert "=" * 20 in out


def test_run_monk_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output_path = tmp_path / "out.txt"
    monk_cli.run_monk(source=GOOD_SOURCE, is_string=True, out=str(output_path))
    assert output_path.read_text().strip() == "let x = (1 + (2 * 3));"
    assert capsys.readouterr().out == ""


def test_run_monk_output_file_pretty(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output_path = tmp_path / "out.txt"
    monk_cli.run_monk(source=GOOD_SOURCE, is_string=True, out=str(output_path), pretty=True)
    assert f"(wrote to {output_path})" in capsys.readouterr().out


def test_run_monk_reports_errors_on_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    errors = monk_cli.run_monk(source=BAD_SOURCE, is_string=True)
    captured = capsys.readouterr()
    assert errors == ["expected next token to be IDENT, got = instead"]
    assert "parser error: expected next token to be IDENT" in captured.err


def test_run_monk_max_depth(capsys: pytest.CaptureFixture[str]) -> None:
    errors = monk_cli.run_monk(source="((1))", is_string=True, max_depth=2)
    assert errors == ["maximum nesting depth of 2 exceeded"]


def test_main_with_string(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["monk", "-s", "a - b - c"])
    monk_cli.main()
    assert capsys.readouterr().out.strip() == "((a - b) - c)"


def test_main_exits_nonzero_on_parse_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["monk", "-s", BAD_SOURCE])
    with pytest.raises(SystemExit) as exc_info:
        monk_cli.main()
    assert exc_info.value.code == 1


def test_main_missing_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["monk", str(tmp_path / "missing.monk")])
    with pytest.raises(SystemExit) as exc_info:
        monk_cli.main()
    assert exc_info.value.code == 2
    assert "error:" in capsys.readouterr().err


def test_main_no_args_starts_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    called: dict[str, bool] = {}
    monkeypatch.setattr(sys, "argv", ["monk"])
    monkeypatch.setattr(
        "monk.monk_repl.start_repl", lambda **kwargs: called.setdefault("repl", True)
    )
    monk_cli.main()
    assert called == {"repl": True}


def test_main_repl_flag_passes_max_depth(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, int] = {}
    monkeypatch.setattr(sys, "argv", ["monk", "--repl", "--max-depth", "7"])
    monkeypatch.setattr(
        "monk.monk_repl.start_repl", lambda max_depth: seen.setdefault("depth", max_depth)
    )
    monk_cli.main()
    assert seen == {"depth": 7}


@given(st.sampled_from(["x", "1 + 2", "fn(a) { a }", "[1, 2][0]", "!true"]))  # type: ignore[misc]
@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
def test_run_monk_json_is_valid(capsys: pytest.CaptureFixture[str], source: str) -> None:
    capsys.readouterr()
    monk_cli.run_monk(source=source, is_string=True, json_output=True)
    data = json.loads(capsys.readouterr().out)
    assert data["kind"] == "Program"
    assert len(data["statements"]) == 1


def raise_recursion(*args: object, **kwargs: object) -> str:
    raise RecursionError("maximum recursion depth exceeded")


def test_run_monk_long_chain(capsys: pytest.CaptureFixture[str]) -> None:
    terms = 3000
    errors = monk_cli.run_monk(source=" + ".join(["1"] * terms), is_string=True)
    assert errors == []
    out = capsys.readouterr().out.strip()
    assert out == "(" * (terms - 1) + "1" + " + 1)" * (terms - 1)


def test_run_monk_json_too_deep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(monk_cli.json, "dumps", raise_recursion)
    with pytest.raises(ValueError, match="nests too deeply"):
        monk_cli.run_monk(source="1 + 1", is_string=True, json_output=True)


def test_main_json_too_deep_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(monk_cli.json, "dumps", raise_recursion)
    monkeypatch.setattr(sys, "argv", ["monk", "-s", " + ".join(["1"] * 3000), "-j"])
    with pytest.raises(SystemExit) as exc_info:
        monk_cli.main()
    assert exc_info.value.code == 2
    assert "error: program nests too deeply to serialise as JSON" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["0", "-3", "151", "1000", "deep"])  # type: ignore[misc]
def test_main_rejects_out_of_range_max_depth(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], value: str
) -> None:
    monkeypatch.setattr(sys, "argv", ["monk", "-s", "x", "--max-depth", value])
    with pytest.raises(SystemExit) as exc_info:
        monk_cli.main()
    assert exc_info.value.code == 2
    assert "--max-depth" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["1", "150"])  # type: ignore[misc]
def test_max_depth_arg_bounds(value: str) -> None:
    assert monk_cli.max_depth_arg(value) == int(value)

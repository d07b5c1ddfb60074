"""
Tests for weighbox - CLI and Solve Orchestrator.

These tests verify:
1. The orchestrator finds, verifies and reports trees
2. CLI exit codes for success, no tree, bad input and budget
3. Saved trees can be verified from the CLI
"""

import itertools
import json
import time

import pytest

from weighbox.cases import UNKNOWN_DIRECTIONS
from weighbox.cli.main import (
    EXIT_BUDGET,
    EXIT_INVALID,
    EXIT_NOT_FOUND,
    EXIT_OK,
    create_parser,
    format_summary,
    main,
    parse_directions,
)
from weighbox.cli.pipeline import run_solve, run_verify
from weighbox.domain import Difference, InvalidInputError, SearchBudgetExceeded


# =============================================================================
# TEST FIXTURES
# =============================================================================

@pytest.fixture
def ticking_clock(monkeypatch):
    """Monotonic clock that advances one second per reading."""
    ticks = itertools.count(0.0, 1.0)
    monkeypatch.setattr(time, "monotonic", lambda: next(ticks))


# =============================================================================
# ORCHESTRATOR TESTS
# =============================================================================

class TestRunSolve:
    """Test the solve orchestrator."""

    def test_twelve_products(self):
        result = run_solve(12, 3, UNKNOWN_DIRECTIONS)

        assert result.found
        assert result.failures == []
        assert result.case_count == 24
        assert result.least_k == 3
        assert result.depth <= 3
        assert result.conclusions == 24
        assert result.strategies_examined > 0

    def test_no_tree(self):
        result = run_solve(14, 3, UNKNOWN_DIRECTIONS)

        assert not result.found
        assert result.depth == 0
        assert result.conclusions == 0
        assert result.weighings == 0

    def test_accepts_generator_directions(self):
        result = run_solve(9, 2, (d for d in [Difference.LIGHTER]))

        assert result.found
        assert result.directions == (Difference.LIGHTER,)

    def test_invalid_input_raises(self):
        with pytest.raises(InvalidInputError):
            run_solve(1, 3, UNKNOWN_DIRECTIONS)

    def test_budget_raises(self):
        with pytest.raises(SearchBudgetExceeded):
            run_solve(12, 3, UNKNOWN_DIRECTIONS, max_strategies=1)

    def test_summary_mentions_first_weighing(self):
        result = run_solve(9, 2, [Difference.LIGHTER])

        summary = format_summary(result)
        assert "First weighing:      [1 2 3] vs [4 5 6]" in summary
        assert "Cases:               9" in summary

    def test_run_verify(self):
        result = run_solve(9, 2, [Difference.LIGHTER])

        checked, failures = run_verify(result.tree, 9, [Difference.LIGHTER])
        assert checked == 9
        assert failures == []

        checked, failures = run_verify(result.tree, 9, UNKNOWN_DIRECTIONS)
        assert checked == 18
        assert len(failures) == 9


# =============================================================================
# CLI TESTS
# =============================================================================

class TestParser:
    """Test argument parsing."""

    def test_directions_default_to_both(self):
        assert parse_directions(None) == UNKNOWN_DIRECTIONS

    def test_directions_parsed(self):
        assert parse_directions(["lighter"]) == (Difference.LIGHTER,)

    def test_direction_choices_enforced(self):
        parser = create_parser()

        with pytest.raises(SystemExit):
            parser.parse_args(["solve", "12", "3", "--direction", "normal"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_OK
        assert "usage" in capsys.readouterr().out.lower()


class TestSolveCommand:
    """Test `weighbox solve`."""

    def test_writes_tree(self, tmp_path, capsys):
        path = tmp_path / "nine.json"

        code = main(["solve", "9", "2", "--direction", "lighter", "-o", str(path)])

        assert code == EXIT_OK
        assert json.loads(path.read_text(encoding="utf-8"))["type"] == "strategy"
        assert "Verified against all 9 cases" in capsys.readouterr().out

    def test_default_output_name(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert main(["solve", "12", "3"]) == EXIT_OK
        assert (tmp_path / "12-3-heavier_lighter.output.json").exists()

    def test_no_tree(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert main(["solve", "14", "3"]) == EXIT_NOT_FOUND
        assert "No strategy resolves 28 cases" in capsys.readouterr().out
        assert not list(tmp_path.iterdir())

    def test_invalid_input(self, capsys):
        assert main(["solve", "1", "3"]) == EXIT_INVALID
        assert "n_too_small" in capsys.readouterr().out

    def test_budget_exceeded(self, tmp_path, capsys):
        path = tmp_path / "never.json"

        code = main(["solve", "12", "3", "--max-strategies", "1", "-o", str(path)])

        assert code == EXIT_BUDGET
        assert not path.exists()

    def test_timeout_exceeded(self, tmp_path, ticking_clock, capsys):
        path = tmp_path / "never.json"

        code = main(["solve", "12", "3", "--timeout", "0.5", "-o", str(path)])

        assert code == EXIT_BUDGET
        assert "timeout of 0.5s reached" in capsys.readouterr().out
        assert not path.exists()

    @pytest.mark.parametrize("limit", [
        ["--max-strategies", "0"],
        ["--max-strategies", "-3"],
        ["--timeout", "0"],
        ["--timeout", "-1"],
    ])
    def test_non_positive_limits_rejected(self, limit, capsys):
        assert main(["solve", "12", "3", *limit]) == EXIT_INVALID
        assert "invalid_budget" in capsys.readouterr().out


class TestVerifyCommand:
    """Test `weighbox verify`."""

    def test_verify_saved_tree(self, tmp_path, capsys):
        path = tmp_path / "nine.json"
        main(["solve", "9", "2", "--direction", "lighter", "-o", str(path)])

        code = main(["verify", str(path), "9", "--direction", "lighter"])

        assert code == EXIT_OK
        assert "all 9 cases identified" in capsys.readouterr().out

    def test_verify_wrong_case_space(self, tmp_path, capsys):
        path = tmp_path / "nine.json"
        main(["solve", "9", "2", "--direction", "lighter", "-o", str(path)])
        capsys.readouterr()

        code = main(["verify", str(path), "10", "--direction", "lighter"])

        assert code == EXIT_NOT_FOUND
        assert "FAILED: 1 of 10" in capsys.readouterr().out

    def test_verify_missing_file(self, tmp_path):
        assert main(["verify", str(tmp_path / "missing.json"), "9"]) == EXIT_INVALID

    def test_verify_invalid_n(self, tmp_path):
        path = tmp_path / "nine.json"
        main(["solve", "9", "2", "--direction", "lighter", "-o", str(path)])

        assert main(["verify", str(path), "1"]) == EXIT_INVALID

    def test_verify_binary_file(self, tmp_path, capsys):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        assert main(["verify", str(path), "3"]) == EXIT_INVALID
        assert "Could not load tree" in capsys.readouterr().out

    def test_verify_deeply_nested_file(self, tmp_path):
        path = tmp_path / "deep.json"
        path.write_text("[" * 100_000 + "]" * 100_000, encoding="utf-8")

        assert main(["verify", str(path), "3"]) == EXIT_INVALID

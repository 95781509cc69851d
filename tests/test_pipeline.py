"""Smoke tests for the command-line entry point."""

from pathlib import Path

import pandas as pd
import pytest

from revenue_forecast.forecasting.pipeline import build_parser, main


def _write_history(tmp_path: Path, periods: int = 12) -> Path:
    csv_path = tmp_path / "revenue.csv"
    pd.DataFrame(
        {
            "date": pd.date_range("2023-01-01", periods=periods, freq="MS"),
            "revenue": [20_000 + 400 * i for i in range(periods)],
            "cases_completed": [40 + i for i in range(periods)],
        }
    ).to_csv(csv_path, index=False)
    return csv_path


def test_parser_method_choices() -> None:
    """Test that every registered strategy and the ensemble can be selected."""
    parser = build_parser()
    for method in ["ensemble", "moving_average", "exponential_smoothing", "linear_regression", "arima"]:
        assert parser.parse_args(["--file", "x.csv", "--method", method]).method == method
    with pytest.raises(SystemExit):
        parser.parse_args(["--file", "x.csv", "--method", "prophet"])


def test_main_runs_forecast(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test an end-to-end run on a small CSV."""
    csv_path = _write_history(tmp_path)

    main(["--file", str(csv_path), "--clinic-id", "clinic-3", "--periods", "3", "--with-arima"])

    out = capsys.readouterr().out
    assert "[OK] Loaded 12 periods" in out
    assert "arima" in out
    assert "Revenue Forecast - clinic-3 (ensemble)" in out
    assert "[OK] Forecast completed successfully" in out


def test_main_single_method_ascii(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test a single-method run without seasonality in ASCII mode."""
    csv_path = _write_history(tmp_path)

    main(
        [
            "--file",
            str(csv_path),
            "--method",
            "linear_regression",
            "--no-seasonality",
            "--currency",
            "gbp",
            "--ascii",
        ]
    )

    out = capsys.readouterr().out
    assert "(linear_regression)" in out
    assert "Forecasted revenue of GBP " in out


def test_main_reports_insufficient_data(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that library errors exit with status 1."""
    csv_path = _write_history(tmp_path, periods=3)

    with pytest.raises(SystemExit) as exc:
        main(["--file", str(csv_path)])

    assert exc.value.code == 1
    assert "[ERROR] Forecast failed: Minimum 6 data points required, got 3" in capsys.readouterr().out


def test_main_missing_file(tmp_path: Path) -> None:
    """Test that a missing CSV exits with status 1."""
    with pytest.raises(SystemExit) as exc:
        main(["--file", str(tmp_path / "nope.csv")])
    assert exc.value.code == 1

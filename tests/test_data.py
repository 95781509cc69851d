"""Tests for CSV loading and input preparation."""

from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from revenue_forecast.exceptions import DataQualityError
from revenue_forecast.forecasting.data import build_revenue_input, load_revenue_history
from revenue_forecast.forecasting.types import Granularity


def _write_csv(path: Path, rows: list[dict]) -> Path:
    csv_path = path / "revenue.csv"
    pd.DataFrame(rows).to_csv(csv_path, index=False)
    return csv_path


def test_load_revenue_history_sorts_by_date(tmp_path: Path) -> None:
    """Test that rows are parsed and sorted chronologically."""
    csv_path = _write_csv(
        tmp_path,
        [
            {"date": "2024-03-01", "revenue": 300},
            {"date": "2024-01-01", "revenue": 100},
            {"date": "2024-02-01", "revenue": 200},
        ],
    )
    df = load_revenue_history(csv_path)

    assert df["revenue"].tolist() == [100, 200, 300]
    assert pd.api.types.is_datetime64_any_dtype(df["date"])


def test_load_revenue_history_missing_file(tmp_path: Path) -> None:
    """Test that a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_revenue_history(tmp_path / "missing.csv")


def test_load_revenue_history_missing_column(tmp_path: Path) -> None:
    """Test that required columns are checked."""
    csv_path = _write_csv(tmp_path, [{"date": "2024-01-01", "amount": 100}])
    with pytest.raises(DataQualityError, match="Missing required columns"):
        load_revenue_history(csv_path)


def test_load_revenue_history_bad_revenue(tmp_path: Path) -> None:
    """Test that non-numeric revenue is rejected."""
    csv_path = _write_csv(
        tmp_path,
        [{"date": "2024-01-01", "revenue": "100"}, {"date": "2024-02-01", "revenue": "n/a"}],
    )
    with pytest.raises(DataQualityError, match="Non-numeric revenue"):
        load_revenue_history(csv_path)


def test_build_revenue_input_defaults() -> None:
    """Test conversion with only the required columns."""
    df = pd.DataFrame(
        {"date": pd.to_datetime(["2024-02-01", "2024-01-01"]), "revenue": [2000.0, 1000.0]}
    )
    history = build_revenue_input(df, clinic_id="clinic-9")

    assert history.clinic_id == "clinic-9"
    assert history.granularity is Granularity.MONTHLY
    assert history.currency == "EUR"
    assert [p.date for p in history.data_points] == [date(2024, 1, 1), date(2024, 2, 1)]
    assert [p.revenue for p in history.data_points] == [1000.0, 2000.0]
    assert history.data_points[0].cases_completed == 0
    assert history.data_points[0].collection_rate is None


def test_build_revenue_input_optional_columns() -> None:
    """Test that optional columns are carried over and NaN becomes None."""
    df = pd.DataFrame(
        {
            "date": ["2024-01-07", "2024-01-14"],
            "revenue": [500.0, 750.0],
            "cases_completed": [4, None],
            "new_patients": [1, 2],
            "collection_rate": [92.5, None],
        }
    )
    history = build_revenue_input(df, clinic_id="c", granularity="weekly", currency="USD")

    first, second = history.data_points
    assert history.granularity is Granularity.WEEKLY
    assert history.currency == "USD"
    assert first.cases_completed == 4
    assert second.cases_completed == 0
    assert second.new_patients == 2
    assert first.collection_rate == 92.5
    assert second.collection_rate is None
    assert first.high_value_revenue is None


def test_build_revenue_input_duplicate_dates() -> None:
    """Test that repeated periods are rejected."""
    df = pd.DataFrame({"date": ["2024-01-01", "2024-01-01"], "revenue": [1.0, 2.0]})
    with pytest.raises(DataQualityError, match="Duplicate periods"):
        build_revenue_input(df, clinic_id="c")


def test_build_revenue_input_unknown_granularity() -> None:
    """Test that an unknown granularity is rejected."""
    df = pd.DataFrame({"date": ["2024-01-01"], "revenue": [1.0]})
    with pytest.raises(DataQualityError, match="Unknown granularity"):
        build_revenue_input(df, clinic_id="c", granularity="hourly")

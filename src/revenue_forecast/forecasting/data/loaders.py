"""Data loading utilities for the forecasting pipeline."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from revenue_forecast.exceptions import DataQualityError

REQUIRED_COLUMNS = ["date", "revenue"]


def load_revenue_history(csv_path: Path | str) -> pd.DataFrame:
    """Load per-period revenue from a CSV file.

    The file holds one row per already aggregated period with at least the
    columns ``date`` and ``revenue``. Optional columns (``cases_completed``,
    ``new_patients``, ``collection_rate``, ``avg_case_value``,
    ``high_value_revenue``) are kept as they are.

    Args:
        csv_path: Path to the CSV file.

    Returns:
        DataFrame sorted by date, with ``date`` parsed to datetimes.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        DataQualityError: If required columns are missing or dates/revenue
            cannot be parsed.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Revenue data not found at {csv_path}")

    df = pd.read_csv(csv_path)
    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        raise DataQualityError(
            f"Missing required columns in {csv_path.name}: {missing_columns}. "
            f"Required: {REQUIRED_COLUMNS}"
        )

    try:
        df["date"] = pd.to_datetime(df["date"])
    except (ValueError, TypeError) as e:
        raise DataQualityError(f"Could not parse dates in {csv_path.name}: {e}") from e

    df["revenue"] = pd.to_numeric(df["revenue"], errors="coerce")
    if df["revenue"].isna().any():
        bad_rows = df.index[df["revenue"].isna()].tolist()
        raise DataQualityError(f"Non-numeric revenue in {csv_path.name} at rows {bad_rows}")

    return df.sort_values("date").reset_index(drop=True)

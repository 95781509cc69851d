"""Data preparation utilities for revenue forecasting.

This module turns tabular revenue data into the immutable input records
consumed by the forecasting service.
"""

from __future__ import annotations

import pandas as pd

from revenue_forecast.exceptions import DataQualityError
from revenue_forecast.forecasting.types import (
    Granularity,
    HistoricalRevenueInput,
    HistoricalRevenuePoint,
)

_COUNT_COLUMNS = ["cases_completed", "new_patients"]
_OPTIONAL_AMOUNT_COLUMNS = ["collection_rate", "avg_case_value", "high_value_revenue"]


def _optional_float(value: object) -> float | None:
    if pd.isna(value):
        return None
    return float(value)


def build_revenue_input(
    df: pd.DataFrame,
    clinic_id: str,
    granularity: Granularity | str = Granularity.MONTHLY,
    currency: str = "EUR",
) -> HistoricalRevenueInput:
    """Build a HistoricalRevenueInput from one row per period.

    Missing count columns are treated as 0 and missing optional amounts as None.

    Args:
        df: DataFrame with columns 'date' and 'revenue', plus any optional columns.
        clinic_id: Identifier of the clinic the series belongs to.
        granularity: Period length of each row.
        currency: ISO currency code of the revenue amounts.

    Returns:
        HistoricalRevenueInput with points in chronological order.

    Raises:
        DataQualityError: If required columns are missing or a date repeats.
    """
    missing_columns = [col for col in ("date", "revenue") if col not in df.columns]
    if missing_columns:
        raise DataQualityError(f"Missing required columns: {missing_columns}")

    data = df.copy()
    data["date"] = pd.to_datetime(data["date"])
    duplicated = data.loc[data["date"].duplicated(), "date"]
    if not duplicated.empty:
        raise DataQualityError(
            f"Duplicate periods for {clinic_id}: {[d.date().isoformat() for d in duplicated]}"
        )

    for col in _COUNT_COLUMNS:
        data[col] = data[col].fillna(0).astype(int) if col in data.columns else 0
    for col in _OPTIONAL_AMOUNT_COLUMNS:
        if col not in data.columns:
            data[col] = None

    points = [
        HistoricalRevenuePoint(
            date=row.date.date(),
            revenue=float(row.revenue),
            cases_completed=int(row.cases_completed),
            new_patients=int(row.new_patients),
            collection_rate=_optional_float(row.collection_rate),
            avg_case_value=_optional_float(row.avg_case_value),
            high_value_revenue=_optional_float(row.high_value_revenue),
        )
        for row in data.sort_values("date").itertuples(index=False)
    ]

    return HistoricalRevenueInput(
        clinic_id=clinic_id,
        data_points=tuple(points),
        granularity=granularity,
        currency=currency,
    )

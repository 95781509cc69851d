"""Console output formatting utilities."""

from __future__ import annotations

import re

from revenue_forecast.forecasting.analysis import CURRENCY_SYMBOLS
from revenue_forecast.forecasting.types import RevenueForecastOutput


def sanitize_for_console(text: str) -> str:
    """Make text safe for consoles without Unicode support (e.g. Windows cp1252).

    Non-ASCII currency symbols are replaced by their ISO codes, any other
    non-ASCII characters are dropped.

    Args:
        text: Text that may contain currency symbols or other non-ASCII characters

    Returns:
        ASCII-only text
    """
    for code, symbol in CURRENCY_SYMBOLS.items():
        if not symbol.isascii():
            text = text.replace(symbol, f"{code} ")
    return re.sub(r"[^\x00-\x7F]+", "", text)


def _money(amount: float) -> str:
    return f"{amount:,.0f}"


def format_forecast_for_console(output: RevenueForecastOutput, ascii_only: bool = False) -> str:
    """Build a human-readable representation of a forecast for console output.

    Args:
        output: Result of RevenueForecastingService.forecast().
        ascii_only: If True, the text is passed through sanitize_for_console().

    Returns:
        Multi-line text with one row per forecast period, totals, trend and
        recommended actions.
    """
    if not output.forecasts:
        return "No forecasts available."

    lines = []
    lines.append(f"Revenue Forecast - {output.clinic_id} ({output.method})")
    lines.append("=" * 60)
    lines.append("")

    level = int(round(output.total_confidence_interval.level * 100))
    lines.append(f"{'Period':<12}{'Predicted':>14}{f'{level}% interval':>28}")
    lines.append("-" * 60)
    for point in output.forecasts:
        interval = point.confidence_interval
        flag = " *" if point.high_uncertainty else ""
        lines.append(
            f"{point.date.isoformat():<12}{_money(point.predicted):>14}"
            f"{_money(interval.lower) + ' - ' + _money(interval.upper):>28}{flag}"
        )
    lines.append("-" * 60)
    total = output.total_confidence_interval
    lines.append(
        f"{'Total':<12}{_money(output.total_predicted_revenue):>14}"
        f"{_money(total.lower) + ' - ' + _money(total.upper):>28}"
    )
    if any(point.high_uncertainty for point in output.forecasts):
        lines.append("* high uncertainty")
    lines.append("")

    trend = output.trend_analysis
    fit = output.model_fit
    lines.append(
        f"Trend: {trend.direction.value} ({trend.monthly_growth_rate:+.1f}% per period, "
        f"{trend.annualized_growth_rate:+.1f}% annualized, volatility {trend.volatility:.1f}%)"
    )
    lines.append(
        f"Confidence: {output.confidence_level.value} "
        f"(R2 {fit.r_squared:.2f}, MAPE {fit.mape:.1f}%, {fit.data_points_used} points)"
    )
    lines.append("")
    lines.append(output.summary)

    if output.insights:
        lines.append("")
        lines.append("Insights:")
        for insight in output.insights:
            lines.append(f"  - {insight}")

    if output.recommended_actions:
        lines.append("")
        lines.append("Recommended actions:")
        for action in output.recommended_actions:
            lines.append(f"  - {action}")

    text = "\n".join(lines)
    return sanitize_for_console(text) if ascii_only else text

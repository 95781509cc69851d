"""Name -> strategy registry.

Strategies register a shared instance under their ``name``. The service looks
names up here when a method is not among its own strategies.
"""

from __future__ import annotations

import logging

from revenue_forecast.exceptions import ConfigError
from revenue_forecast.forecasting.config import ENSEMBLE_METHOD
from revenue_forecast.forecasting.models.arima import ARIMAStrategy
from revenue_forecast.forecasting.models.base import ForecastingStrategy
from revenue_forecast.forecasting.models.exponential_smoothing import ExponentialSmoothingStrategy
from revenue_forecast.forecasting.models.linear_regression import LinearRegressionStrategy
from revenue_forecast.forecasting.models.moving_average import MovingAverageStrategy

logger = logging.getLogger(__name__)

_REGISTRY: dict[str, ForecastingStrategy] = {}


def register_strategy(strategy: ForecastingStrategy) -> None:
    """Register ``strategy`` under its name, replacing any previous entry.

    Raises:
        ConfigError: If the name is empty or reserved for the ensemble.
    """
    name = getattr(strategy, "name", "")
    if not name:
        raise ConfigError(f"Strategy {strategy!r} has no name")
    if name == ENSEMBLE_METHOD:
        raise ConfigError(f"Strategy name {ENSEMBLE_METHOD!r} is reserved")
    if name in _REGISTRY:
        logger.debug("Replacing registered strategy %s", name)
    _REGISTRY[name] = strategy


def get_strategy_by_name(name: str) -> ForecastingStrategy:
    """Return the registered strategy called ``name``.

    Raises:
        ConfigError: If no strategy is registered under that name.
    """
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ConfigError(
            f"Unknown forecasting method {name!r}. "
            f"Available: {registered_strategy_names() + [ENSEMBLE_METHOD]}"
        ) from None


def registered_strategy_names() -> list[str]:
    return sorted(_REGISTRY)


def create_default_strategies() -> list[ForecastingStrategy]:
    """Strategies an ensemble runs by default (ARIMA is opt-in)."""
    return [
        MovingAverageStrategy(),
        ExponentialSmoothingStrategy(),
        LinearRegressionStrategy(),
    ]


for _strategy in (*create_default_strategies(), ARIMAStrategy()):
    register_strategy(_strategy)

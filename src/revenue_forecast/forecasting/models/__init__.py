"""Forecasting strategies.

Adding a strategy
=================

1. Subclass ``ForecastingStrategy`` and give it a unique ``name``:
   ```python
   class MyStrategy(ForecastingStrategy):
       name = "my_strategy"

       def calculate(self, history, values, config) -> StrategyResult:
           ...
   ```

2. Build every horizon point through ``generate_forecast_points`` and
   ``build_forecast_point`` from ``models.utils``. They derive the dates from
   ``config.granularity`` and clamp ``0 <= lower <= predicted <= upper``.

3. Return a ``ModelDebugInfo`` in ``StrategyResult.debug``:
   ```python
   debug=ModelDebugInfo(
       model_name=self.name,
       version="v1",  # optional
       data={"order": (1, 1, 1), "aic": 123.4},
   )
   ```
   Keep ``data`` JSON-like. It reaches callers as
   ``RevenueForecastOutput.debug[name]`` when ``forecast(..., debug=True)``.

4. Important constraints:
   - calculate() must not keep per-call state on the instance
   - numerical trouble degrades the fit statistics, it never raises
   - exactly ``config.forecast_periods`` points are returned

5. Make it available by name with ``register_strategy(MyStrategy())``, or to a
   single service with ``service.add_strategy(MyStrategy())``.
"""

from revenue_forecast.forecasting.models.arima import ARIMAStrategy
from revenue_forecast.forecasting.models.base import ForecastingStrategy, StrategyResult
from revenue_forecast.forecasting.models.exponential_smoothing import ExponentialSmoothingStrategy
from revenue_forecast.forecasting.models.linear_regression import LinearRegressionStrategy
from revenue_forecast.forecasting.models.moving_average import MovingAverageStrategy
from revenue_forecast.forecasting.models.registry import (
    create_default_strategies,
    get_strategy_by_name,
    register_strategy,
    registered_strategy_names,
)

__all__ = [
    "ARIMAStrategy",
    "ExponentialSmoothingStrategy",
    "ForecastingStrategy",
    "LinearRegressionStrategy",
    "MovingAverageStrategy",
    "StrategyResult",
    "create_default_strategies",
    "get_strategy_by_name",
    "register_strategy",
    "registered_strategy_names",
]

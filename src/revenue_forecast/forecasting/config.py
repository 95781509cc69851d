"""Configuration constants for revenue forecasting."""

# Default per-call forecast settings
DEFAULT_METHOD = "ensemble"
DEFAULT_FORECAST_PERIODS = 6
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_MOVING_AVERAGE_WINDOW = 3
DEFAULT_SMOOTHING_ALPHA = 0.3
DEFAULT_MIN_DATA_POINTS = 6
DEFAULT_MODEL_VERSION = "2.0.0"

# Name used to request the weighted combination of all registered strategies
ENSEMBLE_METHOD = "ensemble"

# Ensemble weights are max(floor, R^2), normalised
ENSEMBLE_WEIGHT_FLOOR = 0.1

# Holt's trend smoothing coefficient
HOLT_BETA = 0.1

# ARIMA order search and fitting
ARIMA_MIN_SEARCH_POINTS = 12
ARIMA_SMALL_SAMPLE_ORDER = (1, 1, 1)
ARIMA_FALLBACK_ORDER = (2, 1, 2)
ARIMA_CANDIDATE_ORDERS = (
    (1, 1, 1),
    (2, 1, 1),
    (1, 1, 2),
    (2, 1, 2),
    (1, 0, 1),
    (2, 0, 2),
)
ARIMA_MAX_ITERATIONS = 100
ARIMA_TOLERANCE = 1e-6
ARIMA_MA_LEARNING_RATE = 0.01
ARIMA_MA_BOUND = 0.99
ARIMA_INITIAL_MA = 0.1

# Pivots smaller than this are treated as singular
PIVOT_EPSILON = 1e-10

# Trend classification thresholds (percent)
VOLATILITY_THRESHOLD = 30.0
GROWTH_THRESHOLD = 2.0

# Confidence classification
HIGH_CONFIDENCE_R_SQUARED = 0.8
HIGH_CONFIDENCE_MIN_POINTS = 12
MEDIUM_CONFIDENCE_R_SQUARED = 0.6
MEDIUM_CONFIDENCE_MIN_POINTS = 6

# Recommended-action thresholds
FAST_GROWTH_ANNUAL_RATE = 20.0
STEEP_DECLINE_ANNUAL_RATE = -15.0
LARGE_REVENUE_TOTAL = 500_000

# Forecast-vs-actual accuracy
DEFAULT_RECALIBRATION_THRESHOLD = 15.0

# Monthly seasonal multipliers for clinic demand:
# Q1 post-holiday recovery, Q2 cosmetic peak, Q3 summer slowdown,
# Q4 pre-holiday peak followed by a December decline.
DEFAULT_SEASONAL_FACTORS = {
    "january": 0.90,
    "february": 0.95,
    "march": 1.05,
    "april": 1.10,
    "may": 1.10,
    "june": 1.05,
    "july": 0.90,
    "august": 0.85,
    "september": 1.00,
    "october": 1.05,
    "november": 1.10,
    "december": 0.95,
}

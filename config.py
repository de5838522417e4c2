# config.py

# Default values
DEFAULT_BTC_STACK = 5.0
DEFAULT_SAVINGS_PCT = 65.0
DEFAULT_INVESTMENTS_PCT = 25.0
DEFAULT_SPECULATION_PCT = 10.0
DEFAULT_INVESTMENTS_START_YIELD = 30.0
DEFAULT_INVESTMENTS_END_YIELD = 0.0
DEFAULT_SPECULATION_START_YIELD = 40.0
DEFAULT_SPECULATION_END_YIELD = 0.0
DEFAULT_ANNUAL_REALLOCATION = True
DEFAULT_TIME_HORIZON = 20
DEFAULT_ACTIVATION_YEAR = 10
DEFAULT_INCOME_ALLOCATION_PCT = 10.0
DEFAULT_INCOME_REINVESTMENT_PCT = 30.0
DEFAULT_STARTING_EXPENSES = 50000.0
DEFAULT_EXCHANGE_RATE = 100000.0
DEFAULT_PRICE_CRASH_PCT = 0.0
DEFAULT_ECONOMIC_SCENARIO = "debasement"

# Leverage defaults
DEFAULT_COLLATERAL_PCT = 50.0
DEFAULT_LTV_RATIO = 40.0
DEFAULT_LOAN_RATE = 7.0
DEFAULT_LOAN_TERM_YEARS = 10
DEFAULT_INTEREST_ONLY = True

# Loan-to-value at which collateral is liquidated
LIQUIDATION_LTV = 80.0

# Liquidation buffer thresholds (percent above liquidation price)
RISK_BUFFER_LOW = 100.0
RISK_BUFFER_MODERATE = 50.0
RISK_BUFFER_HIGH = 25.0

# Rate curve shapes
PRICE_CURVE_EXPONENT = 1.5
YIELD_CURVE_EXPONENT = 1.5
INFLATION_CURVE_EXPONENT = 2.0
DECAY_FACTOR = 0.85
DECAY_PERIOD_YEARS = 4.0
DECAY_FLOOR = 5.0

# Input validation ranges
TIME_HORIZON_RANGE = (1, 100)
BTC_STACK_MAX = 1000000.0
YIELD_MAX = 1000.0
ALLOCATION_TOTAL = 100.0

# Loan advisory thresholds
LTV_WARN_HIGH = 50.0
LTV_WARN_LOW = 10.0
LOAN_RATE_WARN_LOW = 1.0
LOAN_RATE_WARN_HIGH = 20.0
LOAN_TERM_MIN = 1
LOAN_TERM_WARN_MAX = 30
COLLATERAL_WARN_HIGH = 80.0

# Seed exchange rate lookup
PRICE_API_URL = "https://mempool.space/api/v1/prices"
PRICE_API_TIMEOUT = 5  # seconds
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_FALLBACK_PRICE = 100_000

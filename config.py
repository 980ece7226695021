"""
Constants for the ETF Total Cost of Ownership calculator.

All monetary values in USD. Percentages are stored as entered by the
user (0.20 means 0.20 %, not 20 %).
"""

# ── Calendar ─────────────────────────────────────────────────────────
MONTHS_PER_YEAR = 12

# ── Default inputs (initial form state) ──────────────────────────────
DEFAULT_START_CAPITAL = 10_000
DEFAULT_RECURRING_AMOUNT = 500
DEFAULT_IS_MONTHLY = True
DEFAULT_HOLDING_PERIOD = 5
DEFAULT_EXPECTED_RETURN = 7.0          # % per year

# Expense ratio: percentage of assets, or a fixed amount per year
DEFAULT_EXPENSE_RATIO_PERCENT = 0.20
DEFAULT_EXPENSE_RATIO_FIXED = 20.0

# Trading
DEFAULT_BID_ASK_SPREAD = 0.05          # $ per share
DEFAULT_BROKERAGE_FEE_FIXED = 10.0     # $ per trade
DEFAULT_BROKERAGE_FEE_PERCENT = 0.1    # % of trade value
DEFAULT_NUMBER_OF_SHARES = 200         # shares per periodic trade

# Dividends
DEFAULT_DIVIDEND_YIELD = 2.0           # % per year
DEFAULT_DIVIDEND_TAX_RATE = 15.0       # % of dividend income

# ── Holding-period sweep ─────────────────────────────────────────────
SWEEP_MIN_YEARS = 10                   # sweep at least this many years
SWEEP_MAX_YEARS = 60

# ── Web app / report ─────────────────────────────────────────────────
WEB_HOST = "127.0.0.1"
WEB_PORT = 5000
PDF_PATH = "etf_tco_report.pdf"
CURRENCY_SYMBOL = "$"

"""
Cost components for the ETF TCO calculator.

Each dual-mode cost (expense ratio, brokerage fee) is a small frozen
dataclass holding a mode and exactly one magnitude. The component
functions work on plain floats or numpy scalars; callers wanting IEEE
behaviour on division by zero pass ``np.float64`` values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


# ─── Expense ratio ───────────────────────────────────────────────────

class ExpenseRatioMode(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_ANNUAL = "fixed"


@dataclass(frozen=True)
class ExpenseRatio:
    """Annual fund fee: a percent of assets, or a fixed amount per year."""

    mode: ExpenseRatioMode
    value: float

    @classmethod
    def percentage(cls, percent: float) -> "ExpenseRatio":
        return cls(ExpenseRatioMode.PERCENTAGE, percent)

    @classmethod
    def fixed_annual(cls, amount: float) -> "ExpenseRatio":
        return cls(ExpenseRatioMode.FIXED_ANNUAL, amount)

    @property
    def is_percentage(self) -> bool:
        return self.mode is ExpenseRatioMode.PERCENTAGE


# ─── Brokerage fee ───────────────────────────────────────────────────

class BrokerageMode(str, Enum):
    FIXED_PER_TRADE = "fixed"
    PERCENT_OF_TRADE_VALUE = "percentage"


@dataclass(frozen=True)
class BrokerageFee:
    """Commission per trade: a flat fee, or a percent of trade value."""

    mode: BrokerageMode
    value: float

    @classmethod
    def fixed(cls, fee: float) -> "BrokerageFee":
        return cls(BrokerageMode.FIXED_PER_TRADE, fee)

    @classmethod
    def percent(cls, percent: float) -> "BrokerageFee":
        return cls(BrokerageMode.PERCENT_OF_TRADE_VALUE, percent)

    @property
    def is_percentage(self) -> bool:
        return self.mode is BrokerageMode.PERCENT_OF_TRADE_VALUE

    def per_trade(self, average_trade_size: float) -> float:
        """Fee charged on a single trade of *average_trade_size*."""
        if self.is_percentage:
            return (self.value / 100) * average_trade_size
        return self.value


# ─── Component costs ─────────────────────────────────────────────────

def expense_ratio_cost(
    expense_ratio: ExpenseRatio,
    final_value: float,
    holding_period: float,
) -> float:
    """Total expense-ratio drag over the holding period.

    Percentage mode charges the rate on half the terminal value each
    year, a rough stand-in for the average balance. Fixed mode charges
    the flat amount once per year.
    """
    if expense_ratio.is_percentage:
        return (expense_ratio.value / 100) * final_value * holding_period / 2
    return expense_ratio.value * holding_period


def trading_costs(
    bid_ask_spread: float,
    number_of_shares: float,
    number_of_trades: float,
    brokerage_fee: BrokerageFee,
    total_invested: float,
) -> Tuple[float, float]:
    """Spread cost and brokerage fees over every periodic trade.

    Returns
    -------
    (spread_cost, brokerage_fees)
        Their sum is the total trading cost.
    """
    average_trade_size = total_invested / number_of_trades
    spread_cost = bid_ask_spread * number_of_shares * number_of_trades
    brokerage_fees = brokerage_fee.per_trade(average_trade_size) * number_of_trades
    return spread_cost, brokerage_fees


def dividend_taxes(
    dividend_yield_percent: float,
    dividend_tax_rate_percent: float,
    total_invested: float,
    final_value: float,
    holding_period: float,
) -> float:
    """Tax on dividends paid from the midpoint of invested and final value."""
    average_investment_value = (total_invested + final_value) / 2
    return (
        ((dividend_yield_percent / 100) * average_investment_value)
        * (dividend_tax_rate_percent / 100)
        * holding_period
    )


def cost_shares(
    expense: float,
    trading: float,
    dividend: float,
) -> Tuple[float, float, float]:
    """Percent of total cost carried by each component (0s if no cost)."""
    total = expense + trading + dividend
    if not np.isfinite(total) or total == 0:
        return 0.0, 0.0, 0.0
    return (
        float(expense / total * 100),
        float(trading / total * 100),
        float(dividend / total * 100),
    )

"""
Total Cost of Ownership projection engine for an ETF holding.

Projects the value of a lump sum plus a recurring contribution stream
over a holding period, then splits the frictional costs into
expense-ratio drag, trading costs and dividend tax.

``compute_tco`` is a pure function of ``InvestmentInputs``. Arithmetic
is done in numpy float64 so a zero holding period (or zero trade count)
yields inf/nan in the result rather than an exception.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

import numpy as np

import config as cfg
import costs
from costs import BrokerageFee, ExpenseRatio


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class InvestmentInputs:
    """Everything the engine needs. Validation is the caller's job."""

    start_capital: float = cfg.DEFAULT_START_CAPITAL
    recurring_amount: float = cfg.DEFAULT_RECURRING_AMOUNT
    is_monthly: bool = cfg.DEFAULT_IS_MONTHLY      # False = once per year
    holding_period: float = cfg.DEFAULT_HOLDING_PERIOD  # whole years
    expense_ratio: ExpenseRatio = field(
        default_factory=lambda: ExpenseRatio.percentage(cfg.DEFAULT_EXPENSE_RATIO_PERCENT)
    )
    bid_ask_spread: float = cfg.DEFAULT_BID_ASK_SPREAD
    brokerage_fee: BrokerageFee = field(
        default_factory=lambda: BrokerageFee.fixed(cfg.DEFAULT_BROKERAGE_FEE_FIXED)
    )
    number_of_shares: float = cfg.DEFAULT_NUMBER_OF_SHARES
    dividend_yield_percent: float = cfg.DEFAULT_DIVIDEND_YIELD
    dividend_tax_rate_percent: float = cfg.DEFAULT_DIVIDEND_TAX_RATE
    expected_annual_return_percent: float = cfg.DEFAULT_EXPECTED_RETURN

    @property
    def total_months(self) -> float:
        return self.holding_period * cfg.MONTHS_PER_YEAR

    @property
    def monthly_contribution(self) -> float:
        if self.is_monthly:
            return self.recurring_amount
        return self.recurring_amount / cfg.MONTHS_PER_YEAR

    @property
    def number_of_trades(self) -> float:
        return self.total_months if self.is_monthly else self.holding_period

    @property
    def total_invested(self) -> float:
        return self.start_capital + self.monthly_contribution * self.total_months


@dataclass(frozen=True)
class TCOResult:
    """Derived costs and returns. Recomputed on every input change."""

    expense_ratio_cost: float
    trading_costs: float
    dividend_taxes: float
    total_costs: float
    annualized_tco: float
    total_returns: float
    net_returns: float
    final_investment_value: float

    # Breakdown
    total_invested: float
    spread_cost: float
    brokerage_fees: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class SweepRow:
    """Outcome of holding the same plan for a given number of years."""

    years: int
    final_investment_value: float
    total_invested: float
    total_costs: float
    net_returns: float
    cost_drag_pct: float      # total costs as % of final value


# ─── Growth ──────────────────────────────────────────────────────────

def _recurring_future_value(
    monthly_contribution: np.float64,
    monthly_rate: np.float64,
    total_months: np.float64,
) -> np.float64:
    """Future value of one contribution per month for *total_months*.

    Contribution ``i`` compounds for ``total_months - i`` months, so even
    the last deposit earns a month of growth.
    """
    if not np.isfinite(total_months):
        return np.float64(np.nan)
    months_left = total_months - np.arange(total_months)
    return np.sum(monthly_contribution * (1 + monthly_rate) ** months_left)


# ─── Core Computation ────────────────────────────────────────────────

def compute_tco(inputs: InvestmentInputs) -> TCOResult:
    """Project the investment and decompose its total cost of ownership."""
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        holding_period = np.float64(inputs.holding_period)
        annual_rate = np.float64(inputs.expected_annual_return_percent) / 100
        monthly_rate = annual_rate / cfg.MONTHS_PER_YEAR
        total_months = np.float64(inputs.total_months)
        monthly_contribution = np.float64(inputs.monthly_contribution)
        start_capital = np.float64(inputs.start_capital)

        start_capital_fv = start_capital * (1 + annual_rate) ** holding_period
        recurring_fv = _recurring_future_value(monthly_contribution, monthly_rate, total_months)

        final_value = start_capital_fv + recurring_fv
        total_invested = start_capital + monthly_contribution * total_months
        total_returns = final_value - total_invested

        expense = costs.expense_ratio_cost(inputs.expense_ratio, final_value, holding_period)
        spread_cost, brokerage_fees = costs.trading_costs(
            inputs.bid_ask_spread,
            inputs.number_of_shares,
            np.float64(inputs.number_of_trades),
            inputs.brokerage_fee,
            total_invested,
        )
        trading = spread_cost + brokerage_fees
        dividend = costs.dividend_taxes(
            inputs.dividend_yield_percent,
            inputs.dividend_tax_rate_percent,
            total_invested,
            final_value,
            holding_period,
        )

        total_costs = expense + trading + dividend
        annualized = total_costs / holding_period
        net_returns = total_returns - total_costs

    return TCOResult(
        expense_ratio_cost=float(expense),
        trading_costs=float(trading),
        dividend_taxes=float(dividend),
        total_costs=float(total_costs),
        annualized_tco=float(annualized),
        total_returns=float(total_returns),
        net_returns=float(net_returns),
        final_investment_value=float(final_value),
        total_invested=float(total_invested),
        spread_cost=float(spread_cost),
        brokerage_fees=float(brokerage_fees),
    )


# ─── Holding-Period Sweep ────────────────────────────────────────────

def holding_period_sweep(
    inputs: InvestmentInputs,
    max_years: Optional[int] = None,
) -> List[SweepRow]:
    """Recompute the TCO for every whole holding period up to *max_years*.

    Parameters
    ----------
    inputs : InvestmentInputs
        Base inputs; only ``holding_period`` is varied.
    max_years : int, optional
        Longest period to evaluate. Defaults to the input holding period,
        but never fewer than ``cfg.SWEEP_MIN_YEARS`` years.

    Returns
    -------
    list[SweepRow]
        One row per year, starting at year 1.
    """
    if max_years is None:
        max_years = cfg.SWEEP_MIN_YEARS
        if np.isfinite(inputs.holding_period):
            max_years = max(int(np.ceil(inputs.holding_period)), max_years)
    max_years = min(max_years, cfg.SWEEP_MAX_YEARS)

    rows: List[SweepRow] = []
    for years in range(1, max_years + 1):
        res = compute_tco(replace(inputs, holding_period=years))
        if res.final_investment_value > 0:
            drag = res.total_costs / res.final_investment_value * 100
        else:
            drag = 0.0
        rows.append(SweepRow(
            years=years,
            final_investment_value=res.final_investment_value,
            total_invested=res.total_invested,
            total_costs=res.total_costs,
            net_returns=res.net_returns,
            cost_drag_pct=drag,
        ))
    return rows


def sweep_as_dicts(rows: List[SweepRow]) -> List[Dict[str, Any]]:
    return [asdict(r) for r in rows]


# ─── Smoke Test ───────────────────────────────────────────────────────

if __name__ == "__main__":
    res = compute_tco(InvestmentInputs())
    print("ETF TCO — default inputs")
    for name, value in res.as_dict().items():
        print(f"  {name:<24} {value:>14,.2f}")

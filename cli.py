"""
CLI interface and shared display-data computation for the
ETF Total Cost of Ownership calculator.
"""

from __future__ import annotations

import re
import sys
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

import config as cfg
import costs
from costs import BrokerageFee, ExpenseRatio
from tco import (
    InvestmentInputs,
    SweepRow,
    TCOResult,
    compute_tco,
    holding_period_sweep,
    sweep_as_dicts,
)
import report


class InputError(ValueError):
    """Raised when form input cannot be turned into usable inputs."""


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 2) -> str:
    """Format number as $X,XXX.XX."""
    if val < 0:
        return f"-{cfg.CURRENCY_SYMBOL}{-val:,.{decimals}f}"
    return f"{cfg.CURRENCY_SYMBOL}{val:,.{decimals}f}"


def pct(val: float, decimals: int = 1) -> str:
    return f"{val:.{decimals}f}%"


def _num(val: float) -> str:
    """Shortest plain rendering of a number (5.0 -> '5', 0.2 -> '0.2')."""
    return f"{val:g}"


# ═══════════════════════════════════════════════════════════════════
# Presentation-boundary coercion
# ═══════════════════════════════════════════════════════════════════

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _strip_currency(s: str) -> str:
    """Remove currency symbols, percent signs, commas, spaces."""
    return (
        s.replace(cfg.CURRENCY_SYMBOL, "")
        .replace("%", "")
        .replace(",", "")
        .replace(" ", "")
    )


def coerce_number(raw: Any) -> float:
    """Turn raw field text into a number, defaulting to 0.

    Parses the leading numeric part of the text ("12abc" -> 12.0).
    Empty, unparsable or NaN input gives 0.0. Only digit forms are
    recognised, so "Infinity" also gives 0.0; an overflowing literal
    such as "1e400" still parses to inf and is rejected by
    `inputs_from_form`.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        val = float(raw)
    else:
        m = _LEADING_NUMBER.match(_strip_currency(str(raw)))
        if m is None:
            return 0.0
        val = float(m.group(0))
    if np.isnan(val):
        return 0.0
    return val


def _finite(form: Mapping[str, Any], name: str, default: float) -> float:
    val = coerce_number(form.get(name, default))
    if not np.isfinite(val):
        raise InputError(f"{name.replace('_', ' ').capitalize()} is out of range")
    return val


def _non_negative(form: Mapping[str, Any], name: str, default: float) -> float:
    return max(_finite(form, name, default), 0.0)


def inputs_from_form(form: Mapping[str, Any]) -> InvestmentInputs:
    """Build engine inputs from a flat mapping of form fields.

    Missing fields take the configured defaults; present-but-garbage
    fields become 0. Money and rate fields are clamped at 0 (the
    expected return may be negative).

    Raises
    ------
    InputError
        If the holding period is outside 0 < years <= SWEEP_MAX_YEARS,
        or any field overflows to a non-finite value.
    """
    holding_period = coerce_number(form.get("holding_period", cfg.DEFAULT_HOLDING_PERIOD))
    if not holding_period > 0:
        raise InputError("Holding period must be at least 1 year")
    if not holding_period <= cfg.SWEEP_MAX_YEARS:
        raise InputError(f"Holding period must be at most {cfg.SWEEP_MAX_YEARS} years")

    if form.get("expense_mode", "percentage") == "fixed":
        expense_ratio = ExpenseRatio.fixed_annual(
            _non_negative(form, "expense_ratio_fixed", cfg.DEFAULT_EXPENSE_RATIO_FIXED)
        )
    else:
        expense_ratio = ExpenseRatio.percentage(
            _non_negative(form, "expense_ratio", cfg.DEFAULT_EXPENSE_RATIO_PERCENT)
        )

    if form.get("brokerage_mode", "fixed") == "percentage":
        brokerage_fee = BrokerageFee.percent(
            _non_negative(form, "brokerage_fee_percent", cfg.DEFAULT_BROKERAGE_FEE_PERCENT)
        )
    else:
        brokerage_fee = BrokerageFee.fixed(
            _non_negative(form, "brokerage_fee", cfg.DEFAULT_BROKERAGE_FEE_FIXED)
        )

    return InvestmentInputs(
        start_capital=_non_negative(form, "start_capital", cfg.DEFAULT_START_CAPITAL),
        recurring_amount=_non_negative(form, "recurring_amount", cfg.DEFAULT_RECURRING_AMOUNT),
        is_monthly=form.get("cadence", "monthly") != "yearly",
        holding_period=holding_period,
        expense_ratio=expense_ratio,
        bid_ask_spread=_non_negative(form, "bid_ask_spread", cfg.DEFAULT_BID_ASK_SPREAD),
        brokerage_fee=brokerage_fee,
        number_of_shares=_non_negative(form, "number_of_shares", cfg.DEFAULT_NUMBER_OF_SHARES),
        dividend_yield_percent=_non_negative(form, "dividend_yield", cfg.DEFAULT_DIVIDEND_YIELD),
        dividend_tax_rate_percent=_non_negative(
            form, "dividend_tax_rate", cfg.DEFAULT_DIVIDEND_TAX_RATE
        ),
        expected_annual_return_percent=_finite(
            form, "expected_return", cfg.DEFAULT_EXPECTED_RETURN
        ),
    )


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _prompt_float(
    label: str,
    default: Any,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(default)
        try:
            val = float(_strip_currency(raw))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_int(
    label: str,
    default: int,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return default
        try:
            val = int(float(_strip_currency(raw)))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def collect_inputs() -> InvestmentInputs:
    """Prompt the user for all calculator parameters."""
    print("\n  Enter your details (press Enter for defaults):\n")

    start = _prompt_float("Start capital ($)", cfg.DEFAULT_START_CAPITAL, 0)
    cadence = _prompt_choice("Recurring investment cadence", ["monthly", "yearly"], "monthly")
    recurring = _prompt_float(f"Recurring investment, {cadence} ($)", cfg.DEFAULT_RECURRING_AMOUNT, 0)
    ret = _prompt_float("Expected annual return %", cfg.DEFAULT_EXPECTED_RETURN, -100, 100)
    years = _prompt_int("Holding period (years)", cfg.DEFAULT_HOLDING_PERIOD, 1, cfg.SWEEP_MAX_YEARS)

    expense_mode = _prompt_choice("Expense ratio as", ["percentage", "fixed"], "percentage")
    if expense_mode == "fixed":
        expense_ratio = ExpenseRatio.fixed_annual(
            _prompt_float("Expense ratio ($ per year)", cfg.DEFAULT_EXPENSE_RATIO_FIXED, 0)
        )
    else:
        expense_ratio = ExpenseRatio.percentage(
            _prompt_float("Expense ratio %", cfg.DEFAULT_EXPENSE_RATIO_PERCENT, 0, 100)
        )

    spread = _prompt_float("Bid-ask spread ($ per share)", cfg.DEFAULT_BID_ASK_SPREAD, 0)

    brokerage_mode = _prompt_choice("Brokerage fee as", ["fixed", "percentage"], "fixed")
    if brokerage_mode == "percentage":
        brokerage_fee = BrokerageFee.percent(
            _prompt_float("Brokerage fee (% of investment)", cfg.DEFAULT_BROKERAGE_FEE_PERCENT, 0, 100)
        )
    else:
        brokerage_fee = BrokerageFee.fixed(
            _prompt_float("Brokerage fee ($ per trade)", cfg.DEFAULT_BROKERAGE_FEE_FIXED, 0)
        )

    shares = _prompt_float("Number of shares (per trade)", cfg.DEFAULT_NUMBER_OF_SHARES, 0)
    div_yield = _prompt_float("Dividend yield %", cfg.DEFAULT_DIVIDEND_YIELD, 0, 100)
    div_tax = _prompt_float("Dividend tax rate %", cfg.DEFAULT_DIVIDEND_TAX_RATE, 0, 100)

    return InvestmentInputs(
        start_capital=start,
        recurring_amount=recurring,
        is_monthly=cadence == "monthly",
        holding_period=years,
        expense_ratio=expense_ratio,
        bid_ask_spread=spread,
        brokerage_fee=brokerage_fee,
        number_of_shares=shares,
        dividend_yield_percent=div_yield,
        dividend_tax_rate_percent=div_tax,
        expected_annual_return_percent=ret,
    )


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def _expense_note(inputs: InvestmentInputs) -> str:
    er = inputs.expense_ratio
    years = _num(inputs.holding_period)
    if er.is_percentage:
        return f"{_num(er.value)}% of average portfolio value for {years} years"
    return f"{cfg.CURRENCY_SYMBOL}{_num(er.value)} per year for {years} years"


def compute_display_data(
    inputs: InvestmentInputs,
    result: TCOResult,
    sweep: Optional[List[SweepRow]] = None,
) -> Dict[str, Any]:
    """Extract every value the CLI and web views render."""
    cadence = "monthly" if inputs.is_monthly else "yearly"
    er_share, tr_share, dv_share = costs.cost_shares(
        result.expense_ratio_cost, result.trading_costs, result.dividend_taxes,
    )

    components = [
        ("expense ratio", result.expense_ratio_cost, er_share),
        ("trading costs", result.trading_costs, tr_share),
        ("dividend taxes", result.dividend_taxes, dv_share),
    ]
    largest = max(components, key=lambda c: c[1])

    if result.total_returns > 0:
        cost_of_returns_pct = result.total_costs / result.total_returns * 100
    else:
        cost_of_returns_pct = None

    return {
        # Inputs echo
        "start_capital": inputs.start_capital,
        "recurring_amount": inputs.recurring_amount,
        "cadence": cadence,
        "cadence_label": cadence.capitalize(),
        "holding_period": inputs.holding_period,
        "expected_return": inputs.expected_annual_return_percent,
        "dividend_yield": inputs.dividend_yield_percent,
        "expense_mode": inputs.expense_ratio.mode.value,
        "brokerage_mode": inputs.brokerage_fee.mode.value,
        "number_of_trades": float(inputs.number_of_trades),
        # Results
        **result.as_dict(),
        # Shares of total cost
        "expense_share": er_share,
        "trading_share": tr_share,
        "dividend_share": dv_share,
        "largest_cost_name": largest[0],
        "largest_cost_value": largest[1],
        "largest_cost_share": largest[2],
        "cost_of_returns_pct": cost_of_returns_pct,
        # Notes
        "expense_note": _expense_note(inputs),
        "trading_note": f"Based on {cadence} investments",
        "returns_note": (
            f"Based on {_num(inputs.expected_annual_return_percent)}% annual return"
            f" + {_num(inputs.dividend_yield_percent)}% dividend yield"
        ),
        # Sweep
        "sweep": sweep_as_dicts(sweep) if sweep else [],
    }


def generate_summary_text(d: Dict[str, Any]) -> str:
    """Build a 2-sentence plain-English summary."""
    years = _num(d["holding_period"])
    first = (
        f"Over {years} years your costs add up to {fmt(d['total_costs'])} "
        f"({fmt(d['annualized_tco'])}/year)"
    )
    if d["cost_of_returns_pct"] is not None:
        first += (
            f", eating {pct(d['cost_of_returns_pct'])} of the "
            f"{fmt(d['total_returns'])} gross return and leaving "
            f"{fmt(d['net_returns'])}."
        )
    else:
        first += f" with no gross return to offset them, for a net result of {fmt(d['net_returns'])}."

    second = (
        f"The largest cost is {d['largest_cost_name']} at "
        f"{fmt(d['largest_cost_value'])} ({pct(d['largest_cost_share'])} of total costs)."
    )
    return f"{first} {second}"


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 72  # box width (characters)
H_BAR = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H_BAR * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H_BAR * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 36) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H_BAR * (W - 2)}╝"


def _wrap(text: str, width: int) -> List[str]:
    lines: List[str] = []
    line = ""
    for word in text.split():
        if len(line) + len(word) + 1 <= width:
            line = f"{line} {word}" if line else word
        else:
            lines.append(line)
            line = word
    if line:
        lines.append(line)
    return lines


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_summary(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Start capital", fmt(d["start_capital"])),
        _box_row(f"{d['cadence_label']} investment", fmt(d["recurring_amount"])),
        _box_row("Holding period", f"{_num(d['holding_period'])} years"),
        _box_row("Total invested", fmt(d["total_invested"])),
        _box_row("Final value", fmt(d["final_investment_value"])),
    ]
    _print_section("INVESTMENT SUMMARY", rows)


def _print_costs(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Expense ratio cost", fmt(d["expense_ratio_cost"])),
        _box_line(f"  {d['expense_note']}"),
        _box_row("Trading costs", fmt(d["trading_costs"])),
        _box_row("  Bid-ask spread", fmt(d["spread_cost"])),
        _box_row("  Brokerage fees", fmt(d["brokerage_fees"])),
        _box_line(f"  {d['trading_note']}"),
        _box_row("Dividend taxes", fmt(d["dividend_taxes"])),
        _box_line(),
        _box_row("Total costs", fmt(d["total_costs"])),
        _box_row("Annualized TCO", f"{fmt(d['annualized_tco'])}/year"),
    ]
    _print_section("COSTS", rows)


def _print_returns(d: Dict[str, Any], summary: str) -> None:
    rows = [
        _box_row("Total returns (before costs)", fmt(d["total_returns"])),
        _box_line(f"  {d['returns_note']}"),
        _box_row("Net returns (after costs)", fmt(d["net_returns"])),
        _box_line(),
    ]
    rows.extend(_box_line(line) for line in _wrap(summary, W - 6))
    _print_section("RETURNS", rows)


def _print_sweep(d: Dict[str, Any]) -> None:
    h1 = f"{'Years':>5}  {'Invested':>13}  {'Final value':>13}  {'Costs':>11}  {'Drag':>6}"
    rows = [_box_line(h1), _box_line("─" * (W - 6))]
    for r in d["sweep"]:
        marker = " <<" if r["years"] == d["holding_period"] else ""
        rows.append(_box_line(
            f"{r['years']:>5}  "
            f"{fmt(r['total_invested'], 0):>13}  "
            f"{fmt(r['final_investment_value'], 0):>13}  "
            f"{fmt(r['total_costs'], 0):>11}  "
            f"{pct(r['cost_drag_pct']):>6}"
            f"{marker}"
        ))
    _print_section("COSTS BY HOLDING PERIOD", rows)


def _print_report(pdf_path: str | None) -> None:
    rows = []
    if pdf_path:
        rows.append(_box_line(f"PDF report saved to: {pdf_path}"))
    else:
        rows.append(_box_line("Charts available in the web app:"))
        rows.append(_box_line(f"  python main.py  (opens {cfg.WEB_HOST}:{cfg.WEB_PORT})"))
    _print_section("CHARTS", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(pdf_path: str = cfg.PDF_PATH) -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print("  ETF Total Cost of Ownership Calculator")
    print("=" * W)

    inputs = collect_inputs()
    result = compute_tco(inputs)
    sweep = holding_period_sweep(inputs)
    d = compute_display_data(inputs, result, sweep)
    summary = generate_summary_text(d)

    print()
    _print_summary(d)
    _print_costs(d)
    _print_returns(d, summary)
    _print_sweep(d)

    print("  Generating PDF report...")
    saved = report.generate_pdf(inputs, result, sweep, d, summary, pdf_path)
    print(f"  Saved to {saved}\n")

    _print_report(saved)


if __name__ == "__main__":
    run_cli()

"""
PDF report generation and reusable chart rendering for the
ETF Total Cost of Ownership calculator.

Provides:
  - Two-page PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Any, Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
from tco import InvestmentInputs, SweepRow, TCOResult

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
RED = "#f87171"
SLATE = "#94a3b8"
BORDER = "#1e293b"

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 6


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _usd_fmt(x, _):
    sym = cfg.CURRENCY_SYMBOL
    if abs(x) >= 1e6:
        return f"{sym}{x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"{sym}{x / 1e3:.0f}k"
    return f"{sym}{x:.0f}"


USD_FMT = FuncFormatter(_usd_fmt)


# ═══════════════════════════════════════════════════════════════════
# Style helpers
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, alpha=0.15, color=SLATE)


def _legend(ax, loc="upper left"):
    ax.legend(loc=loc, fontsize=8, facecolor=CARD, edgecolor=BORDER, labelcolor=TEXT)


# ═══════════════════════════════════════════════════════════════════
# Chart — Cost Breakdown
# ═══════════════════════════════════════════════════════════════════

def _chart_cost_breakdown(result: TCOResult,
                          figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Horizontal bars for each cost component, with the total."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    labels = ["Expense ratio", "Bid-ask spread", "Brokerage fees", "Dividend taxes"]
    values = [
        result.expense_ratio_cost,
        result.spread_cost,
        result.brokerage_fees,
        result.dividend_taxes,
    ]
    colors = [INDIGO, AMBER, AMBER, EMERALD]

    y = np.arange(len(labels))
    ax.barh(y, values, color=colors, edgecolor=BORDER, linewidth=0.5)
    ax.set_yticks(y)
    ax.set_yticklabels(labels, fontsize=9)
    ax.invert_yaxis()
    ax.xaxis.set_major_formatter(USD_FMT)
    ax.set_xlabel("Cost over holding period")
    ax.set_title(f"Total Cost of Ownership: {_usd_exact(result.total_costs)}",
                 fontsize=13, pad=12)

    for yi, v in zip(y, values):
        ax.annotate(_usd_exact(v), xy=(v, yi), xytext=(6, 0),
                    textcoords="offset points", va="center",
                    fontsize=8.5, color=TEXT2)
    return fig


def _usd_exact(x: float) -> str:
    return f"{cfg.CURRENCY_SYMBOL}{x:,.2f}"


# ═══════════════════════════════════════════════════════════════════
# Chart — Growth vs Costs by Holding Period
# ═══════════════════════════════════════════════════════════════════

def _chart_growth(sweep: List[SweepRow], holding_period: float,
                  figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Final value, money invested and cumulative costs per holding period."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    years = np.array([r.years for r in sweep])
    final = np.array([r.final_investment_value for r in sweep])
    invested = np.array([r.total_invested for r in sweep])
    total_costs = np.array([r.total_costs for r in sweep])

    ax.plot(years, final, color=EMERALD, linewidth=2.4,
            label="Final value (before costs)", solid_capstyle="round")
    ax.fill_between(years, invested, final, color=EMERALD, alpha=0.10)
    ax.plot(years, invested, color=INDIGO, linewidth=2.0, linestyle="--",
            label="Total invested")
    ax.plot(years, total_costs, color=RED, linewidth=2.0,
            label="Total costs", solid_capstyle="round")
    ax.fill_between(years, 0, total_costs, color=RED, alpha=0.12)

    if holding_period in years:
        idx = int(np.where(years == holding_period)[0][0])
        ax.axvline(holding_period, color=AMBER, linewidth=1.2,
                   linestyle=":", alpha=0.8)
        ax.annotate(
            f"You: {_usd_exact(total_costs[idx])} costs",
            xy=(holding_period, total_costs[idx]),
            xytext=(8, 14), textcoords="offset points",
            fontsize=8.5, color=AMBER, fontweight="bold",
            arrowprops=dict(arrowstyle="->", color=AMBER, lw=1.2),
        )

    ax.yaxis.set_major_formatter(USD_FMT)
    ax.set_xlabel("Holding period (years)")
    ax.set_ylabel("Value")
    ax.set_title("Growth vs Costs by Holding Period", fontsize=13, pad=12)
    _legend(ax)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Page 1 — Summary (text only, dark background)
# ═══════════════════════════════════════════════════════════════════

def _page1_summary(inputs: InvestmentInputs, d: Dict[str, Any],
                   summary_text: str) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    fig.text(0.50, 0.93, "ETF Total Cost of Ownership",
             ha="center", fontsize=18, color=TEXT, fontweight="bold")
    fig.text(0.50, 0.91, "Cost & Return Projection Report",
             ha="center", fontsize=11, color=TEXT2)

    er = inputs.expense_ratio
    bf = inputs.brokerage_fee
    er_text = (f"{er.value:g}% of assets" if er.is_percentage
               else f"{_usd_exact(er.value)} per year")
    bf_text = (f"{bf.value:g}% of trade" if bf.is_percentage
               else f"{_usd_exact(bf.value)} per trade")

    sections = [
        ("Your Parameters", TEXT, [
            f"Start capital: {_usd_exact(d['start_capital'])}  |  "
            f"{d['cadence_label']} investment: {_usd_exact(d['recurring_amount'])}",
            f"Holding period: {d['holding_period']:g} years  |  "
            f"Expected return: {d['expected_return']:g}%  |  "
            f"Dividend yield: {d['dividend_yield']:g}%",
            f"Expense ratio: {er_text}  |  Brokerage: {bf_text}  |  "
            f"Spread: {_usd_exact(inputs.bid_ask_spread)}/share",
        ]),
        ("Investment Summary", INDIGO, [
            f"Total invested: {_usd_exact(d['total_invested'])}",
            f"Final value: {_usd_exact(d['final_investment_value'])}",
        ]),
        ("Costs", RED, [
            f"Expense ratio cost: {_usd_exact(d['expense_ratio_cost'])}  ({d['expense_note']})",
            f"Trading costs: {_usd_exact(d['trading_costs'])}  ({d['trading_note']})",
            f"Dividend taxes: {_usd_exact(d['dividend_taxes'])}",
            f"Total costs: {_usd_exact(d['total_costs'])}  |  "
            f"Annualized TCO: {_usd_exact(d['annualized_tco'])}/year",
        ]),
        ("Returns", EMERALD, [
            f"Total returns (before costs): {_usd_exact(d['total_returns'])}",
            f"  {d['returns_note']}",
            f"Net returns (after costs): {_usd_exact(d['net_returns'])}",
        ]),
    ]

    y = 0.86
    for title, color, lines in sections:
        fig.text(0.08, y, title, fontsize=13, color=color, fontweight="bold")
        y -= 0.028
        for line in lines:
            fig.text(0.10, y, line, fontsize=9, color=TEXT2)
            y -= 0.024
        y -= 0.02

    # Word-wrap summary text
    words = summary_text.split()
    line = ""
    for word in words:
        if len(line) + len(word) + 1 <= 85:
            line = f"{line} {word}" if line else word
        else:
            fig.text(0.10, y, line, fontsize=9, color=TEXT)
            y -= 0.022
            line = word
    if line:
        fig.text(0.10, y, line, fontsize=9, color=TEXT)

    fig.text(0.50, 0.04,
             "Estimates only. Expense drag uses half the final value as the average balance.",
             ha="center", fontsize=7.5, color=SLATE)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=120, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(
    inputs: InvestmentInputs,
    result: TCOResult,
    sweep: Optional[List[SweepRow]],
    d: Dict[str, Any],
    summary_text: str,
    path: str = cfg.PDF_PATH,
) -> str:
    """Generate the PDF report. Returns the file path."""
    pages = [
        _page1_summary(inputs, d, summary_text),
        _chart_cost_breakdown(result, figsize=(A4W, A4H * 0.5)),
    ]
    if sweep:
        pages.append(_chart_growth(sweep, inputs.holding_period,
                                   figsize=(A4W, A4H * 0.5)))

    try:
        with PdfPages(path) as pdf:
            for fig in pages:
                pdf.savefig(fig, facecolor=fig.get_facecolor())
    finally:
        for fig in pages:
            plt.close(fig)
    logger.info("Wrote %d-page report to %s", len(pages), path)
    return path


def get_web_charts(
    inputs: InvestmentInputs,
    result: TCOResult,
    sweep: Optional[List[SweepRow]],
) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns up to 2 charts:
      [0] Cost breakdown  (horizontal bars)
      [1] Growth vs costs by holding period  (only with a sweep)
    """
    chart_figs = [_chart_cost_breakdown(result)]
    if sweep:
        chart_figs.append(_chart_growth(sweep, inputs.holding_period))

    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images

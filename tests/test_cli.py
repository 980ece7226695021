"""Tests for input coercion, display data and the terminal front end."""
import builtins

import pytest

from cli import (
    InputError,
    coerce_number,
    compute_display_data,
    fmt,
    generate_summary_text,
    inputs_from_form,
    pct,
    run_cli,
)
from costs import BrokerageFee, ExpenseRatio
from tco import InvestmentInputs, compute_tco, holding_period_sweep


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def test_fmt_currency():
    assert fmt(1234.5) == "$1,234.50"
    assert fmt(1234.5, 0) == "$1,234"
    assert fmt(-5) == "-$5.00"


def test_pct():
    assert pct(12.345) == "12.3%"


# ---------------------------------------------------------------------------
# coerce_number
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("raw,expected", [
    ("12", 12.0),
    ("12.5", 12.5),
    ("12abc", 12.0),
    (".5", 0.5),
    ("-3.5", -3.5),
    ("1e3", 1000.0),
    ("$1,000", 1000.0),
    (" 7 % ", 7.0),
    ("", 0.0),
    ("abc", 0.0),
    ("NaN", 0.0),
    ("Infinity", 0.0),
    ("1e400", float("inf")),
    (None, 0.0),
    (7, 7.0),
    (2.5, 2.5),
    (float("nan"), 0.0),
])
def test_coerce_number(raw, expected):
    assert coerce_number(raw) == expected


# ---------------------------------------------------------------------------
# inputs_from_form
# ---------------------------------------------------------------------------


class TestInputsFromForm:
    def test_empty_form_uses_defaults(self):
        assert inputs_from_form({}) == InvestmentInputs()

    def test_string_fields(self):
        inputs = inputs_from_form({
            "start_capital": "25,000",
            "recurring_amount": "1200",
            "cadence": "yearly",
            "holding_period": "10",
            "expected_return": "6.5",
        })
        assert inputs.start_capital == 25_000
        assert inputs.recurring_amount == 1_200
        assert inputs.is_monthly is False
        assert inputs.holding_period == 10
        assert inputs.expected_annual_return_percent == 6.5

    def test_blank_field_becomes_zero(self):
        assert inputs_from_form({"start_capital": ""}).start_capital == 0.0

    def test_fixed_expense_mode_picks_fixed_magnitude(self):
        inputs = inputs_from_form({
            "expense_mode": "fixed",
            "expense_ratio": "0.2",
            "expense_ratio_fixed": "35",
        })
        assert inputs.expense_ratio == ExpenseRatio.fixed_annual(35)

    def test_percentage_brokerage_mode_picks_percent_magnitude(self):
        inputs = inputs_from_form({
            "brokerage_mode": "percentage",
            "brokerage_fee": "10",
            "brokerage_fee_percent": "0.25",
        })
        assert inputs.brokerage_fee == BrokerageFee.percent(0.25)

    def test_negative_money_clamped(self):
        inputs = inputs_from_form({"start_capital": "-500", "bid_ask_spread": "-1"})
        assert inputs.start_capital == 0.0
        assert inputs.bid_ask_spread == 0.0

    def test_negative_return_kept(self):
        assert inputs_from_form({"expected_return": "-2"}).expected_annual_return_percent == -2

    @pytest.mark.parametrize("bad", ["0", "-3", "", "abc"])
    def test_non_positive_holding_period_rejected(self, bad):
        with pytest.raises(InputError):
            inputs_from_form({"holding_period": bad})

    def test_holding_period_upper_bound_accepted(self):
        assert inputs_from_form({"holding_period": "60"}).holding_period == 60

    @pytest.mark.parametrize("too_long", ["61", "1e9", "1e400"])
    def test_holding_period_above_max_rejected(self, too_long):
        with pytest.raises(InputError, match="at most 60 years"):
            inputs_from_form({"holding_period": too_long})

    @pytest.mark.parametrize("field", ["expected_return", "start_capital", "dividend_yield"])
    def test_overflowing_field_rejected(self, field):
        with pytest.raises(InputError, match="out of range"):
            inputs_from_form({field: "1e400"})


# ---------------------------------------------------------------------------
# Display data
# ---------------------------------------------------------------------------


def _display(inputs=None, with_sweep=False):
    inputs = inputs or InvestmentInputs()
    sweep = holding_period_sweep(inputs) if with_sweep else None
    return compute_display_data(inputs, compute_tco(inputs), sweep)


class TestDisplayData:
    def test_result_fields_present(self):
        d = _display()
        res = compute_tco(InvestmentInputs())
        for name, value in res.as_dict().items():
            assert d[name] == value

    def test_percentage_expense_note(self):
        assert _display()["expense_note"] == "0.2% of average portfolio value for 5 years"

    def test_fixed_expense_note(self):
        d = _display(InvestmentInputs(expense_ratio=ExpenseRatio.fixed_annual(20)))
        assert d["expense_note"] == "$20 per year for 5 years"

    def test_trading_and_returns_notes(self):
        d = _display()
        assert d["trading_note"] == "Based on monthly investments"
        assert d["returns_note"] == "Based on 7% annual return + 2% dividend yield"

    def test_yearly_cadence_label(self):
        d = _display(InvestmentInputs(is_monthly=False))
        assert d["cadence_label"] == "Yearly"
        assert d["trading_note"] == "Based on yearly investments"
        assert d["number_of_trades"] == 5

    def test_cost_shares_sum_to_100(self):
        d = _display()
        assert d["expense_share"] + d["trading_share"] + d["dividend_share"] == pytest.approx(100)

    def test_largest_cost_is_trading_by_default(self):
        d = _display()
        assert d["largest_cost_name"] == "trading costs"
        assert d["largest_cost_value"] == d["trading_costs"]

    def test_sweep_rows_serialised(self):
        d = _display(with_sweep=True)
        assert len(d["sweep"]) == 10
        assert d["sweep"][0]["years"] == 1

    def test_no_returns_leaves_pct_empty(self):
        d = _display(InvestmentInputs(expected_annual_return_percent=0))
        assert d["cost_of_returns_pct"] is None


def test_summary_text_with_returns():
    text = generate_summary_text(_display())
    assert text.startswith("Over 5 years your costs add up to $")
    assert "of the" in text
    assert "The largest cost is trading costs" in text


def test_summary_text_without_returns():
    text = generate_summary_text(_display(InvestmentInputs(expected_annual_return_percent=0)))
    assert "no gross return" in text


# ---------------------------------------------------------------------------
# Interactive CLI
# ---------------------------------------------------------------------------


def test_run_cli_with_defaults(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr(builtins, "input", lambda _prompt="": "")
    pdf = tmp_path / "report.pdf"

    run_cli(pdf_path=str(pdf))

    out = capsys.readouterr().out
    assert "INVESTMENT SUMMARY" in out
    assert "COSTS BY HOLDING PERIOD" in out
    assert "$40,000.00" in out
    assert pdf.exists()


def test_cli_prompt_retries_invalid_number(monkeypatch, capsys, tmp_path):
    answers = iter(["lots", "2000"])

    def fake_input(prompt=""):
        if "Start capital" in prompt:
            return next(answers)
        return ""

    monkeypatch.setattr(builtins, "input", fake_input)
    run_cli(pdf_path=str(tmp_path / "r.pdf"))

    out = capsys.readouterr().out
    assert "Invalid number, try again." in out
    assert "$2,000.00" in out

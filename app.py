"""
Flask web application for the ETF Total Cost of Ownership calculator.

Single-file app using render_template_string.  Run via ``python main.py``
which starts the dev server on localhost:5000.  Results refresh on every
field edit through the ``/api/calculate`` JSON endpoint.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, Mapping

from flask import Flask, jsonify, render_template_string, request, send_file

import config as cfg
from tco import compute_tco, holding_period_sweep
from cli import (
    InputError,
    compute_display_data,
    generate_summary_text,
    inputs_from_form,
    fmt,
    pct,
)
import report

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["PDF_PATH"] = cfg.PDF_PATH

# Initial form state
DEFAULT_FORM: Dict[str, Any] = {
    "start_capital": cfg.DEFAULT_START_CAPITAL,
    "recurring_amount": cfg.DEFAULT_RECURRING_AMOUNT,
    "cadence": "monthly",
    "holding_period": cfg.DEFAULT_HOLDING_PERIOD,
    "expected_return": cfg.DEFAULT_EXPECTED_RETURN,
    "expense_mode": "percentage",
    "expense_ratio": cfg.DEFAULT_EXPENSE_RATIO_PERCENT,
    "expense_ratio_fixed": cfg.DEFAULT_EXPENSE_RATIO_FIXED,
    "bid_ask_spread": cfg.DEFAULT_BID_ASK_SPREAD,
    "brokerage_mode": "fixed",
    "brokerage_fee": cfg.DEFAULT_BROKERAGE_FEE_FIXED,
    "brokerage_fee_percent": cfg.DEFAULT_BROKERAGE_FEE_PERCENT,
    "number_of_shares": cfg.DEFAULT_NUMBER_OF_SHARES,
    "dividend_yield": cfg.DEFAULT_DIVIDEND_YIELD,
    "dividend_tax_rate": cfg.DEFAULT_DIVIDEND_TAX_RATE,
}


# ═══════════════════════════════════════════════════════════════════
# Calculation
# ═══════════════════════════════════════════════════════════════════

def calculate(form: Mapping[str, Any]):
    """Parse *form* and run the engine. Raises InputError on bad input."""
    inputs = inputs_from_form(form)
    result = compute_tco(inputs)
    sweep = holding_period_sweep(inputs)
    d = compute_display_data(inputs, result, sweep)
    d["summary_text"] = generate_summary_text(d)
    return inputs, result, sweep, d


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>ETF TCO Calculator</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;
    --bg-surface:rgba(15,23,42,0.55);
    --bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.1);
    --text-primary:#f1f5f9;
    --text-secondary:#94a3b8;
    --text-muted:#64748b;
    --indigo:#818cf8;
    --emerald:#34d399;
    --amber:#fbbf24;
    --red:#f87171;
    --radius-lg:16px;
    --radius-md:10px;
  }
  body{
    background:var(--bg-deep);color:var(--text-primary);
    font-family:'Inter',system-ui,-apple-system,sans-serif;
    line-height:1.6;min-height:100vh;
  }
  .container{max-width:1140px;margin:0 auto;padding:2rem 1.5rem}

  .hero{text-align:center;padding:1.5rem 0 2rem}
  .hero h1{
    font-size:clamp(1.5rem,4vw,2.4rem);font-weight:800;letter-spacing:-.03em;
    background:linear-gradient(135deg,#e2e8f0 0%,#818cf8 45%,#34d399 100%);
    -webkit-background-clip:text;-webkit-text-fill-color:transparent;background-clip:text;
  }
  .hero-sub{color:var(--text-secondary);margin-top:.5rem;font-size:.92rem}

  .layout{display:grid;grid-template-columns:1fr 1fr;gap:1.4rem}
  .card{
    background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-lg);padding:1.6rem;margin-bottom:1.4rem;
  }
  h2{font-size:1.1rem;font-weight:700;margin-bottom:1rem}
  h3{font-size:.78rem;color:var(--text-secondary);font-weight:600;text-transform:uppercase;letter-spacing:.04em}

  .form-group{display:flex;flex-direction:column;margin-bottom:.9rem}
  .form-group label{font-size:.78rem;color:var(--text-secondary);margin-bottom:.3rem;font-weight:500}
  .form-group input,.form-group select{
    background:var(--bg-input);border:1px solid rgba(71,85,105,.35);border-radius:var(--radius-md);
    color:var(--text-primary);padding:.55rem .8rem;font-size:.88rem;font-family:inherit;
  }
  .inline{display:flex;gap:.6rem}
  .inline select{flex:0 0 8.5rem}
  .inline input{flex:1}
  .hidden{display:none}

  .btn{
    display:inline-flex;align-items:center;gap:.5rem;border:none;cursor:pointer;
    background:linear-gradient(135deg,#6366f1,#8b5cf6);color:#fff;font-weight:600;
    padding:.7rem 1.4rem;border-radius:var(--radius-md);font-size:.9rem;text-decoration:none;
  }
  .btn-success{background:linear-gradient(135deg,#10b981,#059669)}

  .summary{background:rgba(99,102,241,.08);border-radius:var(--radius-md);padding:1rem;margin-bottom:1rem}
  .summary p{font-size:.86rem;color:var(--indigo)}
  .stat{padding:.55rem 0;border-bottom:1px solid rgba(51,65,85,.2)}
  .stat-value{font-size:1.25rem;font-weight:700}
  .stat-value.big{font-size:1.5rem;color:var(--indigo)}
  .stat-value.gain{color:var(--emerald)}
  .stat-note{font-size:.75rem;color:var(--text-muted)}
  .summary-text{margin-top:1rem;font-size:.88rem;color:var(--text-secondary)}
  .error{
    background:rgba(248,113,113,.08);border-left:3px solid var(--red);color:var(--red);
    padding:.75rem 1rem;border-radius:0 var(--radius-md) var(--radius-md) 0;margin-bottom:1rem;
  }

  .table-wrap{overflow-x:auto;border-radius:var(--radius-md);border:1px solid rgba(51,65,85,.25)}
  .sweep-table{width:100%;border-collapse:collapse;font-size:.84rem}
  .sweep-table th{
    text-align:left;padding:.6rem .8rem;background:rgba(15,23,42,.45);
    color:var(--text-secondary);font-size:.74rem;text-transform:uppercase;
  }
  .sweep-table td{padding:.45rem .8rem;border-bottom:1px solid rgba(51,65,85,.15)}
  .sweep-table .current-row td{font-weight:700;color:var(--amber)}

  .chart-img{width:100%;border-radius:var(--radius-md);border:1px solid rgba(51,65,85,.15)}
  .dl-section{text-align:center;padding:1rem 0 2rem}
  .footer{text-align:center;color:var(--text-muted);font-size:.75rem;padding-bottom:2rem}

  @media(max-width:820px){.layout{grid-template-columns:1fr}}
</style>
</head>
<body>
<div class="container">

<header class="hero">
  <h1>ETF TCO Calculator</h1>
  <p class="hero-sub">What does holding an ETF really cost once fees, spreads and dividend tax are counted?</p>
</header>

{% if error %}<div class="error" id="error-box">{{ error }}</div>{% else %}<div class="error hidden" id="error-box"></div>{% endif %}

<div class="layout">

<!-- Inputs -->
<div class="card">
  <h2>Investment Parameters</h2>
  <form method="POST" id="tco-form">
    <div class="form-group">
      <label>Start Capital ($)</label>
      <input type="text" name="start_capital" value="{{ form.start_capital }}">
    </div>
    <div class="form-group">
      <label>Recurring Investment ($)</label>
      <div class="inline">
        <select name="cadence">
          <option value="monthly" {{ 'selected' if form.cadence != 'yearly' }}>Monthly</option>
          <option value="yearly" {{ 'selected' if form.cadence == 'yearly' }}>Yearly</option>
        </select>
        <input type="text" name="recurring_amount" value="{{ form.recurring_amount }}">
      </div>
    </div>
    <div class="form-group">
      <label>Expected Annual Return (%)</label>
      <input type="number" step="0.1" name="expected_return" value="{{ form.expected_return }}">
    </div>
    <div class="form-group">
      <label>Holding Period (years)</label>
      <input type="number" name="holding_period" min="1" value="{{ form.holding_period }}">
    </div>
    <div class="form-group">
      <label>Expense Ratio</label>
      <div class="inline">
        <select name="expense_mode" data-toggles="expense">
          <option value="percentage" {{ 'selected' if form.expense_mode != 'fixed' }}>% of assets</option>
          <option value="fixed" {{ 'selected' if form.expense_mode == 'fixed' }}>$ per year</option>
        </select>
        <input type="number" step="0.01" name="expense_ratio" data-mode="expense:percentage"
               class="{{ 'hidden' if form.expense_mode == 'fixed' }}" value="{{ form.expense_ratio }}">
        <input type="number" step="0.01" name="expense_ratio_fixed" data-mode="expense:fixed"
               class="{{ 'hidden' if form.expense_mode != 'fixed' }}" value="{{ form.expense_ratio_fixed }}">
      </div>
    </div>
    <div class="form-group">
      <label>Bid-Ask Spread ($ per share)</label>
      <input type="number" step="0.01" name="bid_ask_spread" value="{{ form.bid_ask_spread }}">
    </div>
    <div class="form-group">
      <label>Brokerage Fee</label>
      <div class="inline">
        <select name="brokerage_mode" data-toggles="brokerage">
          <option value="fixed" {{ 'selected' if form.brokerage_mode != 'percentage' }}>$ per trade</option>
          <option value="percentage" {{ 'selected' if form.brokerage_mode == 'percentage' }}>% of investment</option>
        </select>
        <input type="number" step="0.01" name="brokerage_fee" data-mode="brokerage:fixed"
               class="{{ 'hidden' if form.brokerage_mode == 'percentage' }}" value="{{ form.brokerage_fee }}">
        <input type="number" step="0.01" name="brokerage_fee_percent" data-mode="brokerage:percentage"
               class="{{ 'hidden' if form.brokerage_mode != 'percentage' }}" value="{{ form.brokerage_fee_percent }}">
      </div>
    </div>
    <div class="form-group">
      <label>Number of Shares (per trade)</label>
      <input type="number" name="number_of_shares" value="{{ form.number_of_shares }}">
    </div>
    <div class="form-group">
      <label>Dividend Yield (%)</label>
      <input type="number" step="0.01" name="dividend_yield" value="{{ form.dividend_yield }}">
    </div>
    <div class="form-group">
      <label>Dividend Tax Rate (%)</label>
      <input type="number" step="0.01" name="dividend_tax_rate" value="{{ form.dividend_tax_rate }}">
    </div>
    <button type="submit" class="btn">Update Charts &amp; Report</button>
  </form>
</div>

<!-- Results -->
<div class="card" id="results">
  <h2>Results</h2>
  {% if d %}
  <div class="summary">
    <h3>Investment Summary</h3>
    <p>Start Capital: <strong data-field="start_capital" data-fmt="usd">{{ fmt(d.start_capital) }}</strong></p>
    <p><span data-field="cadence_label" data-fmt="text">{{ d.cadence_label }}</span> Investment: <strong data-field="recurring_amount" data-fmt="usd">{{ fmt(d.recurring_amount) }}</strong></p>
    <p>Total Invested: <strong data-field="total_invested" data-fmt="usd">{{ fmt(d.total_invested) }}</strong></p>
    <p>Final Value: <strong data-field="final_investment_value" data-fmt="usd">{{ fmt(d.final_investment_value) }}</strong></p>
  </div>
  <div class="stat">
    <h3>Expense Ratio Cost</h3>
    <div class="stat-value" data-field="expense_ratio_cost" data-fmt="usd">{{ fmt(d.expense_ratio_cost) }}</div>
    <div class="stat-note" data-field="expense_note" data-fmt="text">{{ d.expense_note }}</div>
  </div>
  <div class="stat">
    <h3>Trading Costs</h3>
    <div class="stat-value" data-field="trading_costs" data-fmt="usd">{{ fmt(d.trading_costs) }}</div>
    <div class="stat-note" data-field="trading_note" data-fmt="text">{{ d.trading_note }}</div>
  </div>
  <div class="stat">
    <h3>Dividend Taxes</h3>
    <div class="stat-value" data-field="dividend_taxes" data-fmt="usd">{{ fmt(d.dividend_taxes) }}</div>
  </div>
  <div class="stat">
    <h3>Total Costs</h3>
    <div class="stat-value big" data-field="total_costs" data-fmt="usd">{{ fmt(d.total_costs) }}</div>
  </div>
  <div class="stat">
    <h3>Annualized TCO</h3>
    <div class="stat-value big"><span data-field="annualized_tco" data-fmt="usd">{{ fmt(d.annualized_tco) }}</span>/year</div>
  </div>
  <div class="stat">
    <h3>Total Returns (Before Costs)</h3>
    <div class="stat-value gain" data-field="total_returns" data-fmt="usd">{{ fmt(d.total_returns) }}</div>
    <div class="stat-note" data-field="returns_note" data-fmt="text">{{ d.returns_note }}</div>
  </div>
  <div class="stat">
    <h3>Net Returns (After Costs)</h3>
    <div class="stat-value gain" data-field="net_returns" data-fmt="usd">{{ fmt(d.net_returns) }}</div>
    <div class="stat-note">Total Returns - Total Costs</div>
  </div>
  <p class="summary-text" data-field="summary_text" data-fmt="text">{{ d.summary_text }}</p>
  {% endif %}
</div>

</div>

{% if d and d.sweep %}
<div class="card">
  <h2>Costs by Holding Period</h2>
  <div class="table-wrap">
    <table class="sweep-table">
      <thead>
        <tr><th>Years</th><th>Invested</th><th>Final value</th><th>Total costs</th><th>Net returns</th><th>Cost drag</th></tr>
      </thead>
      <tbody>
        {% for r in d.sweep %}
        <tr class="{{ 'current-row' if r.years == d.holding_period }}">
          <td>{{ r.years }}</td>
          <td>{{ fmt(r.total_invested, 0) }}</td>
          <td>{{ fmt(r.final_investment_value, 0) }}</td>
          <td>{{ fmt(r.total_costs, 0) }}</td>
          <td>{{ fmt(r.net_returns, 0) }}</td>
          <td>{{ pct(r.cost_drag_pct) }}</td>
        </tr>
        {% endfor %}
      </tbody>
    </table>
  </div>
</div>
{% endif %}

{% if charts|length > 0 %}
<div class="card">
  <h2>Cost Breakdown</h2>
  <img class="chart-img" src="data:image/png;base64,{{ charts[0] }}" alt="Cost Breakdown">
</div>
{% endif %}

{% if charts|length > 1 %}
<div class="card">
  <h2>Growth vs Costs by Holding Period</h2>
  <img class="chart-img" src="data:image/png;base64,{{ charts[1] }}" alt="Growth vs Costs">
</div>
<div class="dl-section">
  <a href="/download-pdf" class="btn btn-success">Download PDF Report</a>
</div>
{% endif %}

<div class="footer">Estimates only &middot; not financial advice</div>
</div>

<script>
(function(){
  var form=document.getElementById('tco-form');
  var errorBox=document.getElementById('error-box');
  var usd=new Intl.NumberFormat('en-US',{style:'currency',currency:'USD'});
  var timer=null;

  function syncModes(){
    form.querySelectorAll('select[data-toggles]').forEach(function(sel){
      var group=sel.getAttribute('data-toggles');
      form.querySelectorAll('[data-mode^="'+group+':"]').forEach(function(inp){
        inp.classList.toggle('hidden',inp.getAttribute('data-mode')!==group+':'+sel.value);
      });
    });
  }

  function render(d){
    document.querySelectorAll('[data-field]').forEach(function(el){
      var v=d[el.getAttribute('data-field')];
      if(v===undefined) return;
      el.textContent=v===null?'n/a':(el.getAttribute('data-fmt')==='usd'?usd.format(v):v);
    });
  }

  function recalc(){
    fetch('/api/calculate',{method:'POST',body:new FormData(form)})
      .then(function(r){return r.json().then(function(b){return {ok:r.ok,body:b};});})
      .then(function(res){
        if(!res.ok){errorBox.textContent=res.body.error;errorBox.classList.remove('hidden');return;}
        errorBox.classList.add('hidden');
        render(res.body);
      });
  }

  form.addEventListener('input',function(){
    syncModes();
    clearTimeout(timer);
    timer=setTimeout(recalc,150);
  });
  form.addEventListener('change',syncModes);
})();
</script>
</body>
</html>
"""


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats with None so the payload is strict JSON."""
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _render(form: Mapping[str, Any], d=None, charts=None, error: str = "", status: int = 200):
    return render_template_string(
        HTML_TEMPLATE,
        form=form,
        d=d,
        charts=charts or [],
        error=error,
        fmt=fmt,
        pct=pct,
    ), status


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        _, _, _, d = calculate(DEFAULT_FORM)
        return _render(DEFAULT_FORM, d=d)

    # POST — full recompute with charts and PDF
    form = {**DEFAULT_FORM, **request.form.to_dict()}
    try:
        inputs, result, sweep, d = calculate(form)
    except InputError as e:
        logger.info("Rejected form input: %s", e)
        return _render(form, error=str(e), status=400)

    chart_images = report.get_web_charts(inputs, result, sweep)
    report.generate_pdf(inputs, result, sweep, d, d["summary_text"],
                        app.config["PDF_PATH"])

    return _render(form, d=d, charts=chart_images)


@app.route("/api/calculate", methods=["POST"])
def api_calculate():
    payload = request.get_json(silent=True)
    form = payload if isinstance(payload, dict) else request.form.to_dict()
    try:
        _, _, _, d = calculate(form)
    except InputError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(_json_safe(d))


@app.route("/download-pdf")
def download_pdf():
    path = app.config["PDF_PATH"]
    if os.path.exists(path):
        return send_file(os.path.abspath(path), as_attachment=True,
                         download_name="etf_tco_report.pdf")
    return "No report generated yet. Submit the form first.", 404


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(debug: bool = True) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://{cfg.WEB_HOST}:{cfg.WEB_PORT}"
    logger.info("Starting web app at %s", url)
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.WEB_HOST, port=cfg.WEB_PORT, debug=debug)


if __name__ == "__main__":
    run_web()

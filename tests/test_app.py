"""Tests for the Flask routes."""
import json

import pytest

from app import DEFAULT_FORM, app


@pytest.fixture
def client(tmp_path):
    app.config["TESTING"] = True
    app.config["PDF_PATH"] = str(tmp_path / "report.pdf")
    with app.test_client() as c:
        yield c


def _form(**overrides):
    form = {k: str(v) for k, v in DEFAULT_FORM.items()}
    form.update(overrides)
    return form


def test_index_get_renders_defaults(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "ETF TCO Calculator" in body
    assert "$40,000.00" in body
    assert "Costs by Holding Period" in body


def test_index_post_renders_charts_and_writes_pdf(client, tmp_path):
    response = client.post("/", data=_form(start_capital="20000"))
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert "data:image/png;base64," in body
    assert "$50,000.00" in body
    assert (tmp_path / "report.pdf").exists()


def test_index_post_bad_holding_period(client):
    response = client.post("/", data=_form(holding_period="0"))
    assert response.status_code == 400
    assert "Holding period must be at least 1 year" in response.get_data(as_text=True)


def test_api_calculate_form(client):
    response = client.post("/api/calculate", data=_form())
    assert response.status_code == 200
    data = response.get_json()
    assert data["total_invested"] == pytest.approx(40_000)
    assert data["total_costs"] == pytest.approx(
        data["expense_ratio_cost"] + data["trading_costs"] + data["dividend_taxes"]
    )
    assert data["expense_note"] == "0.2% of average portfolio value for 5 years"
    assert len(data["sweep"]) == 10


def test_api_calculate_json(client):
    response = client.post("/api/calculate", json={
        "holding_period": 2,
        "cadence": "yearly",
        "recurring_amount": 1000,
    })
    assert response.status_code == 200
    data = response.get_json()
    assert data["total_invested"] == pytest.approx(10_000 + 1_000 * 2)
    assert data["cadence"] == "yearly"


def test_api_calculate_mode_switch(client):
    pct = client.post("/api/calculate", data=_form()).get_json()
    fixed = client.post("/api/calculate", data=_form(expense_mode="fixed")).get_json()
    assert fixed["expense_ratio_cost"] == pytest.approx(20 * 5)
    assert fixed["expense_ratio_cost"] != pct["expense_ratio_cost"]


def test_api_calculate_rejects_bad_holding_period(client):
    response = client.post("/api/calculate", data=_form(holding_period="abc"))
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_api_calculate_rejects_huge_holding_period(client):
    response = client.post("/api/calculate", data=_form(holding_period="1e9"))
    assert response.status_code == 400
    assert "at most 60 years" in response.get_json()["error"]


def test_api_calculate_rejects_overflowing_field(client):
    response = client.post("/api/calculate", data=_form(expected_return="1e400"))
    assert response.status_code == 400
    assert "out of range" in response.get_json()["error"]


def _strict_loads(body):
    def reject(token):
        raise ValueError(f"non-standard JSON constant {token}")
    return json.loads(body, parse_constant=reject)


def test_api_calculate_emits_strict_json_for_overflowing_results(client):
    response = client.post("/api/calculate", data=_form(start_capital="1e308"))
    assert response.status_code == 200
    data = _strict_loads(response.get_data(as_text=True))
    assert data["dividend_taxes"] is None
    assert data["total_costs"] is None
    assert data["total_invested"] == pytest.approx(1e308)


def test_download_pdf_missing_returns_404(client):
    response = client.get("/download-pdf")
    assert response.status_code == 404


def test_download_pdf_after_submit(client):
    client.post("/", data=_form())
    response = client.get("/download-pdf")
    assert response.status_code == 200
    assert response.data.startswith(b"%PDF")

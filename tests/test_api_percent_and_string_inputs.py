# tests/test_api_percent_and_string_inputs.py
import pytest


def test_percent_string_inputs_are_normalized(client, deal_payload):
    numeric = client.post("/outputs", json=deal_payload).json()

    # Note the strings and percentages:
    payload = {
        "purchase_price": "$10,000,000",
        "equity_fraction": "40%",        # should normalize to 0.40
        "annual_interest_rate": "6.5%",  # should normalize to 0.065
        "amortization_years": "30",
        "hold_years": 5,
        "first_year_noi": "650,000",
        "annual_noi_growth": "2.5%",
        "exit_cap_rate": "6%",
    }
    r = client.post("/outputs", json=payload)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["annual_debt_service"] == pytest.approx(numeric["annual_debt_service"])
    assert data["irr"] == pytest.approx(numeric["irr"])


def test_non_numeric_string_rejected(client, deal_payload):
    r = client.post("/outputs", json={**deal_payload, "exit_cap_rate": "six percent"})
    assert r.status_code == 422

# tests/test_api_invalid_inputs.py
def test_zero_equity_returns_400(client, deal_payload):
    r = client.post("/outputs", json={**deal_payload, "equity_fraction": 0})
    # configuration errors surface as 400 with the problem list
    assert r.status_code == 400
    assert "Equity fraction" in r.text
    assert r.json()["detail"][0]["code"] == "EQUITY_OUT_OF_RANGE"


def test_non_positive_exit_cap_returns_400_everywhere(client, deal_payload):
    bad = {**deal_payload, "exit_cap_rate": 0}
    for path in ("/outputs", "/projection", "/scenarios"):
        r = client.post(path, json=bad)
        assert r.status_code == 400, path
        assert "EXIT_CAP_NON_POSITIVE" in r.text

    r = client.post("/optimize", json={"assumptions": bad})
    assert r.status_code == 400

    r = client.post("/sensitivity", json={"assumptions": bad})
    assert r.status_code == 400


def test_validate_reports_errors_without_failing(client, deal_payload):
    r = client.post("/validate", json={**deal_payload, "equity_fraction": 0, "exit_cap_rate": 0})
    assert r.status_code == 200
    codes = {e["code"] for e in r.json()["errors"]}
    assert codes == {"EQUITY_OUT_OF_RANGE", "EXIT_CAP_NON_POSITIVE"}


def test_missing_field_returns_422(client, deal_payload):
    payload = dict(deal_payload)
    del payload["exit_cap_rate"]
    r = client.post("/outputs", json=payload)
    assert r.status_code == 422


def test_unknown_field_returns_422(client, deal_payload):
    r = client.post("/outputs", json={**deal_payload, "noi_growth": 0.03})
    assert r.status_code == 422

from __future__ import annotations


def test_report_endpoints_respond(client):
    for path in (
        "/reports/costs",
        "/reports/costs?period=quarter",
        "/reports/monthly-trend?year=2026",
        "/reports/downtime?period=year",
        "/reports/upcoming-maintenance",
        "/reports/alerts",
        "/reports/dashboard",
    ):
        assert client.get(path).status_code == 200, path


def test_unknown_period_is_rejected(client):
    resp = client.get("/reports/costs", params={"period": "decade"})
    assert resp.status_code == 400


def test_explicit_dates_override_period(client):
    resp = client.get(
        "/reports/period",
        params={"period": "year", "date_from": "2026-02-01", "date_to": "2026-02-10"},
    )
    assert resp.json() == {"period": "year", "date_from": "2026-02-01", "date_to": "2026-02-10"}

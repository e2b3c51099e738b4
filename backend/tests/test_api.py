"""
Tests for the HTTP API.
"""
from conftest import LOCATIONS

STANDARD = {"XS": 30, "S": 30, "M": 20, "L": 10, "XL": 10}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["locations"] == 6
    assert body["pack_slots"] == 15


def test_config_endpoint(client):
    response = client.get("/api/v1/allocations/config")
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["sizes"] == ["XXS", "XS", "S", "M", "L", "XL"]
    roles = {loc["name"]: loc["role"] for loc in data["locations"]}
    assert roles["Office"] == "OFFICE"
    assert roles["Warehouse"] == "SINK"
    assert roles["Cedarhurst"] == "STORE"
    assert data["office_sample"] == {"XS": 1, "S": 1}


def test_compute_standard_line(client):
    response = client.post(
        "/api/v1/allocations/compute",
        json={"buy": STANDARD, "ship": STANDARD, "locations": LOCATIONS},
    )
    assert response.status_code == 200
    body = response.json()
    data = body["data"]

    assert body["success"] is True
    assert data["allocation_matches_ship"] is True
    assert data["allocation"]["Office"]["XS"] == 1
    assert data["allocation"]["Cedarhurst"]["XS"] == 12
    assert data["totals"]["XS"] == 30
    assert data["plan"]["total_packs"] == 10


def test_compute_ignore_teaneck(client):
    response = client.post(
        "/api/v1/allocations/compute",
        json={"buy": STANDARD, "ship": STANDARD, "ignore_teaneck": True},
    )
    data = response.json()["data"]
    assert all(qty == 0 for qty in data["allocation"]["Teaneck Store"].values())
    assert data["allocation"]["Warehouse"]["XS"] == 3


def test_compute_rejects_negative_quantity(client):
    response = client.post(
        "/api/v1/allocations/compute",
        json={"buy": {"XS": -1}, "ship": {"XS": 2}},
    )
    assert response.status_code == 422


def test_export_csv(client):
    response = client.post(
        "/api/v1/allocations/export",
        json={"buy": STANDARD, "ship": STANDARD},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0] == "location,XXS,XS,S,M,L,XL,Total"
    assert lines[-1] == "Total,0,30,30,20,10,10,100"


def test_reconcile_endpoint(client):
    allocation = {"Warehouse": {"XS": 4}}
    response = client.post(
        "/api/v1/allocations/reconcile",
        json={"ship": {"XS": 5}, "allocation": allocation, "scanned": allocation},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Totals do not match"
    assert body["data"]["allocation_matches_ship"] is False
    assert body["data"]["scan_matches_allocation"] is True
    assert body["data"]["mismatches"] == ["XS: alloc 4 vs ship 5 (diff -1)"]


def test_scan_accepted_then_blocked(client):
    allocation = {"Office": {"XS": 1}}
    first = client.post(
        "/api/v1/receiving/scan",
        json={"allocation": allocation, "scanned": {}, "location": "Office", "size": "XS"},
    ).json()
    assert first["data"]["outcome"]["accepted"] is True
    assert first["data"]["scanned"]["Office"]["XS"] == 1

    second = client.post(
        "/api/v1/receiving/scan",
        json={
            "allocation": allocation,
            "scanned": first["data"]["scanned"],
            "location": "Office",
            "size": "XS",
        },
    ).json()
    assert second["data"]["outcome"]["accepted"] is False
    assert second["message"].startswith("Over allocation blocked")
    assert second["data"]["totals"]["XS"] == 1


def test_scan_unknown_size_is_bad_request(client):
    response = client.post(
        "/api/v1/receiving/scan",
        json={"allocation": {}, "scanned": {}, "location": "Office", "size": "XXXL"},
    )
    assert response.status_code == 400
    assert "XXXL" in response.json()["detail"]


def test_export_rejects_reserved_location_name(client):
    response = client.post(
        "/api/v1/allocations/export",
        json={"buy": STANDARD, "ship": STANDARD, "locations": ["Bogota", "Total"]},
    )
    assert response.status_code == 400
    assert "reserved" in response.json()["detail"]

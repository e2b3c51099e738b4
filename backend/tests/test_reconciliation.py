"""
Tests for the closeout consistency checks.
"""
from packalloc.services.reconciliation import reconcile

SIZES = ["XS", "S", "M"]
LOCATIONS = ["Bogota", "Warehouse"]


def test_matching_allocation_and_scan_ready_for_closeout():
    allocation = {"Bogota": {"XS": 2, "S": 1}, "Warehouse": {"M": 3}}
    result = reconcile({"XS": 2, "S": 1, "M": 3}, allocation, LOCATIONS, SIZES, scanned=allocation)

    assert result["allocation_matches_ship"] is True
    assert result["scan_matches_allocation"] is True
    assert result["ready_for_closeout"] is True
    assert result["mismatches"] == []


def test_allocation_mismatch_reported():
    allocation = {"Bogota": {"XS": 10}}
    result = reconcile({"XS": 12}, allocation, LOCATIONS, SIZES)

    assert result["allocation_matches_ship"] is False
    assert result["allocation_vs_ship"] == {"XS": -2, "S": 0, "M": 0}
    assert result["mismatches"] == ["XS: alloc 10 vs ship 12 (diff -2)"]
    assert result["ready_for_closeout"] is False


def test_without_scan_not_ready():
    allocation = {"Bogota": {"XS": 1}}
    result = reconcile({"XS": 1}, allocation, LOCATIONS, SIZES)

    assert result["allocation_matches_ship"] is True
    assert result["scan_totals"] is None
    assert result["scan_matches_allocation"] is None
    assert result["ready_for_closeout"] is False


def test_scan_short_of_allocation():
    allocation = {"Bogota": {"S": 3}}
    scanned = {"Bogota": {"S": 1}, "Warehouse": {"M": 1}}
    result = reconcile({"S": 3}, allocation, LOCATIONS, SIZES, scanned=scanned)

    assert result["scan_vs_allocation"] == {"XS": 0, "S": -2, "M": 1}
    assert "S: scanned 1 vs alloc 3 (diff -2)" in result["mismatches"]
    assert "M: scanned 1 vs alloc 0 (diff 1)" in result["mismatches"]

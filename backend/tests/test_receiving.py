"""
Tests for the receiving (scan entry) session.
"""
import pytest

from packalloc.services.receiving import ReceivingSession

SIZES = ["XXS", "XS", "S", "M", "L", "XL"]
LOCATIONS = ["Bogota", "Office", "Warehouse"]


@pytest.fixture
def session():
    allocation = {"Office": {"XS": 1, "S": 1}, "Bogota": {"M": 2}}
    return ReceivingSession(allocation, LOCATIONS, SIZES)


def test_scan_within_allocation(session):
    outcome = session.scan("Bogota", "M")
    assert outcome["accepted"] is True
    assert outcome["over_allocation"] is False
    assert outcome["scanned"] == 1
    assert outcome["allocated"] == 2


def test_scan_over_allocation_blocked(session):
    session.scan("Office", "XS")
    outcome = session.scan("Office", "XS")

    assert outcome["accepted"] is False
    assert outcome["over_allocation"] is True
    assert session.scanned("Office", "XS") == 1


def test_override_allows_over_allocation(session):
    session.scan("Office", "XS")
    outcome = session.scan("Office", "XS", override=True)

    assert outcome["accepted"] is True
    assert outcome["over_allocation"] is True
    assert session.scanned("Office", "XS") == 2
    assert session.over_allocated_cells() == [
        {"location": "Office", "size": "XS", "scanned": 2, "allocated": 1},
    ]


def test_undo_is_last_in_first_out(session):
    session.scan("Bogota", "M")
    session.scan("Office", "S")

    assert session.undo() == {"location": "Office", "size": "S", "scanned": 0}
    assert session.undo() == {"location": "Bogota", "size": "M", "scanned": 0}
    assert session.undo() is None
    assert not session.can_undo


def test_blocked_scan_not_recorded_for_undo(session):
    session.scan("Warehouse", "L")
    assert not session.can_undo


def test_size_labels_are_normalized(session):
    outcome = session.scan("Office", "x-small")
    assert outcome["size"] == "XS"
    assert outcome["accepted"] is True


def test_unknown_size_rejected(session):
    with pytest.raises(ValueError):
        session.scan("Office", "XXL")


def test_unknown_location_rejected(session):
    with pytest.raises(ValueError):
        session.scan("Cedarhurst", "S")


def test_manual_edits_clamped(session):
    assert session.set_count("Bogota", "M", "5") == 5
    assert session.bump("Bogota", "M", -9) == 0
    assert not session.can_undo


def test_resume_from_saved_scan():
    session = ReceivingSession(
        {"Bogota": {"M": 2}}, LOCATIONS, SIZES, scanned={"Bogota": {"M": 2}},
    )
    assert session.totals()["M"] == 2
    assert session.scan("Bogota", "M")["accepted"] is False
    assert session.to_dict()["Bogota"]["M"] == 2

import pytest

from app.core.errors import ValidationError
from app.core.state_machine import InvalidTransition, OptimisticLockError
from app.models.appointment import normalize_status, transition_status


def test_appointment_state_transitions_and_history():
    doc = {"status": "pending", "version": 0, "status_history": []}
    doc.update(transition_status(doc, "confirmed", actor="vet@example.com"))
    assert doc["status"] == "confirmed"
    doc.update(transition_status(doc, "Completed"))
    assert doc["status"] == "completed"
    assert doc["version"] == 2
    assert [(h["from"], h["to"]) for h in doc["status_history"]] == [
        ("pending", "confirmed"),
        ("confirmed", "completed"),
    ]
    assert doc["status_history"][0]["actor"] == "vet@example.com"


def test_same_status_is_a_no_op():
    doc = {"status": "pending", "version": 3, "status_history": []}
    out = transition_status(doc, "pending")
    assert out == {"status": "pending", "status_history": [], "version": 3}


def test_version_mismatch_raises():
    doc = {"status": "pending", "version": 1}
    with pytest.raises(OptimisticLockError):
        transition_status(doc, "confirmed", expected_version=0)


def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationError) as exc:
        normalize_status("teleported")
    assert exc.value.extra["valid_statuses"] == ["pending", "confirmed", "completed", "cancelled"]


@pytest.mark.parametrize("start,target", [
    ("pending", "completed"),
    ("completed", "pending"),
    ("cancelled", "confirmed"),
    ("cancelled", "pending"),
])
def test_any_valid_status_is_reachable(start, target):
    doc = {"status": start, "version": 0, "status_history": []}
    out = transition_status(doc, target)
    assert out["status"] == target
    assert out["version"] == 1
    assert out["status_history"][0]["from"] == start


def test_stored_status_case_is_ignored():
    out = transition_status({"status": "Pending", "version": 0}, "CONFIRMED")
    assert out["status"] == "confirmed"
    assert out["status_history"][0]["from"] == "pending"


def test_unknown_stored_status_cannot_transition():
    with pytest.raises(InvalidTransition):
        transition_status({"status": "archived", "version": 0}, "pending")

# app/models/appointment.py
from __future__ import annotations
from typing import Any, Dict, Optional

from app.core.errors import ValidationError
from app.core.state_machine import StateMachine

APPOINTMENT_KINDS = ("grooming", "healthcare")

APPOINTMENT_STATUSES = ["pending", "confirmed", "completed", "cancelled"]

# any status may move to any other; the state machine only keeps history and version
ALLOWED_TRANSITIONS = {s: [t for t in APPOINTMENT_STATUSES if t != s] for s in APPOINTMENT_STATUSES}

# POST /{kind} and PUT /{kind}/{id}
BOOKING_REQUIRED_FIELDS = ["pet_name", "owner_name", "phone", "address", "pet_type", "breed"]

# POST /{kind}/appointment, the shape the booking form sends
FORM_REQUIRED_FIELDS = [
    "pet_name",
    "pet_type",
    "phone",
    "address",
    "friendly",
    "trained",
    "vaccinated",
    "pickup_time",
    "delivery_time",
]


def normalize_status(status: Optional[str]) -> str:
    """Lowercase a status and check it is one of APPOINTMENT_STATUSES."""
    value = (status or "").strip().lower()
    if value not in APPOINTMENT_STATUSES:
        raise ValidationError("Invalid status value", valid_statuses=APPOINTMENT_STATUSES, received=status)
    return value


def transition_status(doc: Dict[str, Any], new_status: str, actor: Optional[str] = None,
                      expected_version: Optional[int] = None) -> Dict[str, Any]:
    """
    Record a status change (history entry, version bump, optional version check).
    Returns the fields to $set on the stored document (status, status_history, version).
    """
    sm = StateMachine(
        state=(doc.get("status") or "pending").strip().lower(),
        allowed_transitions=ALLOWED_TRANSITIONS,
        version=int(doc.get("version") or 0),
        history=list(doc.get("status_history") or []),
    )
    result = sm.apply(normalize_status(new_status), actor=actor, expected_version=expected_version)
    return {
        "status": result["state"],
        "status_history": result["history"],
        "version": int(result["version"]),
    }

# app/api/routes/appointments.py
"""
Grooming and healthcare bookings share one surface, mounted once per kind:

    POST   /{kind}               create (booking fields required)
    POST   /{kind}/appointment   create from the booking form
    GET    /{kind}               list, newest first
    PATCH  /{kind}/{id}          status change through the state machine
    PUT    /{kind}/{id}          full update
    DELETE /{kind}/{id}          delete
"""
import logging
import re
from typing import Any, Dict, List
from fastapi import APIRouter, Depends

from app.api.deps import get_db
from app.api.schemas.appointment import AppointmentPayload, StatusUpdate
from app.core.errors import NotFound, ValidationError, missing_fields
from app.database import ID_FIELD, FileBackedDB
from app.models.appointment import (
    APPOINTMENT_KINDS,
    BOOKING_REQUIRED_FIELDS,
    FORM_REQUIRED_FIELDS,
    normalize_status,
    transition_status,
)
from app.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _check_id(appointment_id: str) -> str:
    if not _ID_RE.match(appointment_id or ""):
        raise ValidationError("Invalid appointment ID")
    return appointment_id


def _require(data: Dict[str, Any], required: List[str]) -> None:
    missing = missing_fields(data, required)
    if missing:
        raise ValidationError(
            "Missing required fields",
            missing_fields=missing,
            detail=f"Please provide: {', '.join(missing)}",
        )


def _new_appointment(data: Dict[str, Any]) -> Dict[str, Any]:
    # a new booking always starts in "pending" unless the caller picked a valid status
    now = utc_now_iso()
    data["status"] = normalize_status(data.get("status") or "pending")
    data["status_history"] = []
    data["version"] = 0
    data["created_at"] = now
    data["updated_at"] = now
    return data


def build_router(kind: str) -> APIRouter:
    if kind not in APPOINTMENT_KINDS:
        raise ValueError(f"Unknown appointment kind: {kind}")
    router = APIRouter(prefix=f"/{kind}", tags=[kind])

    @router.post("", status_code=201)
    def create_appointment(payload: AppointmentPayload, db: FileBackedDB = Depends(get_db)):
        data = payload.model_dump(exclude_none=True)
        _require(data, BOOKING_REQUIRED_FIELDS)
        doc = _new_appointment(data)
        db.collection(kind).insert_one(doc)
        logger.info("Created %s appointment %s", kind, doc[ID_FIELD])
        return doc

    @router.post("/appointment", status_code=201)
    def create_from_form(payload: AppointmentPayload, db: FileBackedDB = Depends(get_db)):
        data = payload.model_dump(exclude_none=True)
        _require(data, FORM_REQUIRED_FIELDS)
        data["owner_name"] = data.get("owner_name") or "Anonymous"
        data["owner_email"] = data.get("owner_email") or "Anonymous"
        doc = _new_appointment(data)
        result = db.collection(kind).insert_one(doc)
        logger.info("Created %s appointment %s from booking form", kind, result.inserted_id)
        return {
            "message": "Appointment created successfully",
            "inserted_id": result.inserted_id,
            "appointment": doc,
        }

    @router.get("", response_model=List[Dict[str, Any]])
    def list_appointments(db: FileBackedDB = Depends(get_db)):
        return db.collection(kind).find(sort=[("created_at", -1)])

    @router.patch("/{appointment_id}")
    def update_status(appointment_id: str, payload: StatusUpdate, db: FileBackedDB = Depends(get_db)):
        """
        Body: { "status": "<target>", "expected_version": <int, optional> }
        Unknown status -> 400, version mismatch -> 409.
        """
        _check_id(appointment_id)
        if not payload.status:
            raise ValidationError("status required")
        collection = db.collection(kind)
        doc = collection.find_one({ID_FIELD: appointment_id})
        if not doc:
            raise NotFound("Appointment not found")
        updates = transition_status(doc, payload.status, actor=payload.actor,
                                    expected_version=payload.expected_version)
        updates["updated_at"] = utc_now_iso()
        result = collection.update_one({ID_FIELD: appointment_id}, {"$set": updates})
        if result.matched_count == 0:
            raise NotFound("Appointment not found")
        return {
            "message": "Status updated successfully",
            "modified_count": result.modified_count,
            "status": updates["status"],
            "version": updates["version"],
        }

    @router.put("/{appointment_id}")
    def replace_appointment(appointment_id: str, payload: AppointmentPayload, db: FileBackedDB = Depends(get_db)):
        _check_id(appointment_id)
        data = payload.model_dump(exclude_none=True)
        data.pop(ID_FIELD, None)
        _require(data, BOOKING_REQUIRED_FIELDS)
        collection = db.collection(kind)
        doc = collection.find_one({ID_FIELD: appointment_id})
        if not doc:
            raise NotFound("Appointment not found")

        new_status = data.pop("status", None)
        # bookkeeping fields are owned by the server
        for key in ("status_history", "version", "created_at"):
            data.pop(key, None)
        if new_status:
            data.update(transition_status(doc, new_status))
        data["updated_at"] = utc_now_iso()

        result = collection.update_one({ID_FIELD: appointment_id}, {"$set": data})
        if result.matched_count == 0:
            raise NotFound("Appointment not found")
        return {"message": "Appointment updated successfully", "modified_count": result.modified_count}

    @router.delete("/{appointment_id}")
    def delete_appointment(appointment_id: str, db: FileBackedDB = Depends(get_db)):
        _check_id(appointment_id)
        result = db.collection(kind).delete_one({ID_FIELD: appointment_id})
        if result.deleted_count == 0:
            raise NotFound("Appointment not found")
        return {"message": "Appointment deleted successfully", "deleted_count": result.deleted_count}

    return router


grooming_router = build_router("grooming")
healthcare_router = build_router("healthcare")

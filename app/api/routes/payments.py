# app/api/routes/payments.py
import logging
from fastapi import APIRouter, Depends

from app.api.deps import get_db, get_payment_gateway
from app.api.schemas.payment import PaymentIntentRequest, PaymentRecordRequest
from app.config import settings
from app.core.errors import NotFound, ValidationError, missing_fields
from app.database import FileBackedDB
from app.services.payment import PaymentGateway, create_payment_intent
from app.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


@router.post("/create-payment-intent")
def payment_intent(payload: PaymentIntentRequest, gateway: PaymentGateway = Depends(get_payment_gateway)):
    """
    Create a payment intent for `amount` (major currency units) and return its
    client secret for the front-end card form.
    """
    intent = create_payment_intent(gateway, payload.amount, settings.PAYMENT_CURRENCY)
    logger.info("Created payment intent %s for %s %s", intent.get("id"), intent.get("amount"), intent.get("currency"))
    return {"success": True, "client_secret": intent["client_secret"]}


@router.post("/make-payment", status_code=201)
def record_payment(payload: PaymentRecordRequest, db: FileBackedDB = Depends(get_db)):
    """Store a completed payment (the gateway has already charged the card)."""
    data = payload.model_dump()
    missing = missing_fields(data, ["email", "amount", "transaction_id"])
    if missing:
        raise ValidationError("Missing required fields", missing_fields=missing)
    if payload.amount <= 0:
        raise ValidationError("Invalid amount")

    record = {
        "payer_email": payload.email,
        "amount": float(payload.amount),
        "transaction_id": payload.transaction_id,
        "purpose": payload.purpose,
        "reference_id": payload.reference_id,
        "date": utc_now_iso(),
    }
    result = db.collection("payments").insert_one(record)
    return {"success": True, "message": "Payment successful", "inserted_id": result.inserted_id}


@router.get("/payment-history/{email}")
def payment_history(email: str, db: FileBackedDB = Depends(get_db)):
    payments = db.collection("payments").find({"payer_email": email}, sort=[("date", -1)])
    if not payments:
        raise NotFound("No payments found", success=False)
    return {"success": True, "data": payments}

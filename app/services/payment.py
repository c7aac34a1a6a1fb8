import math
import os
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Protocol

from app.core.errors import AppError, ValidationError


class PaymentError(AppError):
    status_code = 502


class PaymentGateway(Protocol):
    def create_payment_intent(self, amount_cents: int, currency: str) -> Dict[str, Any]: ...


def to_cents(amount: float) -> int:
    """Convert a currency amount to integer minor units (half up)."""
    try:
        return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise ValidationError("Invalid amount") from exc


class FakePaymentGateway:
    """
    Minimal fake payment gateway:
    - any positive amount produces an intent with a client secret
    - a non-positive amount raises PaymentError
    Returns: {"id", "client_secret", "amount", "currency", "status"}
    """

    def create_payment_intent(self, amount_cents: int, currency: str) -> Dict[str, Any]:
        if amount_cents <= 0:
            raise PaymentError("Payment gateway rejected the amount")
        intent_id = f"pi_{os.urandom(8).hex()}"
        return {
            "id": intent_id,
            "client_secret": f"{intent_id}_secret_{os.urandom(8).hex()}",
            "amount": int(amount_cents),
            "currency": currency,
            "status": "requires_payment_method",
        }


def create_payment_intent(gateway: PaymentGateway, amount: Any, currency: str) -> Dict[str, Any]:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValidationError("Invalid amount")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Invalid amount")
    return gateway.create_payment_intent(to_cents(value), currency)

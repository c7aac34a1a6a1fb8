from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, Field


class PaymentIntentRequest(BaseModel):
    # validated by the payment service so a bad value maps to "Invalid amount"
    amount: Optional[Any] = None


class PaymentRecordRequest(BaseModel):
    email: Optional[str] = None
    amount: Optional[float] = None
    transaction_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("transaction_id", "transactionId")
    )
    purpose: Optional[str] = None
    reference_id: Optional[str] = Field(None, validation_alias=AliasChoices("reference_id", "referenceId"))

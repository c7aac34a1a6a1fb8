from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def _alias(name: str, camel: str) -> AliasChoices:
    return AliasChoices(name, camel)


class AppointmentPayload(BaseModel):
    """
    Booking form body for grooming / healthcare. Every field is optional here;
    the route decides which ones are required for the endpoint being called.
    """
    pet_name: Optional[str] = Field(None, validation_alias=_alias("pet_name", "petName"))
    pet_type: Optional[str] = Field(None, validation_alias=_alias("pet_type", "petType"))
    breed: Optional[str] = None
    owner_name: Optional[str] = Field(None, validation_alias=_alias("owner_name", "ownerName"))
    owner_email: Optional[str] = Field(None, validation_alias=_alias("owner_email", "ownerEmail"))
    phone: Optional[str] = None
    address: Optional[str] = None
    friendly: Optional[Any] = None
    trained: Optional[Any] = None
    vaccinated: Optional[Any] = None
    pickup_time: Optional[str] = Field(None, validation_alias=_alias("pickup_time", "pickupTime"))
    delivery_time: Optional[str] = Field(None, validation_alias=_alias("delivery_time", "deliveryTime"))
    status: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class StatusUpdate(BaseModel):
    status: Optional[str] = None
    expected_version: Optional[int] = Field(
        None, validation_alias=_alias("expected_version", "expectedVersion")
    )
    actor: Optional[str] = None

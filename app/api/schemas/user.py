# app/api/schemas/user.py
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class UserCreate(BaseModel):
    email: EmailStr
    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "displayName"))
    photo_url: Optional[str] = Field(None, validation_alias=AliasChoices("photo_url", "photoURL"))
    role: Optional[str] = "user"

    # the sign-up form may send more profile fields; keep them
    model_config = ConfigDict(extra="allow")

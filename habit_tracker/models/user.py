"""User (local profile) model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserBase(BaseModel):
    """Base user fields."""

    name: str = Field(min_length=1)
    photo: Optional[str] = None


class UserCreate(UserBase):
    """User creation model with plain PIN."""

    pin: str = Field(min_length=1)


class UserUpdate(BaseModel):
    """User update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1)
    photo: Optional[str] = None
    pin: Optional[str] = Field(default=None, min_length=1)


class User(UserBase):
    """User model without PIN hash (for API responses)."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_at: datetime
    updated_at: datetime
    is_dirty: bool = True
    is_deleted: bool = False

    model_config = {"populate_by_name": True}


class PinVerification(BaseModel):
    """PIN verification request."""

    pin: str


class PinVerificationResult(BaseModel):
    """PIN verification response."""

    valid: bool

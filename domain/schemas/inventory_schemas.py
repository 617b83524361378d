"""Schemas for users, locations and food items"""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from domain.enums import FreshnessTier, LocationType, Unit
from domain.schemas.base import CamelModel


def _coerce_date(v):
    """Accept ``YYYY-MM-DD``, full ISO timestamps and datetimes; keep the day only."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and len(v) > 10 and v[10] in ("T", " "):
        return v[:10]
    return v


# =============================================================================
# USERS
# =============================================================================


class UserRecord(BaseModel):
    """Stored user, including the password hash. Never returned to clients."""

    id: int
    username: str
    password_hash: str

    model_config = {"from_attributes": True}


class UserResponse(CamelModel):
    id: int
    username: str


class SessionRecord(BaseModel):
    token: str
    user_id: int
    expires_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# LOCATIONS
# =============================================================================


class LocationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: LocationType

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class LocationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[LocationType] = None

    @model_validator(mode="after")
    def reject_nulls(self):
        for field in self.model_fields_set:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class LocationResponse(CamelModel):
    id: int
    name: str
    type: LocationType
    user_id: int


# =============================================================================
# FOOD ITEMS
# =============================================================================


class FoodItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=0)
    unit: Unit
    location_id: int
    expiry_date: date
    price: Optional[int] = Field(None, ge=0, description="Price in cents")

    @field_validator("expiry_date", mode="before")
    @classmethod
    def normalize_expiry(cls, v):
        return _coerce_date(v)


class FoodItemUpdate(CamelModel):
    """Partial update; only fields present in the payload are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[Unit] = None
    location_id: Optional[int] = None
    expiry_date: Optional[date] = None
    price: Optional[int] = Field(None, ge=0, description="Price in cents")

    @field_validator("expiry_date", mode="before")
    @classmethod
    def normalize_expiry(cls, v):
        return _coerce_date(v)

    @model_validator(mode="after")
    def reject_nulls(self):
        # price is the only nullable column
        for field in self.model_fields_set - {"price"}:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class FoodItemResponse(CamelModel):
    id: int
    name: str
    quantity: int
    unit: Unit
    location_id: int
    expiry_date: date
    price: Optional[int]
    purchased: datetime
    user_id: int

    @field_validator("purchased")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite drops the offset; timestamps are always written in UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class FoodItemView(FoodItemResponse):
    """Food item annotated with its freshness tier"""

    days_until_expiry: int
    status: FreshnessTier

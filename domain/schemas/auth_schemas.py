"""Schemas for registration and login"""

from pydantic import BaseModel, Field, field_validator


class Credentials(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=6, max_length=256)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        return v.strip()

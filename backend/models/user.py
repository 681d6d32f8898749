# Role: Authorized-user records and the admin input schemas. Emails are validated as addresses, normalized to lower
# case and names trimmed before they reach the store, so lookups by email are case-insensitive.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


def _clean_email(value: Any) -> Any:
    # Runs before EmailStr, which only lower-cases the domain part.
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _normalize_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Name is required")
    if len(cleaned) > 255:
        raise ValueError("Name is too long")
    return cleaned


class User(BaseModel):
    id: int
    email: str
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserCreate(BaseModel):
    email: EmailStr
    name: str

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> Any:
        return _clean_email(value)

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return _normalize_name(value)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> Any:
        return _clean_email(value)

    @field_validator("name")
    @classmethod
    def _name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _normalize_name(value)

    @model_validator(mode="after")
    def _at_least_one(self):
        if self.email is None and self.name is None:
            raise ValueError("At least one field (email or name) must be provided for update")
        return self

"""Structural model of a CDM contact record."""

import re
import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@.]+(\.[^\s@.]+)+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]+$")


class ContactRecord(BaseModel):
    """Contact record as submitted through the intake process.

    Field names follow the CDM camelCase attribute names. Unknown attributes
    are rejected and types are checked strictly, so ``"true"`` is not a valid
    ``isActive``.
    """

    contact_id: str = Field(alias="contactId", min_length=1, default_factory=lambda: str(uuid.uuid4()))
    full_name: str = Field(alias="fullName", min_length=1, max_length=255)
    email_address: str = Field(alias="emailAddress")
    phone_number: str | None = Field(alias="phoneNumber", default=None)
    company: str | None = Field(default=None, max_length=255)
    address_line1: str | None = Field(alias="addressLine1", default=None, max_length=255)
    address_line2: str | None = Field(alias="addressLine2", default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state_province: str | None = Field(alias="stateProvince", default=None, max_length=100)
    postal_code: str | None = Field(alias="postalCode", default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)
    job_title: str | None = Field(alias="jobTitle", default=None, max_length=255)
    department: str | None = Field(default=None, max_length=255)
    preferred_contact_method: Literal["email", "phone", "mail"] = Field(
        alias="preferredContactMethod", default="email"
    )
    is_active: bool = Field(alias="isActive", default=True)
    notes: str | None = Field(default=None, max_length=1000)
    tags: list[str] | Literal[""] | None = None
    custom_fields: dict[str, Any] | None = Field(alias="customFields", default=None)
    created_on: str | None = Field(alias="createdOn", default=None, max_length=255)
    modified_on: str | None = Field(alias="modifiedOn", default=None, max_length=255)
    created_by: str = Field(alias="createdBy", min_length=1, default="system")
    modified_by: str = Field(alias="modifiedBy", min_length=1, default="system")

    model_config = ConfigDict(extra="forbid", strict=True)

    @field_validator("email_address")
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.fullmatch(v):
            raise ValueError("must be a valid email")
        return v

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v):
        if v and not PHONE_PATTERN.fullmatch(v):
            raise ValueError("must contain only digits, spaces, dashes, parentheses and a leading +")
        return v


def structural_errors(error: ValidationError) -> list[str]:
    """One ``path: message`` line per violated field."""
    messages = []
    for detail in error.errors():
        path = ".".join(str(part) for part in detail["loc"]) or "<record>"
        message = detail["msg"].removeprefix("Value error, ")
        messages.append(f"{path}: {message}")
    return messages

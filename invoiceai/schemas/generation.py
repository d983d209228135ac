"""Strict schema for the JSON object returned by the language model."""

import re
from datetime import date, datetime, time, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictStr, field_validator

from invoiceai.services.prompts import DEFAULT_CURRENCY

# Finite numbers only: strings such as "2" are rejected rather than coerced
PositiveNumber = Annotated[float, Field(strict=True, gt=0, lt=10**8, allow_inf_nan=False)]

_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")


class GeneratedClient(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: StrictStr = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[StrictStr] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("client name must not be blank")
        return value.strip()

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class GeneratedItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: StrictStr = Field(..., min_length=1)
    quantity: PositiveNumber
    price: PositiveNumber


class GeneratedInvoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client: GeneratedClient
    items: list[GeneratedItem] = Field(..., min_length=1)
    currency: Optional[StrictStr] = DEFAULT_CURRENCY
    notes: Optional[StrictStr] = None
    due_date: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: Optional[str]) -> str:
        if value is None:
            return DEFAULT_CURRENCY
        if not _CURRENCY_RE.match(value):
            raise ValueError("currency must be a three-letter ISO 4217 code")
        return value.upper()

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, str):
            try:
                parsed_date = date.fromisoformat(value.strip())
            except ValueError:
                return value
            return datetime.combine(parsed_date, time.min, tzinfo=timezone.utc)
        return value

    @field_validator("due_date")
    @classmethod
    def due_date_is_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

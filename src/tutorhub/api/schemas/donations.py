"""Request bodies for the donor ledger."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class DonorCreateRequest(BaseModel):
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class DonorUpdateRequest(BaseModel):
    """Partial update; only fields present in the body change."""

    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class DonationCreateRequest(BaseModel):
    amount: Decimal
    donation_date: datetime | None = Field(
        None, alias="donationDate", description="Defaults to the time of the request"
    )
    currency: str | None = Field(None, max_length=3)
    notes: str | None = None

    model_config = ConfigDict(populate_by_name=True)

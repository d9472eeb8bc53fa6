from __future__ import annotations

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, Field

QuoteStatus = Literal["draft", "sent", "accepted", "rejected"]


class ServiceLine(BaseModel):
    """One row of the services table, exactly as typed in (may be half-filled)."""

    description: str = ""
    unit: str = ""
    # None = the cell is still empty
    quantity: float | None = None
    unit_price: float | None = None


class ClientFields(BaseModel):
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    client_address: str = ""

    validity_days: int = Field(default=14, ge=1, le=365)
    terms: str | None = None


class QuoteRequest(ClientFields):
    """Body of POST /api/quotes. Rules beyond types live in core.validation."""

    services: list[ServiceLine] = []


class ServiceItem(BaseModel):
    """Service in wire shape: what the submission and the webhook carry."""

    description: str
    unit: str
    quantity: float = Field(gt=0)
    unit_price: float = Field(gt=0)


class QuoteSubmission(BaseModel):
    client_name: str
    client_email: str
    client_phone: str
    client_address: str
    validity_days: int = Field(default=14, ge=1, le=365)
    terms: str = ""

    services: list[ServiceItem] = Field(min_length=1)


class Quote(BaseModel):
    id: int
    quote_number: str

    client_name: str
    client_email: str
    client_phone: str
    client_address: str
    validity_days: int = 14
    terms: str | None = None

    grand_total: float = 0.0
    status: QuoteStatus = "draft"
    created_at: datetime


class QuoteServiceRecord(BaseModel):
    id: int
    quote_id: int

    description: str
    unit: str
    quantity: float
    unit_price: float
    # stored at insert time, never re-derived
    total: float


class QuoteDetail(Quote):
    services: list[QuoteServiceRecord] = []


class SubmissionResult(BaseModel):
    success: bool = True
    quote_number: str
    message: str

    # only present when the quote was saved but the webhook did not accept it
    webhook_error: str | None = None
    webhook_status: Union[int, str, None] = None


class PreviewLine(ServiceItem):
    total: float


class QuotePreview(BaseModel):
    quote_number: str
    client_name: str
    client_email: str
    client_phone: str
    client_address: str
    validity_days: int
    terms: str

    services: list[PreviewLine]
    grand_total: float

"""Pydantic models for API request payloads."""

from datetime import date

from pydantic import BaseModel, Field

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}"


class PurchaseCreate(BaseModel):
    """Manual purchase entry form."""

    item_name: str = Field(min_length=1)
    store_name: str | None = None
    price: float = Field(ge=0)
    quantity: float = Field(default=1.0, gt=0)
    unit: str | None = None
    date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)


class PurchaseUpdate(BaseModel):
    """Edit of an existing purchase or overrides for a quick add."""

    store_name: str | None = None
    price: float | None = Field(default=None, ge=0)
    quantity: float | None = Field(default=None, gt=0)
    unit: str | None = None
    date: str | None = Field(default=None, pattern=ISO_DATE_PATTERN)


class ChatMessageCreate(BaseModel):
    """Free text typed into the chat."""

    text: str = Field(min_length=1, max_length=2000)


class InsightsRequest(BaseModel):
    """Date range to analyze for saving tips."""

    start: date | None = None
    end: date | None = None

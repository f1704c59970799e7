"""Models for purchases extracted from free text."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class ParsedPurchase(BaseModel):
    """Structured purchase candidate returned by the language model."""

    model_config = ConfigDict(str_strip_whitespace=True)

    item_name: str = Field(min_length=1)
    store_name: str = "Unknown Store"
    price: float = Field(default=0.0, ge=0)
    quantity: float = Field(default=1.0, gt=0)
    unit: str = "unit"
    date: str = Field(default=None, validate_default=True)
    confidence: float = Field(default=0.9, ge=0.0, le=1.0)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: object) -> float:
        return _to_float(value, default=0.0)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: object) -> float:
        return _to_float(value, default=1.0) or 1.0

    @field_validator("store_name", "unit", mode="before")
    @classmethod
    def _blank_to_default(cls, value: object, info: ValidationInfo) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _iso_date_or_today(cls, value: object, info: ValidationInfo) -> str:
        today = (info.context or {}).get("today") or date.today()
        return _iso_day(value) or today.isoformat()


class PurchaseExtraction(BaseModel):
    """Raw structured output of the purchase extraction prompt."""

    is_purchase: bool
    data: dict[str, object] | None = None
    response_message: str | None = None


def _to_float(value: object, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip().lstrip("$").replace(",", "")
        try:
            return float(cleaned)
        except ValueError:
            return default
    return default


def _iso_day(value: object) -> str | None:
    """Return the ``YYYY-MM-DD`` day of an ISO date or timestamp string."""
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10]).isoformat()
    except ValueError:
        return None

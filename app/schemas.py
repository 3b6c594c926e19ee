from pydantic import BaseModel, Field

from app.receipt.base import MAX_AMOUNT, Confidence


# --- Friends ---

class FriendIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    handle: str = Field(min_length=1, max_length=64)  # e.g. "@aria"


# --- Receipts ---

class ManualItemIn(BaseModel):
    name: str | None = None
    price: float | None = Field(None, ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    confidence: Confidence | None = None


class ManualReceiptIn(BaseModel):
    store_name: str | None = None
    receipt_date: str | None = None  # YYYY-MM-DD, anything else is stored as no date
    subtotal: float | None = Field(None, ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    tax: float | None = Field(None, ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    tip: float | None = Field(None, ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    discount: float | None = Field(None, ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    total: float | None = Field(None, ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    items: list[ManualItemIn] = []


class ItemEditIn(BaseModel):
    name: str | None = None
    price: str | None = None  # raw text as typed; sanitized server side

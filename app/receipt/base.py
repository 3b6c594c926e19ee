from typing import Annotated, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

Confidence = Literal["high", "medium", "low"]

# amounts are stored as Numeric(12, 2)
MAX_AMOUNT = 10_000_000_000

Money = Annotated[float, Field(ge=0, lt=MAX_AMOUNT, allow_inf_nan=False)]


class ParsedItem(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    name: str | None
    price: Money | None  # display units (e.g. 12.50 for $12.50)
    confidence: Confidence  # legibility only, never used to alter the price


class ParsedReceipt(BaseModel):
    """Structured receipt as returned by an extraction provider.

    Every key is required but nullable: an unreadable value is null, never guessed.
    """

    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True)

    store_name: str | None = Field(alias="storeName")
    receipt_date: str | None = Field(alias="receiptDate")  # YYYY-MM-DD when determinable
    subtotal: Money | None
    tax: Money | None
    tip: Money | None
    discount: Money | None  # positive magnitude
    total: Money | None
    items: list[ParsedItem]


class ExtractionError(Exception):
    """Base class for everything that can go wrong turning an image into a ParsedReceipt."""


class MissingCredential(ExtractionError):
    """No way to call the extraction service (no API key, unknown provider)."""


class EncodingFailure(ExtractionError):
    """The image could not be serialized for the request."""


class ServiceUnavailable(ExtractionError):
    """Transport error, timeout or non-success response."""


class MalformedResult(ExtractionError):
    """The response did not parse into the ParsedReceipt shape."""


class ReceiptExtractor(Protocol):
    async def extract(self, image_bytes: bytes, content_type: str) -> ParsedReceipt: ...

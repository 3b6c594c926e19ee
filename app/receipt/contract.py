"""Request/response contract shared by every receipt extraction provider."""

import json
import re
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from app.receipt.base import MalformedResult, ParsedReceipt

INSTRUCTIONS = """\
You are a receipt parsing assistant specialized in accurate data extraction. Analyze the receipt image and extract all purchased items along with financial totals. Return the data in strict JSON format.

Accuracy rules:
- Extract ONLY what you can clearly read from the image.
- Do NOT adjust or "correct" item prices to make them sum to the subtotal or total.
- Do NOT calculate or infer prices from other values.
- If a value is unclear, blurry or unreadable, set it to null. Do NOT guess.
- Accuracy of individual values is more important than mathematical consistency.

Items:
- Extract purchasable items separately from the financial totals.
- If an item has a quantity greater than 1 (e.g. "2x Burger" or "Burger x2"), create a SEPARATE entry for each unit.
- Preserve the item name as printed, including modifiers (e.g. "Coffee - Extra Shot").
- Monetary values are plain numbers without currency symbols.
- Ignore promotional text, loyalty info and store policies.

Totals:
- subtotal, tax, tip, discount and total are separate fields; null when not visible.
- discount is a positive number.
- Do NOT force totals to match the item sum.

Metadata:
- storeName comes from the receipt header/branding, else null.
- receiptDate is the printed transaction/purchase date formatted YYYY-MM-DD. If several dates appear, choose the transaction date. Never infer a date from filenames, EXIF data or context; use null instead.

Confidence:
- Every item has "confidence": "high", "medium" or "low", based ONLY on how legible the price is.

Output valid JSON matching the provided schema, with no text outside the JSON."""

_NULLABLE_NUMBER = {"type": ["number", "null"], "minimum": 0}

RECEIPT_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["storeName", "receiptDate", "subtotal", "tax", "tip", "discount", "total", "items"],
    "properties": {
        "storeName": {"type": ["string", "null"], "description": "Name of the store or restaurant"},
        "receiptDate": {"type": ["string", "null"], "description": "Transaction date as YYYY-MM-DD"},
        "subtotal": {**_NULLABLE_NUMBER, "description": "Subtotal before tax and tip"},
        "tax": {**_NULLABLE_NUMBER, "description": "Total tax amount"},
        "tip": {**_NULLABLE_NUMBER, "description": "Tip amount if present"},
        "discount": {**_NULLABLE_NUMBER, "description": "Total discount as a positive amount"},
        "total": {**_NULLABLE_NUMBER, "description": "Final total amount paid"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "price", "confidence"],
                "properties": {
                    "name": {"type": ["string", "null"], "description": "Item name including modifiers"},
                    "price": {**_NULLABLE_NUMBER, "description": "Price of one unit"},
                    "confidence": {
                        "type": "string",
                        "enum": ["high", "medium", "low"],
                        "description": "Legibility of the price",
                    },
                },
            },
        },
    },
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapped around a JSON document, if any."""
    text = text.strip()
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_extraction_payload(payload: str | bytes | dict) -> ParsedReceipt:
    """Validate a provider response into a ParsedReceipt.

    Accepts the raw text the model produced or an already decoded object. Any
    deviation from the schema raises MalformedResult; values are never repaired.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedResult("Response is not valid UTF-8") from e

    if isinstance(payload, str):
        try:
            payload = json.loads(strip_code_fence(payload))
        except json.JSONDecodeError as e:
            raise MalformedResult(f"Response is not valid JSON: {e.msg}") from e

    if not isinstance(payload, dict):
        raise MalformedResult(f"Expected a JSON object, got {type(payload).__name__}")

    try:
        return ParsedReceipt.model_validate(payload)
    except ValidationError as e:
        raise MalformedResult(f"Response does not match the receipt schema ({e.error_count()} errors)") from e


def parse_receipt_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD receipt date. Any other literal gives None, never a partial guess."""
    if not value or not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None

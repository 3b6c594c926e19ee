import base64
import io
import logging
import os

import httpx
from PIL import Image, UnidentifiedImageError

from app.receipt.base import (
    EncodingFailure,
    MalformedResult,
    MissingCredential,
    ParsedReceipt,
    ServiceUnavailable,
)
from app.receipt.contract import INSTRUCTIONS, RECEIPT_JSON_SCHEMA, parse_extraction_payload

logger = logging.getLogger("splitsies")

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta"
JPEG_QUALITY = 85


def encode_jpeg(image_bytes: bytes, quality: int = JPEG_QUALITY) -> bytes:
    """Re-encode any Pillow-readable image as JPEG."""
    try:
        img = Image.open(io.BytesIO(image_bytes))
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise EncodingFailure(f"Could not encode image as JPEG: {e}") from e
    return buffer.getvalue()


class GeminiReceiptExtractor:
    """Receipt extraction through the Gemini generateContent REST API with a JSON response schema."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")
        self.model = model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.timeout = timeout
        self.transport = transport

    def build_request_body(self, jpeg_bytes: bytes) -> dict:
        return {
            "contents": [{
                "parts": [
                    {"inline_data": {"mime_type": "image/jpeg", "data": base64.b64encode(jpeg_bytes).decode("ascii")}},
                    {"text": INSTRUCTIONS},
                ]
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseJsonSchema": RECEIPT_JSON_SCHEMA,
            },
        }

    async def extract(self, image_bytes: bytes, content_type: str) -> ParsedReceipt:
        if not self.api_key:
            raise MissingCredential("GEMINI_API_KEY is not set")

        body = self.build_request_body(encode_jpeg(image_bytes))
        url = f"{GEMINI_BASE}/models/{self.model}:generateContent"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(url, json=body, headers={"x-goog-api-key": self.api_key})
        except httpx.HTTPError as e:
            raise ServiceUnavailable(f"Gemini request failed: {e}") from e

        if not resp.is_success:
            logger.warning(
                "Gemini returned an error status",
                extra={"extra_data": {"status": resp.status_code, "model": self.model}},
            )
            raise ServiceUnavailable(f"Gemini returned HTTP {resp.status_code}")

        return parse_extraction_payload(self._candidate_text(resp))

    @staticmethod
    def _candidate_text(resp: httpx.Response) -> str:
        try:
            envelope = resp.json()
            text = envelope["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedResult("Unexpected Gemini response envelope") from e
        if not isinstance(text, str):
            raise MalformedResult("Gemini candidate has no text part")
        return text

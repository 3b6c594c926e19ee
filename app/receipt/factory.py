import os

from app.receipt.base import MissingCredential, ReceiptExtractor


def get_receipt_extractor() -> ReceiptExtractor:
    """Return the configured receipt extraction provider."""
    provider = os.getenv("RECEIPT_PROVIDER", "gemini")
    if provider == "gemini":
        from app.receipt.gemini_provider import GeminiReceiptExtractor

        return GeminiReceiptExtractor(timeout=float(os.getenv("EXTRACTION_TIMEOUT_SECONDS", "30")))
    if provider == "openai":
        from app.receipt.openai_provider import OpenAIReceiptExtractor

        return OpenAIReceiptExtractor()
    raise MissingCredential(f"Unknown receipt provider: {provider}")

"""Scan orchestration: image -> extraction -> persisted receipt, with an observable parse state."""

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.database import PersistenceFailure
from app.images import LocalImageStore
from app.models import Receipt
from app.receipt.base import ExtractionError, MissingCredential, ReceiptExtractor, ServiceUnavailable
from app.receipts import receipt_from_parsed, save_receipt

logger = logging.getLogger("splitsies")

MISSING_CREDENTIAL_MESSAGE = "Receipt scanning is not configured."
PARSE_FAILED_MESSAGE = "Couldn't parse that receipt. You can still enter it manually."
SAVE_FAILED_MESSAGE = "Couldn't save that receipt. Please try again."


class ParseState(str, enum.Enum):
    IDLE = "idle"
    PARSING = "parsing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ScanInProgress(Exception):
    """A second image was submitted while the previous one is still being parsed."""


@dataclass
class ScanStatus:
    state: ParseState
    message: str | None = None
    receipt_id: str | None = None


class ScanSession:
    """Runs one extraction at a time and remembers how the last one went.

    A submission while another is parsing is rejected with ScanInProgress.
    Failed extractions are terminal for that attempt; nothing is retried.
    """

    def __init__(
        self,
        extractor_factory: Callable[[], ReceiptExtractor],
        images: LocalImageStore,
        timeout: float = 30.0,
    ):
        self.extractor_factory = extractor_factory
        self.images = images
        self.timeout = timeout
        self._status = ScanStatus(ParseState.IDLE)

    def status(self) -> ScanStatus:
        return self._status

    async def submit(self, db: Session, image_bytes: bytes, content_type: str) -> Receipt:
        if self._status.state == ParseState.PARSING:
            raise ScanInProgress("A receipt is already being parsed")
        self._status = ScanStatus(ParseState.PARSING)

        image_ref = None
        try:
            image_ref = self.images.save(image_bytes, content_type)
            extractor = self.extractor_factory()
            try:
                parsed = await asyncio.wait_for(extractor.extract(image_bytes, content_type), self.timeout)
            except asyncio.TimeoutError as e:
                raise ServiceUnavailable(f"Extraction timed out after {self.timeout}s") from e

            receipt = save_receipt(db, receipt_from_parsed(parsed, image_ref))
        except ExtractionError as e:
            self._fail(image_ref, MISSING_CREDENTIAL_MESSAGE if isinstance(e, MissingCredential) else PARSE_FAILED_MESSAGE)
            logger.error(
                f"Receipt extraction failed: {e}",
                exc_info=not isinstance(e, MissingCredential),
                extra={"extra_data": {"error": type(e).__name__}},
            )
            raise
        except PersistenceFailure:
            self._fail(image_ref, SAVE_FAILED_MESSAGE)
            raise
        except BaseException:
            self._fail(image_ref, PARSE_FAILED_MESSAGE)
            raise

        self._status = ScanStatus(ParseState.SUCCEEDED, receipt_id=receipt.id)
        logger.info(
            "Receipt scanned",
            extra={"extra_data": {"receipt_id": receipt.id, "items_count": len(receipt.items)}},
        )
        return receipt

    def _fail(self, image_ref: str | None, message: str) -> None:
        if image_ref:
            self.images.delete(image_ref)
        self._status = ScanStatus(ParseState.FAILED, message=message)

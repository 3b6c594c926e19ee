"""Receipt entity lifecycle: creation from a parsed receipt, item edits, listing and deletion."""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.images import LocalImageStore
from app.models import Receipt, ReceiptItem
from app.receipt.base import MAX_AMOUNT, ParsedReceipt
from app.receipt.contract import parse_receipt_date
from app.schemas import ManualReceiptIn

logger = logging.getLogger("splitsies")

CENT = Decimal("0.01")


def to_money(value: float | Decimal | None) -> Decimal | None:
    """Quantise an amount to cents. None stays None."""
    if value is None:
        return None
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def receipt_from_parsed(parsed: ParsedReceipt | ManualReceiptIn, image_ref: str | None = None) -> Receipt:
    """Map an extracted receipt onto new entities. Nothing is recomputed or repaired."""
    receipt = Receipt(
        store_name=parsed.store_name,
        receipt_date=parse_receipt_date(parsed.receipt_date),
        subtotal=to_money(parsed.subtotal),
        tax=to_money(parsed.tax),
        tip=to_money(parsed.tip),
        discount=to_money(parsed.discount),
        total=to_money(parsed.total),
        image_ref=image_ref,
    )
    receipt.items = [
        ReceiptItem(
            position=i,
            name=item.name,
            price=to_money(item.price),
            confidence=item.confidence,
        )
        for i, item in enumerate(parsed.items)
    ]
    return receipt


def parse_price_text(text: str | None) -> Decimal | None:
    """Parse a user-typed price.

    Only digits and the first "." survive; everything else is dropped. An empty,
    unparsable or out-of-range result is None (unknown), never zero.
    """
    if not text:
        return None
    kept = []
    seen_separator = False
    for ch in text:
        if ch.isdigit() and ch.isascii():
            kept.append(ch)
        elif ch == "." and not seen_separator:
            kept.append(ch)
            seen_separator = True
    cleaned = "".join(kept)
    if not cleaned or cleaned == ".":
        return None
    try:
        value = to_money(Decimal(cleaned))
    except InvalidOperation:
        return None
    return value if value < MAX_AMOUNT else None


def apply_item_edit(item: ReceiptItem, fields: dict) -> None:
    """Apply a partial edit. Keys present in ``fields`` are applied independently."""
    if "name" in fields:
        name = (fields["name"] or "").strip()
        item.name = name or None
    if "price" in fields:
        item.price = parse_price_text(fields["price"])


def list_receipts(db: Session) -> list[Receipt]:
    """Receipt history, newest purchase first. Undated receipts go last."""
    return (
        db.query(Receipt)
        .order_by(
            Receipt.receipt_date.is_(None),
            Receipt.receipt_date.desc(),
            Receipt.created_at.desc(),
        )
        .all()
    )


def save_receipt(db: Session, receipt: Receipt) -> Receipt:
    db.add(receipt)
    commit_or_raise(db, "Failed to save receipt")
    db.refresh(receipt)
    return receipt


def delete_receipt(db: Session, images: LocalImageStore, receipt: Receipt) -> None:
    """Delete a receipt with its items and assignments, then release its image."""
    receipt_id = receipt.id
    image_ref = receipt.image_ref
    db.delete(receipt)
    commit_or_raise(db, "Failed to delete receipt", receipt_id=receipt_id)

    if image_ref:
        images.delete(image_ref)
    logger.info("Receipt deleted", extra={"extra_data": {"receipt_id": receipt_id}})

from decimal import Decimal

from app.allocation import has_subtotal_mismatch, items_sum
from app.models import Friend, Receipt, ReceiptItem
from app.splits import SplitAssignments


def _money(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def serialize_friend(friend: Friend) -> dict:
    return {
        "id": str(friend.id),
        "name": friend.name,
        "handle": friend.handle,
    }


def serialize_item(item: ReceiptItem, assignments: SplitAssignments | None = None) -> dict:
    data = {
        "id": str(item.id),
        "name": item.name,
        "price": _money(item.price),
        "confidence": item.confidence,
    }
    if assignments is not None:
        data["assignees"] = assignments.assignees(item.id)
        data["label"] = assignments.describe(item.id)
    return data


def serialize_receipt_summary(receipt: Receipt) -> dict:
    return {
        "id": str(receipt.id),
        "storeName": receipt.store_name,
        "receiptDate": receipt.receipt_date.isoformat() if receipt.receipt_date else None,
        "total": _money(receipt.total),
        "itemCount": len(receipt.items),
    }


def serialize_receipt(receipt: Receipt) -> dict:
    return {
        "id": str(receipt.id),
        "storeName": receipt.store_name,
        "receiptDate": receipt.receipt_date.isoformat() if receipt.receipt_date else None,
        "subtotal": _money(receipt.subtotal),
        "tax": _money(receipt.tax),
        "tip": _money(receipt.tip),
        "discount": _money(receipt.discount),
        "total": _money(receipt.total),
        "hasImage": receipt.image_ref is not None,
        "items": [serialize_item(i) for i in receipt.items],
        "itemsSum": _money(items_sum(receipt.items)),
        "subtotalMismatch": has_subtotal_mismatch(receipt.items, receipt.subtotal),
        "createdAt": receipt.created_at.isoformat(),
    }


def serialize_split(
    receipt: Receipt,
    assignments: SplitAssignments,
    owed: dict[str, Decimal],
) -> dict:
    return {
        "receiptId": str(receipt.id),
        "people": [{"id": p.id, "name": p.name, "handle": p.handle} for p in assignments.people],
        "items": [serialize_item(i, assignments) for i in receipt.items],
        "owed": {person_id: float(amount) for person_id, amount in owed.items()},
        "subtotal": _money(receipt.subtotal),
        "itemsSum": _money(items_sum(receipt.items)),
        "subtotalMismatch": has_subtotal_mismatch(receipt.items, receipt.subtotal),
    }

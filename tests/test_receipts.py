"""Tests for mapping parsed receipts onto entities, item edits, listing and deletion."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.database import PersistenceFailure
from app.models import Receipt, ReceiptItem
from app.receipts import (
    apply_item_edit,
    delete_receipt,
    list_receipts,
    parse_price_text,
    receipt_from_parsed,
    save_receipt,
    to_money,
)
from conftest import parsed_receipt


def test_receipt_from_parsed_copies_fields_without_repair() -> None:
    parsed = parsed_receipt(subtotal=99.0, discount=None, receiptDate="March 14")
    receipt = receipt_from_parsed(parsed, image_ref="abc.jpg")

    assert receipt.store_name == "Shake Shack"
    assert receipt.receipt_date is None
    assert receipt.subtotal == Decimal("99.00")
    assert receipt.discount is None
    assert receipt.total == Decimal("15.24")
    assert receipt.image_ref == "abc.jpg"
    assert [(i.name, i.price, i.confidence, i.position) for i in receipt.items] == [
        ("Burger", Decimal("10.00"), "high", 0),
        ("Fries", Decimal("4.00"), "medium", 1),
    ]


def test_to_money_quantises_to_cents() -> None:
    assert to_money(None) is None
    assert to_money(1.005) == Decimal("1.01")
    assert to_money(0.1 + 0.2) == Decimal("0.30")


def test_parse_price_text() -> None:
    assert parse_price_text("12.50") == Decimal("12.50")
    assert parse_price_text("$1,234.5") == Decimal("1234.50")
    assert parse_price_text("3.4.5") == Decimal("3.45")
    assert parse_price_text("abc") is None
    assert parse_price_text("") is None
    assert parse_price_text(None) is None
    assert parse_price_text(".") is None
    assert parse_price_text("0") == Decimal("0.00")
    assert parse_price_text("9999999999.99") == Decimal("9999999999.99")
    assert parse_price_text("10000000000") is None


def test_apply_item_edit_is_field_independent() -> None:
    item = ReceiptItem(name="Burger", price=Decimal("10.00"), confidence="high")

    apply_item_edit(item, {"price": "oops"})
    assert item.price is None
    assert item.name == "Burger"

    apply_item_edit(item, {"name": "  Cheeseburger "})
    assert item.name == "Cheeseburger"
    assert item.price is None

    apply_item_edit(item, {"name": "", "price": "11"})
    assert item.name is None
    assert item.price == Decimal("11.00")
    assert item.confidence == "high"


def test_list_receipts_orders_by_date_with_undated_last(db) -> None:
    save_receipt(db, receipt_from_parsed(parsed_receipt(storeName="Old", receiptDate="2025-12-01")))
    save_receipt(db, receipt_from_parsed(parsed_receipt(storeName="Undated", receiptDate=None)))
    save_receipt(db, receipt_from_parsed(parsed_receipt(storeName="New", receiptDate="2026-02-01")))

    names = [r.store_name for r in list_receipts(db)]
    assert names == ["New", "Old", "Undated"]


def test_delete_receipt_cascades_and_releases_image(db, image_store) -> None:
    ref = image_store.save(b"jpeg-bytes", "image/jpeg")
    receipt = save_receipt(db, receipt_from_parsed(parsed_receipt(), image_ref=ref))
    assert image_store.path(ref) is not None

    delete_receipt(db, image_store, receipt)

    assert db.query(Receipt).count() == 0
    assert db.query(ReceiptItem).count() == 0
    assert image_store.path(ref) is None


def test_saved_receipt_keeps_date_and_item_order(db) -> None:
    receipt = save_receipt(db, receipt_from_parsed(parsed_receipt()))
    db.expire_all()
    loaded = db.query(Receipt).filter(Receipt.id == receipt.id).one()
    assert loaded.receipt_date == date(2026, 3, 14)
    assert [i.name for i in loaded.items] == ["Burger", "Fries"]


def test_failed_delete_rolls_back_and_keeps_image(db, image_store, monkeypatch) -> None:
    ref = image_store.save(b"jpeg-bytes", "image/jpeg")
    receipt = save_receipt(db, receipt_from_parsed(parsed_receipt(), image_ref=ref))

    def commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", commit)
    with pytest.raises(PersistenceFailure):
        delete_receipt(db, image_store, receipt)

    assert image_store.path(ref) is not None
    assert db.query(Receipt).filter(Receipt.id == receipt.id).count() == 1
    assert db.query(ReceiptItem).count() == 2

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.images import LocalImageStore
from app.models import Friend, Receipt, ReceiptItem
from app.session import ScanSession


def get_receipt_by_id(
    receipt_id: str,
    db: Session = Depends(get_db),
) -> Receipt:
    receipt = db.query(Receipt).filter(Receipt.id == receipt_id).first()
    if not receipt:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


def get_item(receipt: Receipt, item_id: str) -> ReceiptItem:
    for item in receipt.items:
        if item.id == item_id:
            return item
    raise HTTPException(status_code=404, detail="Item not found")


def get_friend(db: Session, friend_id: str) -> Friend:
    friend = db.query(Friend).filter(Friend.id == friend_id).first()
    if not friend:
        raise HTTPException(status_code=404, detail="Friend not found")
    return friend


def get_scan_session(request: Request) -> ScanSession:
    return request.app.state.scan_session


def get_image_store(request: Request) -> LocalImageStore:
    return request.app.state.image_store

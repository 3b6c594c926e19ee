import uuid
from datetime import datetime

from sqlalchemy import Column, String, Integer, Numeric, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


def new_uuid():
    return str(uuid.uuid4())


class Receipt(Base):
    __tablename__ = "receipts"

    id = Column(String, primary_key=True, default=new_uuid)
    store_name = Column(String(255), nullable=True)
    receipt_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=True)
    tax = Column(Numeric(12, 2), nullable=True)
    tip = Column(Numeric(12, 2), nullable=True)
    discount = Column(Numeric(12, 2), nullable=True)  # positive magnitude
    total = Column(Numeric(12, 2), nullable=True)
    image_ref = Column(String(255), nullable=True)  # owned by the image store
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    items = relationship(
        "ReceiptItem",
        back_populates="receipt",
        order_by="ReceiptItem.position",
        cascade="all, delete-orphan",
    )


class ReceiptItem(Base):
    __tablename__ = "receipt_items"

    id = Column(String, primary_key=True, default=new_uuid)
    receipt_id = Column(String, ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(500), nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    confidence = Column(String(10), nullable=True)  # high | medium | low, NULL for manual entry

    receipt = relationship("Receipt", back_populates="items")
    assignments = relationship(
        "ItemAssignment",
        back_populates="item",
        order_by="ItemAssignment.position",
        cascade="all, delete-orphan",
    )


class Friend(Base):
    __tablename__ = "friends"

    id = Column(String, primary_key=True, default=new_uuid)
    name = Column(String(255), nullable=False)
    handle = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ItemAssignment(Base):
    __tablename__ = "item_assignments"

    id = Column(String, primary_key=True, default=new_uuid)
    item_id = Column(String, ForeignKey("receipt_items.id", ondelete="CASCADE"), nullable=False)
    friend_id = Column(String, ForeignKey("friends.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)  # assignment order

    __table_args__ = (UniqueConstraint("item_id", "friend_id"),)

    item = relationship("ReceiptItem", back_populates="assignments")

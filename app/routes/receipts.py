import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.database import PersistenceFailure, commit_or_raise, get_db
from app.deps import get_image_store, get_item, get_receipt_by_id, get_scan_session
from app.images import LocalImageStore
from app.models import Receipt
from app.ratelimit import limiter
from app.receipt.base import ExtractionError, MissingCredential
from app.receipts import apply_item_edit, delete_receipt, list_receipts, receipt_from_parsed, save_receipt
from app.schemas import ItemEditIn, ManualReceiptIn
from app.serializers import serialize_item, serialize_receipt, serialize_receipt_summary
from app.session import ScanInProgress, ScanSession

logger = logging.getLogger("splitsies")
router = APIRouter()

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/heic", "image/heif"}
SCAN_RATE_LIMIT = os.getenv("SCAN_RATE_LIMIT", "30/hour")


@router.post("/receipts/scan", status_code=201)
@limiter.limit(SCAN_RATE_LIMIT)
async def scan_receipt(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    session: ScanSession = Depends(get_scan_session),
):
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Unsupported image format. Use JPEG, PNG, or WebP.")

    image_bytes = await file.read()
    if len(image_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(image_bytes) > MAX_FILE_SIZE:
        raise HTTPException(status_code=400, detail="Image too large. Maximum size is 10 MB.")

    try:
        receipt = await session.submit(db, image_bytes, file.content_type)
    except ScanInProgress:
        raise HTTPException(status_code=409, detail="A receipt is already being parsed")
    except MissingCredential:
        raise HTTPException(status_code=503, detail=session.status().message)
    except ExtractionError:
        raise HTTPException(status_code=502, detail=session.status().message)
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail=session.status().message)

    return serialize_receipt(receipt)


@router.get("/receipts/scan/status")
def scan_status(session: ScanSession = Depends(get_scan_session)):
    status = session.status()
    return {
        "state": status.state.value,
        "message": status.message,
        "receiptId": status.receipt_id,
    }


@router.get("/receipts")
def get_receipts(db: Session = Depends(get_db)):
    return [serialize_receipt_summary(r) for r in list_receipts(db)]


@router.post("/receipts", status_code=201)
def create_receipt(data: ManualReceiptIn, db: Session = Depends(get_db)):
    try:
        receipt = save_receipt(db, receipt_from_parsed(data))
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail="Couldn't save that receipt. Please try again.")
    logger.info("Receipt entered manually", extra={"extra_data": {"receipt_id": receipt.id}})
    return serialize_receipt(receipt)


@router.get("/receipts/{receipt_id}")
def get_receipt(receipt: Receipt = Depends(get_receipt_by_id)):
    return serialize_receipt(receipt)


@router.delete("/receipts/{receipt_id}", status_code=204)
def remove_receipt(
    receipt: Receipt = Depends(get_receipt_by_id),
    db: Session = Depends(get_db),
    images: LocalImageStore = Depends(get_image_store),
):
    try:
        delete_receipt(db, images, receipt)
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail="Failed to delete receipt")
    return None


@router.get("/receipts/{receipt_id}/image")
def get_receipt_image(
    receipt: Receipt = Depends(get_receipt_by_id),
    images: LocalImageStore = Depends(get_image_store),
):
    path = images.path(receipt.image_ref) if receipt.image_ref else None
    if path is None:
        raise HTTPException(status_code=404, detail="Image not available")
    return FileResponse(path)


@router.patch("/receipts/{receipt_id}/items/{item_id}")
def edit_item(
    item_id: str,
    data: ItemEditIn,
    receipt: Receipt = Depends(get_receipt_by_id),
    db: Session = Depends(get_db),
):
    item = get_item(receipt, item_id)
    apply_item_edit(item, data.model_dump(include=data.model_fields_set))
    try:
        commit_or_raise(db, "Failed to edit item", item_id=item.id)
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail="Failed to save item")
    db.refresh(item)
    return serialize_item(item)

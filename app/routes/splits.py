from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.allocation import compute_owed_totals
from app.database import PersistenceFailure, commit_or_raise, get_db
from app.deps import get_friend, get_item, get_receipt_by_id
from app.models import Friend, ItemAssignment, Receipt, ReceiptItem
from app.serializers import serialize_item, serialize_split
from app.splits import Person, SplitAssignments

router = APIRouter()


def _eligible_people(db: Session, person_ids: list[str] | None) -> list[Person]:
    """Resolve the fixed set of people for this split. Defaults to every friend."""
    friends = db.query(Friend).order_by(Friend.created_at, Friend.name).all()
    if not person_ids:
        return [Person(f.id, f.name, f.handle) for f in friends]

    by_id = {f.id: f for f in friends}
    people = []
    for pid in dict.fromkeys(person_ids):
        friend = by_id.get(pid)
        if friend is None:
            raise HTTPException(status_code=400, detail=f"Friend {pid} does not exist")
        people.append(Person(friend.id, friend.name, friend.handle))
    return people


def _load_assignments(receipt: Receipt, people: list[Person]) -> SplitAssignments:
    return SplitAssignments(
        people,
        {item.id: [a.friend_id for a in item.assignments] for item in receipt.items},
    )


def _sync_item_assignments(db: Session, item: ReceiptItem, person_ids: list[str]):
    """Replace item_assignments rows for an item, keeping assignment order, and commit."""
    # Delete existing; flushed first so re-added pairs don't hit the unique constraint
    item.assignments.clear()
    try:
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure("Failed to update assignees") from e
    # Add new
    item.assignments.extend(
        ItemAssignment(friend_id=person_id, position=position) for position, person_id in enumerate(person_ids)
    )
    commit_or_raise(db, "Failed to update assignees", item_id=item.id)


@router.get("/receipts/{receipt_id}/split")
def get_split(
    people: list[str] | None = Query(None),
    receipt: Receipt = Depends(get_receipt_by_id),
    db: Session = Depends(get_db),
):
    assignments = _load_assignments(receipt, _eligible_people(db, people))
    owed = compute_owed_totals(receipt.items, assignments)
    return serialize_split(receipt, assignments, owed)


@router.post("/receipts/{receipt_id}/items/{item_id}/assignees/{friend_id}")
def toggle_assignee(
    item_id: str,
    friend_id: str,
    receipt: Receipt = Depends(get_receipt_by_id),
    db: Session = Depends(get_db),
):
    item = get_item(receipt, item_id)
    get_friend(db, friend_id)

    assignments = _load_assignments(receipt, _eligible_people(db, None))
    assignments.toggle(item.id, friend_id)
    try:
        _sync_item_assignments(db, item, assignments.assignees(item.id))
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail="Failed to update assignees")
    db.refresh(item)
    return serialize_item(item, assignments)


@router.delete("/receipts/{receipt_id}/items/{item_id}/assignees")
def reset_assignees(
    item_id: str,
    receipt: Receipt = Depends(get_receipt_by_id),
    db: Session = Depends(get_db),
):
    item = get_item(receipt, item_id)

    assignments = _load_assignments(receipt, _eligible_people(db, None))
    assignments.set_everyone(item.id)
    try:
        _sync_item_assignments(db, item, [])
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail="Failed to update assignees")
    db.refresh(item)
    return serialize_item(item, assignments)

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import PersistenceFailure, commit_or_raise, get_db
from app.deps import get_friend
from app.models import Friend
from app.schemas import FriendIn
from app.serializers import serialize_friend

logger = logging.getLogger("splitsies")

router = APIRouter()


def normalize_handle(handle: str) -> str:
    handle = handle.strip()
    return handle if handle.startswith("@") else f"@{handle}"


@router.get("/friends")
def list_friends(db: Session = Depends(get_db)):
    return [serialize_friend(f) for f in db.query(Friend).order_by(Friend.created_at, Friend.name).all()]


@router.post("/friends", status_code=201)
def add_friend(data: FriendIn, db: Session = Depends(get_db)):
    handle = normalize_handle(data.handle)
    if db.query(Friend).filter(Friend.handle == handle).first():
        raise HTTPException(status_code=409, detail=f"Handle {handle} is already taken")

    friend = Friend(name=data.name.strip(), handle=handle)
    db.add(friend)
    try:
        commit_or_raise(db, "Failed to add friend", handle=handle)
    except PersistenceFailure as e:
        # a concurrent add can take the handle between the check and the insert
        if isinstance(e.__cause__, IntegrityError):
            raise HTTPException(status_code=409, detail=f"Handle {handle} is already taken")
        raise HTTPException(status_code=500, detail="Failed to add friend")
    db.refresh(friend)
    logger.info("Friend added", extra={"extra_data": {"friend_id": friend.id, "handle": handle}})
    return serialize_friend(friend)


@router.get("/friends/{friend_id}")
def get_friend_detail(friend_id: str, db: Session = Depends(get_db)):
    return serialize_friend(get_friend(db, friend_id))

# app/api/routes/threads.py
"""
Community forum threads: list/read/create, like toggling and comments.
Likes are kept as a `liked_by` email list plus a `likes_count` counter that
move together in one update.
"""
import logging
from typing import Any, Dict, List
from fastapi import APIRouter, Depends

from app.api.deps import get_db
from app.api.schemas.thread import CommentRequest, LikeToggleRequest, ThreadCreate
from app.core.errors import NotFound, ValidationError, missing_fields
from app.database import FileBackedDB
from app.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(tags=["threads"])

REQUIRED_FIELDS = ["post_title", "post_description", "author_email"]


@router.get("/threads", response_model=List[Dict[str, Any]])
def list_threads(db: FileBackedDB = Depends(get_db)):
    return db.collection("threads").find()


@router.get("/threads/{thread_id}", response_model=Dict[str, Any])
def get_thread(thread_id: str, db: FileBackedDB = Depends(get_db)):
    thread = db.collection("threads").find_one({"_id": thread_id})
    if not thread:
        raise NotFound("Forum post not found")
    return thread


@router.post("/threads", status_code=201)
def create_thread(payload: ThreadCreate, db: FileBackedDB = Depends(get_db)):
    data = payload.model_dump(exclude_none=True)
    missing = missing_fields(data, REQUIRED_FIELDS)
    if missing:
        raise ValidationError("Missing required fields", missing_fields=missing)
    data["created_at"] = utc_now_iso()
    data.setdefault("liked_by", [])
    data.setdefault("likes_count", 0)
    data.setdefault("comments", [])
    result = db.collection("threads").insert_one(data)
    return {"success": True, "message": "Thread created successfully", "inserted_id": result.inserted_id}


@router.patch("/threads/comment/{thread_id}")
def add_comment(thread_id: str, payload: CommentRequest, db: FileBackedDB = Depends(get_db)):
    comment = dict(payload.new_comment)
    comment.setdefault("created_at", utc_now_iso())
    result = db.collection("threads").update_one({"_id": thread_id}, {"$push": {"comments": comment}})
    return {"success": result.modified_count > 0}


@router.patch("/threads/{thread_id}")
def toggle_like(thread_id: str, payload: LikeToggleRequest, db: FileBackedDB = Depends(get_db)):
    """
    Like the thread for `userEmail`, or remove the like if it was already there.
    Returns the new like state and count.
    """
    threads = db.collection("threads")
    thread = threads.find_one({"_id": thread_id})
    if not thread:
        raise NotFound("Thread not found")

    has_liked = payload.user_email in (thread.get("liked_by") or [])
    if has_liked:
        update = {"$pull": {"liked_by": payload.user_email}, "$inc": {"likes_count": -1}}
    else:
        update = {"$addToSet": {"liked_by": payload.user_email}, "$inc": {"likes_count": 1}}

    result = threads.update_one({"_id": thread_id}, update)
    if result.modified_count == 0:
        raise ValidationError("Update failed")

    updated = threads.find_one({"_id": thread_id}) or {}
    logger.debug("Thread %s like toggled by %s -> %s", thread_id, payload.user_email, not has_liked)
    return {"success": True, "liked": not has_liked, "likes_count": updated.get("likes_count", 0)}

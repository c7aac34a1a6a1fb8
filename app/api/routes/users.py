from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_db
from app.api.schemas.user import UserCreate
from app.core.errors import ValidationError
from app.database import FileBackedDB
from app.utils.timestamps import utc_now_iso

router = APIRouter(tags=["users"])


def _require_email(email: Optional[str]) -> str:
    if not email:
        raise ValidationError("Email is required")
    return email


@router.get("/users", response_model=List[Dict[str, Any]])
def list_users(db: FileBackedDB = Depends(get_db)):
    return db.collection("users").find()


@router.get("/user")
def user_exists(email: Optional[str] = Query(None), db: FileBackedDB = Depends(get_db)):
    """Used by the sign-up flow to decide whether to create the profile."""
    user = db.collection("users").find_one({"email": _require_email(email)})
    return {"exists": user is not None}


@router.get("/singleuser")
def get_single_user(email: Optional[str] = Query(None), db: FileBackedDB = Depends(get_db)):
    user = db.collection("users").find_one({"email": _require_email(email)})
    return {"success": True, "data": user}


@router.post("/users")
def create_user(payload: UserCreate, db: FileBackedDB = Depends(get_db)):
    data = payload.model_dump(exclude_none=True)
    data["created_at"] = utc_now_iso()
    result = db.collection("users").insert_one(data)
    return result.to_dict()

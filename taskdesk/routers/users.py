from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from taskdesk.schemas.common import DataResponse
from taskdesk.schemas.user import UserOut
from taskdesk.repositories import users as user_repo
from taskdesk.utils.errors import NotFound
from taskdesk.utils.gate import Principal, get_admin_user
from taskdesk.database import MAX_ID, get_db

router = APIRouter(prefix="/api/users", tags=["users"])

@router.get("", response_model=DataResponse[List[UserOut]])
def list_users(admin: Principal = Depends(get_admin_user), db: Session = Depends(get_db)):
    return {"data": user_repo.list_all(db)}

@router.get("/{user_id}", response_model=DataResponse[UserOut])
def get_user(user_id: int = Path(ge=1, le=MAX_ID), admin: Principal = Depends(get_admin_user), db: Session = Depends(get_db)):
    user = user_repo.get(db, user_id)
    if not user:
        raise NotFound("User not found")
    return {"data": user}

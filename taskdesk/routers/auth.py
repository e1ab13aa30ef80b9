import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from taskdesk.schemas.common import DataResponse
from taskdesk.schemas.user import UserCreate, UserLogin, UserOut, ProfileUpdate, LoginResult
from taskdesk.repositories import users as user_repo
from taskdesk.utils.auth import hash_password, verify_password, create_token
from taskdesk.utils.errors import InvalidCredential, ValidationError
from taskdesk.utils.gate import Principal, get_current_user
from taskdesk.database import get_db

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=DataResponse[UserOut], status_code=201)
def register(user: UserCreate, db: Session = Depends(get_db)):
    if user_repo.find_conflict(db, user.username, user.email):
        raise ValidationError("User already exists")

    try:
        hashed = hash_password(user.password)
    except ValueError as e:
        # map hashing/validation errors to a 400 so client gets a clear message
        raise ValidationError(str(e))

    new_user = user_repo.create(db, user.username, user.email, hashed)
    logger.info("user.registered", user_id=new_user.id)
    return {"data": new_user}

@router.post("/login", response_model=DataResponse[LoginResult])
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = user_repo.get_by_email(db, user.email)
    if not db_user or not verify_password(user.password, db_user.password):
        raise InvalidCredential("Invalid credentials")

    logger.info("user.logged_in", user_id=db_user.id)
    return {"data": {"token": create_token(db_user.id), "user": db_user}}

@router.get("/profile", response_model=DataResponse[UserOut])
def get_profile(principal: Principal = Depends(get_current_user)):
    return {"data": principal}

@router.put("/profile", response_model=DataResponse[UserOut])
def update_profile(changes: ProfileUpdate, principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    fields = changes.model_dump(exclude_none=True)
    if user_repo.find_conflict(db, fields.get("username"), fields.get("email"), exclude_id=principal.id):
        raise ValidationError("Username or email already in use")

    db_user = user_repo.update(db, user_repo.get(db, principal.id), fields)
    return {"data": db_user}

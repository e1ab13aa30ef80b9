from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from taskdesk.models.user import User


def get(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def exists(db: Session, user_id: int) -> bool:
    return db.query(User.id).filter(User.id == user_id).first() is not None


def find_conflict(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> Optional[User]:
    """Return a user other than ``exclude_id`` already holding the username or email."""
    clauses = []
    if username:
        clauses.append(User.username == username)
    if email:
        clauses.append(User.email == email)
    if not clauses:
        return None
    query = db.query(User).filter(or_(*clauses))
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first()


def create(db: Session, username: str, email: str, password_hash: str, role: str = "user") -> User:
    user = User(username=username, email=email, password=password_hash, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update(db: Session, user: User, changes: dict) -> User:
    for name, value in changes.items():
        setattr(user, name, value)
    db.commit()
    db.refresh(user)
    return user


def list_all(db: Session) -> List[User]:
    return db.query(User).order_by(User.id).all()

"""Task persistence.

Creator and assignee are always loaded with explicit joins here; nothing
outside this module builds task queries.
"""
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from taskdesk.models.task import Task


def _with_people(query):
    return query.options(joinedload(Task.creator), joinedload(Task.assignee))


def _visible_to(user_id: int):
    return or_(Task.created_by == user_id, Task.assigned_to == user_id)


def list_visible(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    q: Optional[str] = None,
) -> List[Task]:
    query = _with_people(db.query(Task)).filter(_visible_to(user_id))
    if status:
        query = query.filter(Task.status == status)
    if priority:
        query = query.filter(Task.priority == priority)
    if category:
        query = query.filter(Task.category == category)
    if q:
        query = query.filter(Task.title.ilike(f"%{q}%"))
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


def get_visible(db: Session, task_id: int, user_id: int) -> Optional[Task]:
    return _with_people(db.query(Task)).filter(Task.id == task_id, _visible_to(user_id)).first()


def get(db: Session, task_id: int) -> Optional[Task]:
    return _with_people(db.query(Task)).filter(Task.id == task_id).first()


def create(db: Session, created_by: int, **fields) -> Task:
    task = Task(created_by=created_by, **fields)
    db.add(task)
    db.commit()
    return get(db, task.id)


def update(db: Session, task: Task, changes: dict) -> Task:
    for name, value in changes.items():
        setattr(task, name, value)
    db.commit()
    return get(db, task.id)


def delete(db: Session, task: Task) -> None:
    db.delete(task)
    db.commit()

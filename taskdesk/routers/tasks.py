from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import Optional
import structlog
from taskdesk.schemas.common import MessageResponse
from taskdesk.schemas.task import TaskCreate, TaskUpdate, TaskList, TaskResponse
from taskdesk.repositories import tasks as task_repo
from taskdesk.repositories import users as user_repo
from taskdesk.database import MAX_ID, get_db
from taskdesk.utils.errors import Forbidden, NotFound, ValidationError
from taskdesk.utils.gate import Principal, get_current_user
from taskdesk.utils import permissions

logger = structlog.get_logger()

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    # the browser client always sends every filter key, empty when unset
    return value or None


def _check_assignee(db: Session, assigned_to: Optional[int]):
    if assigned_to is not None and not user_repo.exists(db, assigned_to):
        raise ValidationError("Assigned user not found")


@router.get("", response_model=TaskList)
def list_tasks(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search by title"),
    principal: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tasks = task_repo.list_visible(
        db,
        principal.id,
        status=_blank_to_none(status),
        priority=_blank_to_none(priority),
        category=_blank_to_none(category),
        q=_blank_to_none(q),
    )
    return {"data": tasks}


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(task: TaskCreate, principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    _check_assignee(db, task.assigned_to)
    new = task_repo.create(
        db,
        created_by=principal.id,
        title=task.title,
        description=task.description,
        status=task.status or "pending",
        priority=task.priority or "medium",
        category=task.category,
        due_date=task.due_date,
        assigned_to=task.assigned_to,
    )
    logger.info("task.created", task_id=new.id, user_id=principal.id)
    return {"data": new}


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: int = Path(ge=1, le=MAX_ID), principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    task = task_repo.get_visible(db, task_id, principal.id)
    if not task:
        raise NotFound("Task not found")
    return {"data": task}


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(changes: TaskUpdate, task_id: int = Path(ge=1, le=MAX_ID), principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    task = task_repo.get(db, task_id)
    if not task:
        raise NotFound("Task not found")
    if not permissions.can_update(principal, task):
        raise Forbidden("Not authorized to update this task")

    fields = changes.changes()
    _check_assignee(db, fields.get("assigned_to"))
    updated = task_repo.update(db, task, fields)
    logger.info("task.updated", task_id=task_id, user_id=principal.id, fields=sorted(fields))
    return {"data": updated}


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: int = Path(ge=1, le=MAX_ID), principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    task = task_repo.get(db, task_id)
    if not task:
        raise NotFound("Task not found")
    if not permissions.can_delete(principal, task):
        raise Forbidden("Not authorized to delete this task")
    task_repo.delete(db, task)
    logger.info("task.deleted", task_id=task_id, user_id=principal.id)
    return {"message": "Task deleted successfully"}

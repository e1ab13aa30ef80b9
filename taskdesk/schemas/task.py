from datetime import datetime, UTC
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from taskdesk.schemas.common import DataResponse
from taskdesk.schemas.user import UserRef

Status = Literal["pending", "in-progress", "completed"]
Priority = Literal["low", "medium", "high"]

_OPTIONAL_FIELDS = ("description", "status", "priority", "category", "due_date", "assigned_to")


def parse_due_date(v):
    """Lenient date parsing: anything unparseable becomes None.

    Offset-aware values are converted to naive UTC, which is what the
    due_date column stores.
    """
    if isinstance(v, str):
        try:
            v = datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(v, datetime):
        return None
    if v.tzinfo is not None:
        v = v.astimezone(UTC).replace(tzinfo=None)
    return v


class TaskFields(BaseModel):
    """Fields a client may send on create and update.

    Blank strings count as "not supplied", so an empty form field never
    clears a stored value.
    """
    model_config = ConfigDict(populate_by_name=True)

    description: Optional[str] = None
    status: Optional[Status] = None
    priority: Optional[Priority] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    assigned_to: Optional[int] = Field(None, alias="assignedTo")

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def lenient_due_date(cls, v):
        return parse_due_date(v)


class TaskCreate(TaskFields):
    title: str

    @field_validator("title", mode="before")
    @classmethod
    def title_not_empty(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Title is required")
        return v.strip() if isinstance(v, str) else v


class TaskUpdate(TaskFields):
    title: Optional[str] = None

    @field_validator("title")
    @classmethod
    def blank_title_keeps_old(cls, v):
        if v is None or not v.strip():
            return None
        return v.strip()

    def changes(self) -> dict:
        """Column values to overwrite; everything left as None is untouched."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    category: Optional[str] = None
    due_date: Optional[datetime] = Field(None, serialization_alias="dueDate")
    created_by: int = Field(serialization_alias="createdBy")
    assigned_to: Optional[int] = Field(None, serialization_alias="assignedTo")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
    creator: Optional[UserRef] = None
    assignee: Optional[UserRef] = None


TaskList = DataResponse[List[TaskOut]]
TaskResponse = DataResponse[TaskOut]

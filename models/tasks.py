# models/tasks.py

from enum import Enum
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import field_validator
from models.helper import short_uuid, utcnow, parse_due_date


# ---------------------------
# Enumerations
# ---------------------------
class TaskStatus(str, Enum):
    """
    Conventional task states. The column itself is a free string so
    owners, managers and admins may record other states; assignees are
    limited to these two.
    """
    ongoing = "ongoing"
    completed = "completed"


class TaskBucket(str, Enum):
    """Analytics buckets over task status and due date."""
    completed = "completed"
    pending = "pending"
    overdue = "overdue"


DEFAULT_TAG = "General"


# ---------------------------
# TASK MODELS
# ---------------------------
class TaskBase(SQLModel):
    """
    Shared base schema for tasks.

    Attributes:
        title:       Short title for the task
        description: Longer description of the task
        tag:         Free-form label, "General" when not given
        status:      Current status, "ongoing" by default
        due_date:    Optional due date (naive UTC)
    """
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    tag: str = Field(default=DEFAULT_TAG, max_length=60)
    status: str = Field(default=TaskStatus.ongoing.value, max_length=40, index=True)
    due_date: Optional[datetime] = Field(default=None, sa_type=DateTime)

    model_config = {"from_attributes": True}


class Task(TaskBase, table=True):
    """
    Database model for a task.

    manager_id and assigned_to_id are employee_id copies, not foreign
    keys; username and assigned_to_username are denormalized names.
    """

    __tablename__ = "tasks"

    id: str = Field(default_factory=short_uuid, primary_key=True, index=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    username: str

    manager_id: Optional[int] = Field(default=None, index=True)
    assigned_to_id: Optional[int] = Field(default=None, index=True)
    assigned_to_username: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class TaskCreate(TaskBase):
    """
    Schema for creating a new task. ``assigned_to_id`` is the assignee's
    employee_id and is honoured for managers and admins only.
    """
    assigned_to_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("title", "description", "status")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("tag")
    @classmethod
    def _default_tag(cls, v: str) -> str:
        return v.strip() or DEFAULT_TAG

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, v):
        return parse_due_date(v)


class TaskRead(TaskBase):
    id: str
    owner_id: str
    username: str
    manager_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    assigned_to_username: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaskUpdate(SQLModel):
    """
    Partial update. Blank strings are treated as "not provided".
    """
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    tag: Optional[str] = Field(default=None, max_length=60)
    status: Optional[str] = Field(default=None, max_length=40)
    due_date: Optional[datetime] = None

    @field_validator("title", "description", "tag", "status")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, v):
        return parse_due_date(v)


class TaskStatusUpdate(SQLModel):
    # validated in the route so an unknown value reads "Invalid status"
    status: str


class TaskAssign(SQLModel):
    employee_id: int = Field(gt=0)


__all__ = [
    "TaskStatus", "TaskBucket", "DEFAULT_TAG",
    "TaskBase", "Task", "TaskCreate", "TaskRead", "TaskUpdate",
    "TaskStatusUpdate", "TaskAssign",
]

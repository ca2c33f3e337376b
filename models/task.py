"""
Task Models

Declarative field rules for tasks. The task store validates every create and
partial update through these schemas before anything reaches MongoDB.
"""

from typing import Literal, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


TaskStatus = Literal["todo", "in-progress", "done"]
TaskPriority = Literal["low", "medium", "high"]

# Ignore unknown keys so ownerId/createdAt in a body can never be written.
_INPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    extra="ignore",
)


class TaskCreate(BaseModel):
    """Schema for creating a task."""

    model_config = _INPUT_CONFIG

    title: str = Field(..., min_length=3, max_length=100, description="Task title")
    description: Optional[str] = Field(default=None, max_length=500, description="Optional details")
    status: TaskStatus = Field(default="todo", description="todo, in-progress or done")
    priority: TaskPriority = Field(default="medium", description="low, medium or high")
    due_date: Optional[datetime] = Field(default=None, description="Optional due date")


class TaskUpdate(BaseModel):
    """
    Schema for a partial task update.

    Only fields present in the payload are applied; each is checked against
    the same rule as on create. title, status and priority cannot be nulled.
    """

    model_config = _INPUT_CONFIG

    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "status", "priority", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class TaskResponse(BaseModel):
    """Schema for a task returned to its owner."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    owner_id: str
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def as_stored(cls, v: Optional[datetime]) -> Optional[datetime]:
        # BSON dates are UTC with millisecond precision.
        if v is None:
            return v
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        else:
            v = v.astimezone(timezone.utc)
        return v.replace(microsecond=v.microsecond // 1000 * 1000)

    @classmethod
    def from_document(cls, doc: dict) -> "TaskResponse":
        """Build from a raw Mongo document."""
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            description=doc.get("description"),
            status=doc.get("status", "todo"),
            priority=doc.get("priority", "medium"),
            due_date=doc.get("due_date"),
            owner_id=str(doc["owner_id"]),
            created_at=doc["created_at"],
            updated_at=doc.get("updated_at", doc["created_at"]),
        )


class TaskData(BaseModel):
    """Payload wrapping a single task."""

    task: TaskResponse


class TaskListData(BaseModel):
    """Payload wrapping the caller's tasks."""

    tasks: list[TaskResponse]

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from ..models.task import (
    TASK_DESCRIPTION_MAX,
    TASK_TITLE_MAX,
    TaskPriority,
    TaskStatus,
    normalize_priority,
    normalize_status,
)


class _NormalizedChoices(BaseModel):
    """Accepts "Medium", "In Progress" and similar spellings for enums."""

    @field_validator("priority", mode="before", check_fields=False)
    @classmethod
    def _priority(cls, value):
        return normalize_priority(value) if value is not None else value

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def _status(cls, value):
        return normalize_status(value) if value is not None else value


class TaskCreate(_NormalizedChoices):
    """Schema for creating new tasks; the column defaults to the board's first."""
    title: str = Field(..., min_length=1, max_length=TASK_TITLE_MAX)
    description: Optional[str] = Field(default=None, max_length=TASK_DESCRIPTION_MAX)
    project_id: str = Field(alias="projectId")
    board_id: str = Field(alias="boardId")
    column_id: Optional[str] = Field(default=None, alias="columnId")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None

    class Config:
        populate_by_name = True


class TaskUpdate(_NormalizedChoices):
    """Schema for updating existing tasks."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=TASK_TITLE_MAX)
    description: Optional[str] = Field(default=None, max_length=TASK_DESCRIPTION_MAX)
    board_id: Optional[str] = Field(default=None, alias="boardId")
    column_id: Optional[str] = Field(default=None, alias="columnId")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    time_spent: Optional[float] = Field(default=None, ge=0, alias="timeSpent")
    is_running: Optional[bool] = Field(default=None, alias="isRunning")
    is_completed: Optional[bool] = Field(default=None, alias="isCompleted")

    class Config:
        populate_by_name = True


class TimerStop(BaseModel):
    """Seconds to add; measured server-side when omitted."""
    time_elapsed: Optional[float] = Field(default=None, ge=0, alias="timeElapsed")

    class Config:
        populate_by_name = True


class Task(BaseModel):
    """Complete task schema with all fields."""
    id: str
    title: str
    description: Optional[str] = None
    column_id: str
    board_id: str
    project_id: str
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    status: TaskStatus
    priority: TaskPriority
    time_spent: float
    is_running: bool
    is_completed: bool
    last_started_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

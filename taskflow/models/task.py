from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional
from uuid import uuid4
import enum

from ..timeutils import utcnow

TASK_TITLE_MAX = 100
TASK_DESCRIPTION_MAX = 1000


class TaskStatus(str, enum.Enum):
    TODO = "to-do"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Conventional column names and the status a task takes when it sits there.
STATUS_BY_COLUMN_NAME = {
    "To Do": TaskStatus.TODO,
    "In Progress": TaskStatus.IN_PROGRESS,
    "Done": TaskStatus.DONE,
}
COLUMN_NAME_BY_STATUS = {status: name for name, status in STATUS_BY_COLUMN_NAME.items()}


def normalize_status(value: str) -> TaskStatus:
    """Accept "To Do", "to do", "TO-DO", "to-do" and friends."""
    if isinstance(value, TaskStatus):
        return value
    key = "-".join(str(value).strip().lower().replace("_", " ").split())
    if key == "todo":
        key = TaskStatus.TODO.value
    return TaskStatus(key)


def normalize_priority(value: str) -> TaskPriority:
    if isinstance(value, TaskPriority):
        return value
    return TaskPriority(str(value).strip().lower())


class Task(SQLModel, table=True):
    """Task model for Kanban cards.

    ``column_id``, ``board_id`` and ``project_id`` must describe one path
    through the hierarchy; HierarchyManager checks that on every write.
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str = Field(max_length=TASK_TITLE_MAX)
    description: Optional[str] = Field(default=None, max_length=TASK_DESCRIPTION_MAX)
    column_id: str = Field(foreign_key="columns.id", index=True)
    board_id: str = Field(foreign_key="boards.id", index=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    assigned_to: Optional[str] = Field(default=None, foreign_key="users.id")
    due_date: Optional[datetime] = None
    status: TaskStatus = Field(default=TaskStatus.TODO)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    time_spent: float = Field(default=0, ge=0)
    is_running: bool = Field(default=False)
    is_completed: bool = Field(default=False)
    last_started_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    column: Optional["BoardColumn"] = Relationship(back_populates="tasks")

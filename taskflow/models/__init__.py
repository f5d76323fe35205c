from .project import Project, ProjectMember
from .board import Board, BoardColumn, DEFAULT_COLUMN_NAMES
from .task import Task, TaskPriority, TaskStatus
from .user import User
from .subscription import PushSubscription

# Export all models for easy importing
__all__ = [
    "Board",
    "BoardColumn",
    "DEFAULT_COLUMN_NAMES",
    "Project",
    "ProjectMember",
    "PushSubscription",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
]

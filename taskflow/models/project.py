from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from ..timeutils import utcnow

PROJECT_NAME_MAX = 50
PROJECT_DESCRIPTION_MAX = 500


class ProjectMember(SQLModel, table=True):
    """Link table between projects and their member users."""
    __tablename__ = "project_members"

    project_id: str = Field(foreign_key="projects.id", primary_key=True)
    user_id: str = Field(foreign_key="users.id", primary_key=True)
    joined_at: datetime = Field(default_factory=utcnow)


class Project(SQLModel, table=True):
    """Top of the hierarchy.

    ``boards`` is never stored: it is loaded from ``Board.project_id``.
    """
    __tablename__ = "projects"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(max_length=PROJECT_NAME_MAX)
    description: Optional[str] = Field(default=None, max_length=PROJECT_DESCRIPTION_MAX)
    owner_id: Optional[str] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    boards: List["Board"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"order_by": "Board.created_at"},
    )
    members: List["User"] = Relationship(back_populates="projects", link_model=ProjectMember)

    @property
    def board_count(self) -> int:
        return len(self.boards)

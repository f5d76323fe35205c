from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from ..timeutils import utcnow

BOARD_NAME_MAX = 50
COLUMN_NAME_MAX = 50

# Columns provisioned for every new board, in display order.
DEFAULT_COLUMN_NAMES = ("To Do", "In Progress", "Done")


class Board(SQLModel, table=True):
    """A board belongs to exactly one project.

    ``columns`` is loaded from ``BoardColumn.board_id``, ordered by position.
    """
    __tablename__ = "boards"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(max_length=BOARD_NAME_MAX)
    project_id: str = Field(foreign_key="projects.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    project: Optional["Project"] = Relationship(back_populates="boards")
    columns: List["BoardColumn"] = Relationship(
        back_populates="board",
        sa_relationship_kwargs={"order_by": "BoardColumn.position"},
    )


class BoardColumn(SQLModel, table=True):
    __tablename__ = "columns"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(max_length=COLUMN_NAME_MAX)
    board_id: str = Field(foreign_key="boards.id", index=True)
    position: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    board: Optional[Board] = Relationship(back_populates="columns")
    tasks: List["Task"] = Relationship(
        back_populates="column",
        sa_relationship_kwargs={"order_by": "Task.created_at"},
    )

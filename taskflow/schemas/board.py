from pydantic import BaseModel, Field
from datetime import datetime
from typing import List

from ..models.board import BOARD_NAME_MAX, COLUMN_NAME_MAX
from .task import Task


class BoardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=BOARD_NAME_MAX)
    project_id: str = Field(alias="projectId")

    class Config:
        populate_by_name = True


class BoardUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=BOARD_NAME_MAX)


class ColumnCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=COLUMN_NAME_MAX)


class ColumnUpdate(ColumnCreate):
    pass


class Column(BaseModel):
    id: str
    name: str
    board_id: str
    position: int
    created_at: datetime
    tasks: List[Task] = []

    class Config:
        from_attributes = True


class Board(BaseModel):
    """Board with its columns, each with its tasks."""
    id: str
    name: str
    project_id: str
    created_at: datetime
    updated_at: datetime
    columns: List[Column] = []

    class Config:
        from_attributes = True


class BoardDeleteResponse(BaseModel):
    message: str = "Board deleted successfully"
    tasks_deleted: int = Field(alias="tasksDeleted")
    columns_deleted: int = Field(alias="columnsDeleted")

    class Config:
        populate_by_name = True

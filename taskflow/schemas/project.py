from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from ..models.project import PROJECT_DESCRIPTION_MAX, PROJECT_NAME_MAX


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=PROJECT_NAME_MAX)
    description: Optional[str] = Field(default=None, max_length=PROJECT_DESCRIPTION_MAX)


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=PROJECT_NAME_MAX)
    description: Optional[str] = Field(default=None, max_length=PROJECT_DESCRIPTION_MAX)


class Project(ProjectBase):
    id: str
    owner_id: Optional[str] = None
    board_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MemberAdd(BaseModel):
    email: str


class ProjectDeleteResponse(BaseModel):
    message: str = "Project deleted successfully"
    tasks_deleted: int = Field(alias="tasksDeleted")
    columns_deleted: int = Field(alias="columnsDeleted")
    boards_deleted: int = Field(alias="boardsDeleted")

    class Config:
        populate_by_name = True

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ..deps import get_hierarchy
from ..models import User
from ..schemas.board import Board as BoardSchema
from ..schemas.project import (
    MemberAdd,
    Project as ProjectSchema,
    ProjectCreate,
    ProjectDeleteResponse,
    ProjectUpdate,
)
from ..schemas.user import User as UserSchema
from ..services.hierarchy import HierarchyManager
from .auth import get_optional_user

router = APIRouter()


@router.get("/projects", response_model=List[ProjectSchema])
def list_projects(hierarchy: HierarchyManager = Depends(get_hierarchy)):
    """List all projects with their board counts."""
    return [ProjectSchema.model_validate(project) for project in hierarchy.list_projects()]


@router.post("/projects", response_model=ProjectSchema, status_code=status.HTTP_201_CREATED)
def create_project(
    project: ProjectCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    """Create a project; an authenticated caller becomes its owner."""
    created = hierarchy.create_project(project.name, project.description, owner=current_user)
    return ProjectSchema.model_validate(created)


@router.get("/projects/{project_id}", response_model=ProjectSchema)
def get_project(project_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return ProjectSchema.model_validate(hierarchy.get_project(project_id))


@router.patch("/projects/{project_id}", response_model=ProjectSchema)
def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    updated = hierarchy.update_project(project_id, project_update.model_dump(exclude_unset=True))
    return ProjectSchema.model_validate(updated)


@router.delete("/projects/{project_id}", response_model=ProjectDeleteResponse)
def delete_project(project_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    """Delete a project with all of its boards, columns and tasks."""
    counts = hierarchy.delete_project(project_id)
    return ProjectDeleteResponse(
        tasks_deleted=counts.tasks,
        columns_deleted=counts.columns,
        boards_deleted=counts.boards,
    )


@router.get("/projects/{project_id}/boards", response_model=List[BoardSchema])
def get_project_boards(project_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    """Boards of a project with columns and tasks populated."""
    return [BoardSchema.model_validate(board) for board in hierarchy.get_boards_for_project(project_id)]


@router.get("/projects/{project_id}/members", response_model=List[UserSchema])
def list_members(project_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return [UserSchema.model_validate(user) for user in hierarchy.get_project(project_id).members]


@router.post("/projects/{project_id}/members", response_model=List[UserSchema])
def add_member(
    project_id: str,
    member: MemberAdd,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    return [UserSchema.model_validate(user) for user in hierarchy.add_member(project_id, member.email)]


@router.delete("/projects/{project_id}/members/{user_id}", response_model=List[UserSchema])
def remove_member(
    project_id: str,
    user_id: str,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    return [UserSchema.model_validate(user) for user in hierarchy.remove_member(project_id, user_id)]

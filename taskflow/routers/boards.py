from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..deps import get_hierarchy
from ..errors import InvalidArgument
from ..schemas.board import (
    Board as BoardSchema,
    BoardCreate,
    BoardDeleteResponse,
    BoardUpdate,
    Column as ColumnSchema,
    ColumnCreate,
    ColumnUpdate,
)
from ..services.hierarchy import HierarchyManager

router = APIRouter()


@router.get("/boards", response_model=List[BoardSchema])
def list_boards(
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    """List the boards of one project."""
    if not project_id:
        raise InvalidArgument("A projectId is required to fetch boards.")
    return [BoardSchema.model_validate(board) for board in hierarchy.get_boards_for_project(project_id)]


@router.post("/boards", response_model=BoardSchema, status_code=status.HTTP_201_CREATED)
def create_board(board: BoardCreate, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    """Create a board with the default To Do / In Progress / Done columns."""
    return BoardSchema.model_validate(hierarchy.create_board(board.name, board.project_id))


@router.get("/boards/{board_id}", response_model=BoardSchema)
def get_board(board_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return BoardSchema.model_validate(hierarchy.get_board(board_id))


@router.patch("/boards/{board_id}", response_model=BoardSchema)
def update_board(
    board_id: str,
    board_update: BoardUpdate,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    return BoardSchema.model_validate(hierarchy.rename_board(board_id, board_update.name))


@router.delete("/boards/{board_id}", response_model=BoardDeleteResponse)
def delete_board(board_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    """Delete a board with its columns and tasks."""
    counts = hierarchy.delete_board(board_id)
    return BoardDeleteResponse(tasks_deleted=counts.tasks, columns_deleted=counts.columns)


@router.post("/boards/{board_id}/columns", response_model=ColumnSchema, status_code=status.HTTP_201_CREATED)
def create_column(
    board_id: str,
    column: ColumnCreate,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    """Append a column after the board's last one."""
    return ColumnSchema.model_validate(hierarchy.create_column(board_id, column.name))


@router.patch("/columns/{column_id}", response_model=ColumnSchema)
def update_column(
    column_id: str,
    column_update: ColumnUpdate,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    return ColumnSchema.model_validate(hierarchy.rename_column(column_id, column_update.name))

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..deps import get_hierarchy
from ..schemas.task import Task as TaskSchema, TaskCreate, TaskUpdate, TimerStop
from ..services.hierarchy import HierarchyManager
from ..services.push import PushSender, get_push_sender, send_status_change_notifications

router = APIRouter()


def _get_update_data(task_update: TaskUpdate) -> dict:
    return task_update.model_dump(exclude_unset=True)


@router.get("/tasks", response_model=List[TaskSchema])
def get_tasks(
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    board_id: Optional[str] = Query(default=None, alias="boardId"),
    column_id: Optional[str] = Query(default=None, alias="columnId"),
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    """List tasks, optionally narrowed to a project, board or column."""
    return hierarchy.list_tasks(project_id=project_id, board_id=board_id, column_id=column_id)


@router.post("/tasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(task: TaskCreate, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    """Create a new task; without a column it goes to the board's first column."""
    return hierarchy.create_task(
        title=task.title,
        project_id=task.project_id,
        board_id=task.board_id,
        column_id=task.column_id,
        description=task.description,
        due_date=task.due_date,
        priority=task.priority,
        status=task.status,
        assigned_to=task.assigned_to,
    )


@router.get("/tasks/{task_id}", response_model=TaskSchema)
def get_task(task_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.get_task(task_id)


@router.patch("/tasks/{task_id}", response_model=TaskSchema)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
    sender: PushSender = Depends(get_push_sender),
):
    """Update a task; moving it to another column keeps status in step.

    Project members are pushed a notification when the status changes.
    """
    previous_status = hierarchy.get_task(task_id).status
    task = hierarchy.update_task(task_id, _get_update_data(task_update))
    if task.status != previous_status:
        send_status_change_notifications(hierarchy.db, task, previous_status, sender)
    return task


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    hierarchy.delete_task(task_id)
    return {"message": "Deleted Task"}


@router.post("/tasks/{task_id}/timer/start", response_model=TaskSchema)
def start_timer(task_id: str, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.start_timer(task_id)


@router.post("/tasks/{task_id}/timer/stop", response_model=TaskSchema)
def stop_timer(
    task_id: str,
    payload: Optional[TimerStop] = None,
    hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    """Stop the timer and add the elapsed seconds to the task."""
    time_elapsed = payload.time_elapsed if payload is not None else None
    return hierarchy.stop_timer(task_id, time_elapsed)

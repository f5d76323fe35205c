"""Project -> Board -> Column -> Task consistency.

Every write that touches more than one entity goes through
:class:`HierarchyManager`, which runs it as a single transaction on the
session it was given. Children hold the only stored reference to their
parent; the parent-side lists (``Project.boards``, ``Board.columns``,
``BoardColumn.tasks``) are loaded from those references on read.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..errors import InvalidArgument, NotFound, TransactionFailure
from ..models import Board, BoardColumn, DEFAULT_COLUMN_NAMES, Project, ProjectMember, Task, TaskStatus, User
from ..models.board import BOARD_NAME_MAX, COLUMN_NAME_MAX
from ..models.project import PROJECT_DESCRIPTION_MAX, PROJECT_NAME_MAX
from ..models.task import (
    COLUMN_NAME_BY_STATUS,
    STATUS_BY_COLUMN_NAME,
    TASK_DESCRIPTION_MAX,
    TASK_TITLE_MAX,
    normalize_priority,
    normalize_status,
)
from ..timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

# Task fields a PATCH may explicitly clear.
NULLABLE_TASK_FIELDS = {"description", "due_date", "assigned_to"}


@dataclass
class CascadeCounts:
    tasks: int = 0
    columns: int = 0
    boards: int = 0


def validate_id(value: Any, label: str) -> str:
    """Return the canonical form of a UUID identifier or raise InvalidArgument."""
    if value is None or value == "":
        raise InvalidArgument(f"{label.capitalize()} ID is required")
    try:
        return str(UUID(str(value)))
    except ValueError:
        raise InvalidArgument(f"Invalid {label} ID", details=str(value))


def validate_text(value: Any, limit: int, field: str, required: bool = True) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise InvalidArgument(f"{field} is required")
        return value
    if not isinstance(value, str):
        raise InvalidArgument(f"{field} must be a string")
    if len(value) > limit:
        raise InvalidArgument(f"{field} must be at most {limit} characters")
    return value


def _coerce(normalize: Callable, value: Any, field: str):
    try:
        return normalize(value)
    except ValueError:
        raise InvalidArgument(f"Invalid {field}", details=str(value))


class HierarchyManager:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def _now(self) -> datetime:
        return as_utc(self.clock())

    @contextmanager
    def transaction(self, operation: str):
        """Commit on success; roll back and re-raise on any failure."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Transaction aborted during %s", operation)
            raise TransactionFailure(f"Failed to {operation}", details=type(exc).__name__) from exc
        except Exception:
            self.db.rollback()
            logger.warning("Rolled back %s", operation)
            raise

    # -------------------- lookups --------------------
    def _get(self, model, raw_id: Any, label: str):
        entity_id = validate_id(raw_id, label)
        entity = self.db.get(model, entity_id)
        if entity is None:
            raise NotFound(f"{label.capitalize()} not found")
        return entity

    def get_project(self, project_id: Any) -> Project:
        return self._get(Project, project_id, "project")

    def get_board(self, board_id: Any) -> Board:
        return self._get(Board, board_id, "board")

    def get_column(self, column_id: Any) -> BoardColumn:
        return self._get(BoardColumn, column_id, "column")

    def get_task(self, task_id: Any) -> Task:
        return self._get(Task, task_id, "task")

    def get_user(self, user_id: Any) -> User:
        return self._get(User, user_id, "user")

    # -------------------- projects --------------------
    def list_projects(self) -> List[Project]:
        return (
            self.db.query(Project)
            .options(selectinload(Project.boards))
            .order_by(Project.created_at)
            .all()
        )

    def create_project(self, name: str, description: Optional[str] = None, owner: Optional[User] = None) -> Project:
        name = validate_text(name, PROJECT_NAME_MAX, "Project name")
        validate_text(description, PROJECT_DESCRIPTION_MAX, "Project description", required=False)

        with self.transaction("create project"):
            project = Project(
                name=name,
                description=description,
                owner_id=owner.id if owner is not None else None,
            )
            if owner is not None:
                project.members.append(owner)
            self.db.add(project)

        logger.info("Created project %s", project.id)
        self.db.refresh(project)
        return project

    def update_project(self, project_id: Any, changes: Dict[str, Any]) -> Project:
        """Apply a partial update; an explicit None clears the description."""
        project = self.get_project(project_id)
        changes = dict(changes)
        if changes.get("name") is None:
            changes.pop("name", None)
        else:
            validate_text(changes["name"], PROJECT_NAME_MAX, "Project name")
        if "description" in changes:
            validate_text(changes["description"], PROJECT_DESCRIPTION_MAX, "Project description", required=False)

        with self.transaction("update project"):
            for field in ("name", "description"):
                if field in changes:
                    setattr(project, field, changes[field])
            project.updated_at = self._now()

        self.db.refresh(project)
        return project

    def delete_project(self, project_id: Any) -> CascadeCounts:
        """Delete a project and everything below it in one transaction."""
        project = self.get_project(project_id)
        project_id = project.id

        with self.transaction("delete project"):
            board_ids = [row.id for row in self.db.query(Board.id).filter(Board.project_id == project_id)]
            tasks = self.db.query(Task).filter(Task.project_id == project_id).delete(synchronize_session="fetch")
            columns = 0
            if board_ids:
                columns = (
                    self.db.query(BoardColumn)
                    .filter(BoardColumn.board_id.in_(board_ids))
                    .delete(synchronize_session="fetch")
                )
            boards = self.db.query(Board).filter(Board.project_id == project_id).delete(synchronize_session="fetch")
            self.db.query(ProjectMember).filter(ProjectMember.project_id == project_id).delete(
                synchronize_session="fetch"
            )
            self.db.query(Project).filter(Project.id == project_id).delete(synchronize_session="fetch")

        counts = CascadeCounts(tasks=tasks, columns=columns, boards=boards)
        logger.info(
            "Deleted project %s: %d boards, %d columns, %d tasks",
            project_id, counts.boards, counts.columns, counts.tasks,
        )
        return counts

    # -------------------- members --------------------
    def add_member(self, project_id: Any, email: str) -> List[User]:
        project = self.get_project(project_id)
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            raise NotFound("User not found")

        if user not in project.members:
            with self.transaction("add project member"):
                project.members.append(user)
        return list(project.members)

    def remove_member(self, project_id: Any, user_id: Any) -> List[User]:
        project = self.get_project(project_id)
        user_id = validate_id(user_id, "user")
        if user_id == project.owner_id:
            raise InvalidArgument("The project owner cannot be removed")

        member = next((user for user in project.members if user.id == user_id), None)
        if member is None:
            raise NotFound("Member not found")

        with self.transaction("remove project member"):
            project.members.remove(member)
        return list(project.members)

    # -------------------- boards --------------------
    def get_boards_for_project(self, project_id: Any) -> List[Board]:
        project = self.get_project(project_id)
        return (
            self.db.query(Board)
            .options(selectinload(Board.columns).selectinload(BoardColumn.tasks))
            .filter(Board.project_id == project.id)
            .order_by(Board.created_at)
            .all()
        )

    def create_board(self, name: str, project_id: Any) -> Board:
        """Insert a board with its three default columns."""
        project = self.get_project(project_id)
        name = validate_text(name, BOARD_NAME_MAX, "Board name")

        with self.transaction("create board"):
            board = Board(name=name, project_id=project.id)
            self.db.add(board)
            self.db.flush()
            for position, column_name in enumerate(DEFAULT_COLUMN_NAMES):
                self.db.add(BoardColumn(name=column_name, board_id=board.id, position=position))

        logger.info("Created board %s in project %s", board.id, project.id)
        self.db.refresh(board)
        return board

    def rename_board(self, board_id: Any, name: str) -> Board:
        board = self.get_board(board_id)
        name = validate_text(name, BOARD_NAME_MAX, "Board name")
        with self.transaction("update board"):
            board.name = name
            board.updated_at = self._now()
        self.db.refresh(board)
        return board

    def delete_board(self, board_id: Any) -> CascadeCounts:
        """Delete a board, its columns and its tasks in one transaction."""
        board = self.get_board(board_id)
        board_id = board.id

        with self.transaction("delete board"):
            tasks = self.db.query(Task).filter(Task.board_id == board_id).delete(synchronize_session="fetch")
            columns = (
                self.db.query(BoardColumn)
                .filter(BoardColumn.board_id == board_id)
                .delete(synchronize_session="fetch")
            )
            self.db.query(Board).filter(Board.id == board_id).delete(synchronize_session="fetch")

        counts = CascadeCounts(tasks=tasks, columns=columns)
        logger.info("Deleted board %s: %d columns, %d tasks", board_id, counts.columns, counts.tasks)
        return counts

    # -------------------- columns --------------------
    def create_column(self, board_id: Any, name: str) -> BoardColumn:
        board = self.get_board(board_id)
        name = validate_text(name, COLUMN_NAME_MAX, "Column name")
        last_position = (
            self.db.query(func.max(BoardColumn.position))
            .filter(BoardColumn.board_id == board.id)
            .scalar()
        )

        with self.transaction("create column"):
            column = BoardColumn(
                name=name,
                board_id=board.id,
                position=0 if last_position is None else last_position + 1,
            )
            self.db.add(column)

        self.db.refresh(column)
        return column

    def rename_column(self, column_id: Any, name: str) -> BoardColumn:
        column = self.get_column(column_id)
        name = validate_text(name, COLUMN_NAME_MAX, "Column name")
        with self.transaction("update column"):
            column.name = name
            column.updated_at = self._now()
        self.db.refresh(column)
        return column

    def _first_column(self, board: Board) -> BoardColumn:
        column = (
            self.db.query(BoardColumn)
            .filter(BoardColumn.board_id == board.id)
            .order_by(BoardColumn.position)
            .first()
        )
        if column is None:
            raise InvalidArgument("Board has no columns")
        return column

    def _column_for_status(self, board_id: str, status: TaskStatus) -> Optional[BoardColumn]:
        return (
            self.db.query(BoardColumn)
            .filter(BoardColumn.board_id == board_id, BoardColumn.name == COLUMN_NAME_BY_STATUS[status])
            .order_by(BoardColumn.position)
            .first()
        )

    # -------------------- tasks --------------------
    def list_tasks(self, project_id: Any = None, board_id: Any = None, column_id: Any = None) -> List[Task]:
        query = self.db.query(Task)
        if project_id is not None:
            query = query.filter(Task.project_id == validate_id(project_id, "project"))
        if board_id is not None:
            query = query.filter(Task.board_id == validate_id(board_id, "board"))
        if column_id is not None:
            query = query.filter(Task.column_id == validate_id(column_id, "column"))
        return query.order_by(Task.created_at).all()

    def create_task(
        self,
        title: str,
        project_id: Any,
        board_id: Any,
        column_id: Any = None,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        priority: Any = None,
        status: Any = None,
        assigned_to: Any = None,
    ) -> Task:
        """Create a task on a consistent project/board/column path.

        Without a column the task lands in the column matching its status,
        or in the board's first column when there is no such column.
        """
        title = validate_text(title, TASK_TITLE_MAX, "Task title")
        validate_text(description, TASK_DESCRIPTION_MAX, "Task description", required=False)
        project = self.get_project(project_id)
        board = self.get_board(board_id)
        if board.project_id != project.id:
            raise InvalidArgument("Board does not belong to project")

        if status is not None:
            status = _coerce(normalize_status, status, "status")

        if column_id is None:
            column = None
            if status is not None:
                column = self._column_for_status(board.id, status)
            if column is None:
                column = self._first_column(board)
        else:
            column = self.get_column(column_id)
            if column.board_id != board.id:
                raise InvalidArgument("Column does not belong to board")

        if assigned_to is not None:
            assigned_to = self.get_user(assigned_to).id

        fields = dict(
            title=title,
            description=description,
            project_id=project.id,
            board_id=board.id,
            column_id=column.id,
            assigned_to=assigned_to,
            due_date=as_utc(due_date),
        )
        if status is not None:
            fields["status"] = status
        if priority is not None:
            fields["priority"] = _coerce(normalize_priority, priority, "priority")
        task = Task(**fields)
        _sync_status_with_column(task, column)

        with self.transaction("create task"):
            self.db.add(task)

        self.db.refresh(task)
        return task

    def update_task(self, task_id: Any, changes: Dict[str, Any]) -> Task:
        """Apply a partial update; a column change may cross boards within the project."""
        task = self.get_task(task_id)
        changes = {
            field: value
            for field, value in changes.items()
            if value is not None or field in NULLABLE_TASK_FIELDS
        }
        column_id = changes.pop("column_id", None)
        board_id = changes.pop("board_id", None)
        status = changes.pop("status", None)
        if status is not None:
            status = _coerce(normalize_status, status, "status")

        if "title" in changes:
            validate_text(changes["title"], TASK_TITLE_MAX, "Task title")
        if "description" in changes:
            validate_text(changes["description"], TASK_DESCRIPTION_MAX, "Task description", required=False)
        if "priority" in changes:
            changes["priority"] = _coerce(normalize_priority, changes["priority"], "priority")
        if changes.get("time_spent", 0) < 0:
            raise InvalidArgument("Time spent cannot be negative")
        if "due_date" in changes:
            changes["due_date"] = as_utc(changes["due_date"])
        if changes.get("assigned_to") is not None:
            changes["assigned_to"] = self.get_user(changes["assigned_to"]).id

        target_column = None
        if column_id is not None:
            target_column = self.get_column(column_id)
            if board_id is not None and validate_id(board_id, "board") != target_column.board_id:
                raise InvalidArgument("Column does not belong to board")
            if target_column.board.project_id != task.project_id:
                raise InvalidArgument("Column belongs to a different project")
        elif board_id is not None and validate_id(board_id, "board") != task.board_id:
            raise InvalidArgument("Moving a task to another board requires a column")
        elif status is not None:
            target_column = self._column_for_status(task.board_id, status)

        with self.transaction("update task"):
            for field, value in changes.items():
                setattr(task, field, value)
            if status is not None:
                task.status = status
            if target_column is not None:
                task.column_id = target_column.id
                task.board_id = target_column.board_id
                _sync_status_with_column(task, target_column)
            task.updated_at = self._now()

        self.db.refresh(task)
        return task

    def delete_task(self, task_id: Any) -> None:
        task = self.get_task(task_id)
        with self.transaction("delete task"):
            self.db.delete(task)

    # -------------------- time tracking --------------------
    def start_timer(self, task_id: Any) -> Task:
        task = self.get_task(task_id)
        if task.is_running:
            return task

        with self.transaction("start timer"):
            now = self._now()
            task.is_running = True
            task.last_started_at = now
            task.updated_at = now

        self.db.refresh(task)
        return task

    def stop_timer(self, task_id: Any, time_elapsed: Optional[float] = None) -> Task:
        """Add elapsed seconds to ``time_spent``; measured from the start time when not given."""
        task = self.get_task(task_id)
        if time_elapsed is not None and time_elapsed < 0:
            raise InvalidArgument("Time elapsed cannot be negative")

        now = self._now()
        if time_elapsed is None:
            if task.is_running and task.last_started_at is not None:
                time_elapsed = max((now - as_utc(task.last_started_at)).total_seconds(), 0)
            else:
                time_elapsed = 0

        with self.transaction("stop timer"):
            task.time_spent = (task.time_spent or 0) + time_elapsed
            task.is_running = False
            task.last_started_at = None
            task.updated_at = now

        self.db.refresh(task)
        return task


def _sync_status_with_column(task: Task, column: BoardColumn) -> None:
    """Conventionally named columns decide the task's status."""
    status = STATUS_BY_COLUMN_NAME.get(column.name)
    if status is not None:
        task.status = status

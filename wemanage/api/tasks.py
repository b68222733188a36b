"""Task API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wemanage.api.dependencies import get_current_user
from wemanage.database import get_db
from wemanage.exceptions import Forbidden, NotFound
from wemanage.models.enums import NotificationType
from wemanage.models.notification import Notification
from wemanage.models.project import Project
from wemanage.models.task import Task
from wemanage.models.user import User
from wemanage.schemas.auth import MessageResponse
from wemanage.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from wemanage.services.access import (
    PROJECT_ACCESS_DENIED,
    accessible_project_ids,
    ensure_project_access,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

# Columns that cannot be cleared by sending null
REQUIRED_TASK_FIELDS = {"title", "status", "priority"}


def get_task(db: Session, task_id: int, user: User) -> Task:
    """Get a task in a project the user has access to.

    Like projects, a missing task answers 403 to non-admins, so outsiders
    cannot tell which task ids exist.
    """
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        if not user.is_admin:
            raise Forbidden(PROJECT_ACCESS_DENIED)
        raise NotFound("Task not found")

    # Verify user has access to the project
    ensure_project_access(db, user, task.project_id)

    return task


def ensure_user_exists(db: Session, user_id: int) -> None:
    if not db.query(User.id).filter(User.id == user_id).first():
        raise NotFound("Assignee not found")


def notify_assignee(db: Session, user_id: int, message: str, type_: NotificationType) -> None:
    db.add(Notification(user_id=user_id, message=message, type=type_))


@router.get("", response_model=list[TaskResponse])
def get_tasks(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    project_id: int | None = Query(default=None, description="Only tasks of this project"),
):
    """Get tasks the current user can see."""
    query = db.query(Task)
    if project_id is not None:
        ensure_project_access(db, current_user, project_id)
        query = query.filter(Task.project_id == project_id)
    elif not current_user.is_admin:
        query = query.filter(Task.project_id.in_(accessible_project_ids(db, current_user)))
    return query.order_by(Task.created_at, Task.id).all()


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a task in a project."""
    ensure_project_access(db, current_user, task_data.project_id)
    if not db.query(Project.id).filter(Project.id == task_data.project_id).first():
        raise NotFound("Project not found")
    if task_data.assignee_id is not None:
        ensure_user_exists(db, task_data.assignee_id)

    task = Task(
        title=task_data.title,
        description=task_data.description,
        project_id=task_data.project_id,
        priority=task_data.priority,
        due_date=task_data.due_date,
        assignee_id=task_data.assignee_id,
        creator_id=current_user.id,
    )
    db.add(task)
    if task_data.assignee_id is not None:
        notify_assignee(
            db,
            task_data.assignee_id,
            f'You have been assigned a new task: "{task_data.title}"',
            NotificationType.TASK_ASSIGNMENT,
        )
    db.commit()
    db.refresh(task)
    return task


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a task."""
    task = get_task(db, task_id, current_user)

    update_data = task_data.model_dump(exclude_unset=True)
    new_assignee = update_data.get("assignee_id")
    if new_assignee is not None:
        ensure_user_exists(db, new_assignee)

    for field, value in update_data.items():
        if value is None and field in REQUIRED_TASK_FIELDS:
            continue
        setattr(task, field, value)

    if new_assignee is not None:
        notify_assignee(
            db,
            new_assignee,
            f'You\'ve been assigned an updated task: "{task.title}"',
            NotificationType.TASK_UPDATE,
        )

    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a task."""
    task = get_task(db, task_id, current_user)
    db.delete(task)
    db.commit()
    return MessageResponse(message="Task deleted")

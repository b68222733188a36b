"""Task report endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from wemanage.api.dependencies import get_current_user
from wemanage.database import get_db
from wemanage.models.enums import TaskStatus
from wemanage.models.task import Task
from wemanage.models.user import User
from wemanage.schemas.report import TaskReport
from wemanage.services.access import accessible_project_ids, ensure_project_access

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=TaskReport)
def get_task_report(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    project_id: int | None = Query(default=None, description="Limit to one project"),
):
    """Task counts by status over one project or every project the user can see."""
    query = db.query(Task.status, func.count(Task.id))
    if project_id is not None:
        ensure_project_access(db, current_user, project_id)
        query = query.filter(Task.project_id == project_id)
    elif not current_user.is_admin:
        query = query.filter(Task.project_id.in_(accessible_project_ids(db, current_user)))

    counts = dict(query.group_by(Task.status).all())
    to_do = counts.get(TaskStatus.TO_DO, 0)
    in_progress = counts.get(TaskStatus.IN_PROGRESS, 0)
    done = counts.get(TaskStatus.DONE, 0)
    total = to_do + in_progress + done

    return TaskReport(
        to_do=to_do,
        in_progress=in_progress,
        done=done,
        total=total,
        completion_rate=round(done / total * 100) if total else 0,
    )

"""Admin dashboard endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wemanage.api.dependencies import require_admin
from wemanage.database import get_db
from wemanage.models.project import Project
from wemanage.models.task import Task
from wemanage.models.user import User
from wemanage.schemas.report import AdminStats

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
def get_admin_stats(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Totals of users, projects and tasks."""
    return AdminStats(
        total_users=db.query(User).count(),
        total_projects=db.query(Project).count(),
        total_tasks=db.query(Task).count(),
    )

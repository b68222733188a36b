"""Project API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wemanage.api.dependencies import get_current_user
from wemanage.database import get_db
from wemanage.exceptions import Conflict, NotFound, ValidationError
from wemanage.models.project import Project
from wemanage.models.user import User
from wemanage.schemas.auth import MessageResponse
from wemanage.schemas.project import ProjectCreate, ProjectMemberAdd, ProjectResponse
from wemanage.services.access import accessible_project_ids, ensure_project_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


def get_user_project(db: Session, project_id: int, user: User) -> Project:
    """Get a project the user may access.

    Access is checked before the lookup, so a non-member gets 403 whether or
    not the project exists.
    """
    ensure_project_access(db, user, project_id)
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFound("Project not found")
    return project


@router.get("", response_model=list[ProjectResponse])
def get_projects(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all projects for an admin, or the current user's team projects."""
    query = db.query(Project)
    if not current_user.is_admin:
        query = query.filter(Project.id.in_(accessible_project_ids(db, current_user)))
    return query.order_by(Project.name).all()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a project. The creator joins the team; admins may also add a PMO."""
    name = project_data.name.strip()
    if not name:
        raise ValidationError("Project name is required")
    if db.query(Project).filter(Project.name == name).first():
        raise Conflict("Project with this name already exists")

    team = [current_user]
    if current_user.is_admin and project_data.pmo_id and project_data.pmo_id != current_user.id:
        pmo = db.query(User).filter(User.id == project_data.pmo_id).first()
        if not pmo:
            raise NotFound("PMO user not found")
        team.append(pmo)

    project = Project(
        name=name,
        description=project_data.description,
        start_date=project_data.start_date,
        end_date=project_data.end_date,
        team=team,
    )
    db.add(project)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Project with this name already exists") from None
    db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific project."""
    return get_user_project(db, project_id, current_user)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a project (admins, or members of its team)."""
    project = get_user_project(db, project_id, current_user)
    name = project.name
    db.delete(project)
    db.commit()
    logger.info(f"User {current_user.id} deleted project {project_id}")
    return MessageResponse(message=f'Project "{name}" deleted successfully.')


@router.post("/{project_id}/members", response_model=ProjectResponse)
def add_project_member(
    project_id: int,
    member: ProjectMemberAdd,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Add a user to the project's team."""
    project = get_user_project(db, project_id, current_user)
    user = db.query(User).filter(User.id == member.user_id).first()
    if not user:
        raise NotFound("User not found")
    if user not in project.team:
        project.team.append(user)
        db.commit()
        db.refresh(project)
    return project


@router.delete("/{project_id}/members/{user_id}", response_model=ProjectResponse)
def remove_project_member(
    project_id: int,
    user_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Remove a user from the project's team."""
    project = get_user_project(db, project_id, current_user)
    member = next((u for u in project.team if u.id == user_id), None)
    if member is None:
        raise NotFound("User is not on this project's team")
    project.team.remove(member)
    db.commit()
    db.refresh(project)
    return project

"""Role and team-membership checks."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from wemanage.exceptions import Forbidden, SelfTargetError
from wemanage.models.project import project_members
from wemanage.models.user import User

PROJECT_ACCESS_DENIED = "You do not have access to this project"


def has_project_access(db: Session, user: User, project_id: int) -> bool:
    """Whether ``user`` may see and change project ``project_id``.

    Administrators pass for every project id. Everyone else must be on the
    project's team. Membership is queried on every call; it can change between
    requests.
    """
    if user.is_admin:
        return True
    membership = db.execute(
        select(project_members.c.project_id).where(
            project_members.c.project_id == project_id,
            project_members.c.user_id == user.id,
        )
    ).first()
    return membership is not None


def ensure_project_access(db: Session, user: User, project_id: int) -> None:
    """Raise Forbidden unless ``user`` has access to the project."""
    if not has_project_access(db, user, project_id):
        raise Forbidden(PROJECT_ACCESS_DENIED)


def accessible_project_ids(db: Session, user: User):
    """Subquery of the project ids a standard user is a member of."""
    return select(project_members.c.project_id).where(project_members.c.user_id == user.id)


def ensure_not_self(actor: User, target_user_id: int, action: str) -> None:
    """Admins cannot run account-management actions against themselves.

    ``action`` reads as a verb phrase, e.g. "change their own role".
    """
    if actor.id == target_user_id:
        raise SelfTargetError(f"Admin cannot {action}.")

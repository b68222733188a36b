"""User administration endpoints (admin only)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wemanage.api.dependencies import require_admin
from wemanage.database import get_db
from wemanage.exceptions import NotFound
from wemanage.models.user import User
from wemanage.schemas.auth import MessageResponse, UserResponse
from wemanage.schemas.user import RoleUpdate
from wemanage.services.access import ensure_not_self

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def forbid_self_role_change(
    user_id: int,
    admin: Annotated[User, Depends(require_admin)],
) -> User:
    """Reject before the request body is even looked at."""
    ensure_not_self(admin, user_id, "change their own role")
    return admin


def forbid_self_delete(
    user_id: int,
    admin: Annotated[User, Depends(require_admin)],
) -> User:
    ensure_not_self(admin, user_id, "delete their own account")
    return admin


def get_target_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found.")
    return user


@router.get("", response_model=list[UserResponse])
def get_users(
    _admin: Annotated[User, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """List all users."""
    return db.query(User).order_by(User.name, User.id).all()


@router.put("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    role_update: RoleUpdate,
    admin: Annotated[User, Depends(forbid_self_role_change)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change another user's role."""
    user = get_target_user(db, user_id)
    user.role = role_update.role
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} set role of user {user.id} to {user.role.value}")
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: Annotated[User, Depends(forbid_self_delete)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete another user's account, with their comments and notifications."""
    user = get_target_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return MessageResponse(message="User deleted successfully.")

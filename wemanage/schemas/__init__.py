"""Pydantic schemas for API requests and responses."""

from wemanage.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from wemanage.schemas.comment import CommentCreate, CommentResponse
from wemanage.schemas.notification import NotificationResponse
from wemanage.schemas.project import ProjectCreate, ProjectMemberAdd, ProjectResponse
from wemanage.schemas.report import AdminStats, TaskReport
from wemanage.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from wemanage.schemas.user import RoleUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "MessageResponse",
    "RoleUpdate",
    "ProjectCreate",
    "ProjectMemberAdd",
    "ProjectResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "CommentCreate",
    "CommentResponse",
    "NotificationResponse",
    "TaskReport",
    "AdminStats",
]

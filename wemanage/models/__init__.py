"""SQLAlchemy models."""

from wemanage.models.comment import Comment
from wemanage.models.notification import Notification
from wemanage.models.project import Project, project_members
from wemanage.models.task import Task
from wemanage.models.user import User

__all__ = [
    "User",
    "Project",
    "project_members",
    "Task",
    "Comment",
    "Notification",
]

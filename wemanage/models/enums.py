"""Enums for model fields."""

from enum import Enum


class UserRole(str, Enum):
    """Account role. Exactly two values exist."""

    USER = "USER"
    ADMIN = "ADMIN"


class TaskStatus(str, Enum):
    """Workflow state of a task."""

    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(str, Enum):
    """Task priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class NotificationType(str, Enum):
    """Why a notification was raised."""

    TASK_ASSIGNMENT = "TASK_ASSIGNMENT"
    TASK_UPDATE = "TASK_UPDATE"

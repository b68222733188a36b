"""Report schemas."""

from pydantic import BaseModel


class TaskReport(BaseModel):
    """Task counts by status."""

    to_do: int
    in_progress: int
    done: int
    total: int
    completion_rate: int  # percent, rounded


class AdminStats(BaseModel):
    total_users: int
    total_projects: int
    total_tasks: int

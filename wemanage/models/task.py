"""Task model."""

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from wemanage.database import Base
from wemanage.models.enums import TaskPriority, TaskStatus
from wemanage.models.mixins import TimestampMixin


class Task(Base, TimestampMixin):
    """Unit of work inside a project."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(String, nullable=True)
    status = Column(Enum(TaskStatus, name="taskstatus"), nullable=False, default=TaskStatus.TO_DO)
    priority = Column(
        Enum(TaskPriority, name="taskpriority"), nullable=False, default=TaskPriority.MEDIUM
    )
    due_date = Column(DateTime(timezone=True), nullable=True, index=True)
    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assignee_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", back_populates="assigned_tasks", foreign_keys=[assignee_id])
    creator = relationship("User", back_populates="created_tasks", foreign_keys=[creator_id])
    comments = relationship("Comment", back_populates="task", cascade="all, delete-orphan")

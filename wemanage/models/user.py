"""User model."""

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from wemanage.database import Base
from wemanage.models.enums import UserRole
from wemanage.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User account for local and federated (Google) login."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_users_provider_identity"),
        CheckConstraint(
            "password_hash IS NOT NULL OR provider IS NOT NULL",
            name="ck_users_has_credential",
        ),
        CheckConstraint(
            "(password_reset_token IS NULL) = (password_reset_expires IS NULL)",
            name="ck_users_reset_token_pair",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=True)  # NULL for Google-only accounts
    provider = Column(String(50), nullable=True)
    provider_id = Column(String(255), nullable=True)
    role = Column(Enum(UserRole, name="userrole"), nullable=False, default=UserRole.USER)
    avatar_url = Column(String(1024), nullable=True)
    # sha256 hex of the emailed reset token, never the token itself
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    projects = relationship("Project", secondary="project_members", back_populates="team")
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )
    assigned_tasks = relationship(
        "Task", back_populates="assignee", foreign_keys="Task.assignee_id"
    )
    created_tasks = relationship("Task", back_populates="creator", foreign_keys="Task.creator_id")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

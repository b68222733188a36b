"""Notification model."""

from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from wemanage.database import Base
from wemanage.models.enums import NotificationType
from wemanage.models.mixins import TimestampMixin


class Notification(Base, TimestampMixin):
    """In-app notification for a single user."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(String(1000), nullable=False)
    type = Column(Enum(NotificationType, name="notificationtype"), nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="notifications")

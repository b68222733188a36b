"""Project schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from wemanage.models.enums import UserRole


class ProjectCreate(BaseModel):
    """Create a new project."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    start_date: date | None = None
    end_date: date | None = None
    pmo_id: int | None = None  # honoured for admins only


class TeamMember(BaseModel):
    """Team member as shown on a project."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    avatar_url: str | None
    role: UserRole


class ProjectResponse(BaseModel):
    """Project response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    start_date: date | None
    end_date: date | None
    progress: float | None
    created_at: datetime
    updated_at: datetime
    team: list[TeamMember] = []


class ProjectMemberAdd(BaseModel):
    """Add a user to a project's team."""

    user_id: int

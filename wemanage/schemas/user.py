"""User administration schemas."""

from pydantic import BaseModel

from wemanage.models.enums import UserRole


class RoleUpdate(BaseModel):
    """Change a user's role."""

    role: UserRole

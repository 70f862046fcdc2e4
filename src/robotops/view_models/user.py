from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import field_validator

from robotops.models.enums.user_role import UserRole
from robotops.view_models.base.base import BaseModel


def _normalize_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None

    try:
        normalized_email = validate_email(v, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(str(exc))

    return normalized_email.normalized


class UserBase(BaseModel):
    """Base class for user view models."""

    email: str
    username: str
    name: Optional[str] = None


class UserCreate(UserBase):
    """View model for registering a user record. Credentials are handled by the authentication service."""

    @field_validator("email")
    def validate_email_syntax(cls, v: str) -> str:
        normalized = _normalize_email(v)
        if normalized is None:
            raise ValueError("An email address is required.")
        return normalized


class UserModify(BaseModel):
    """View model for updating a user profile. Only the fields that are set are changed."""

    email: Optional[str] = None
    username: Optional[str] = None
    name: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("email")
    def validate_email_syntax(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class SavedUser(UserBase):
    """Base class for user view models representing saved records."""

    id: int

    class Config:
        from_attributes = True


class UserStats(BaseModel):
    personal_assets_count: int
    group_assets_count: int
    assigned_assets_count: int
    groups_count: int
    owned_groups_count: int

from datetime import datetime
from typing import Sequence

from pydantic import Field

from robotops.models.enums.group_role import GroupRole
from robotops.view_models.base.base import BaseModel
from robotops.view_models.user import SavedUser


class GroupBase(BaseModel):
    name: str


class GroupCreate(GroupBase):
    pass


class SavedGroupMembership(BaseModel):
    id: int
    user: SavedUser
    role: GroupRole
    created_at: datetime

    class Config:
        from_attributes = True


class SavedGroup(GroupBase):
    id: int
    owner: SavedUser
    members: Sequence[SavedGroupMembership] = Field(validation_alias="memberships")
    created_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True

from datetime import datetime
from typing import Optional

from pydantic import Field

from robotops.models.enums.permission_level import PermissionLevel
from robotops.view_models.base.base import BaseModel


class AssetBase(BaseModel):
    name: str
    model: Optional[str] = None


class AssetCreate(AssetBase):
    serial_number: str = Field(min_length=1, max_length=64)


class AssetModify(BaseModel):
    # all fields should be optional, because the client should specify only the fields they want to update
    name: Optional[str] = None
    model: Optional[str] = None


# Properties shared by models stored in DB
class SavedAsset(AssetBase):
    serial_number: str
    owner_type: str
    owner_user_id: Optional[int] = None
    owner_group_id: Optional[int] = None
    assigned_user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccessibleAsset(SavedAsset):
    """An asset together with the permission level the requesting user currently holds on it."""

    permission: PermissionLevel

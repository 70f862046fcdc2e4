from datetime import datetime
from typing import Optional

from robotops.models.enums.permission_level import PermissionLevel
from robotops.view_models.base.base import BaseModel


class SavedAssetPermission(BaseModel):
    id: int
    asset_serial_number: str
    user_id: int
    level: PermissionLevel
    granted_by_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

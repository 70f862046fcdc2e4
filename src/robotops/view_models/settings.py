from datetime import datetime
from typing import Any

from robotops.view_models.asset import AccessibleAsset
from robotops.view_models.base.base import BaseModel


class AssetSettingsEntry(BaseModel):
    """One of the requesting user's stored settings objects, with the asset it configures."""

    asset: AccessibleAsset
    settings: dict[str, Any]
    updated_at: datetime

"""
ORM models for RobotOps. Importing this package registers every mapped class so relationship names resolve.
"""

from .asset import Asset
from .asset_permission import AssetPermission
from .asset_settings import AssetSettings
from .group import Group
from .group_membership import GroupMembership
from .user import User

__all__ = [
    "Asset",
    "AssetPermission",
    "AssetSettings",
    "Group",
    "GroupMembership",
    "User",
]

"""
Enums used by RobotOps models.
"""

from .group_role import GroupRole
from .permission_level import PermissionLevel
from .user_role import UserRole

__all__ = [
    "GroupRole",
    "PermissionLevel",
    "UserRole",
]

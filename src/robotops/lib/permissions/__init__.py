"""
Permission system for RobotOps entities.

This module decides what a user may do with assets, groups and user profiles. Asset
decisions are built on the access resolver, which reconciles every independent source of
access (ownership, group ownership, group membership, assignment and explicit grants) by
taking the highest level any of them yields.

Main Functions:
    resolve_permission_level: Compute a user's effective level on an asset
    accessible_serial_numbers: Enumerate every asset a user can currently access
    has_permission: Check if a user has permission for an action on an entity
    assert_permission: Assert permission or raise exception

Usage:
    >>> from robotops.lib.permissions import Action, has_permission, assert_permission
    >>>
    >>> # Check permission and handle response
    >>> result = has_permission(db, user, asset, Action.READ)
    >>> if result.permitted:
    ...     # User has access
    ...     pass
    >>>
    >>> # Assert permission (raises ForbiddenError if denied)
    >>> assert_permission(db, user, asset, Action.UPDATE)
"""

from .actions import Action
from .core import assert_permission, has_permission
from .resolver import resolve_permission_level, resolve_permission_levels
from .visibility import accessible_serial_numbers

__all__ = [
    "Action",
    "accessible_serial_numbers",
    "assert_permission",
    "has_permission",
    "resolve_permission_level",
    "resolve_permission_levels",
]

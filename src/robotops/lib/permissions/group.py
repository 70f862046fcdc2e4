from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from robotops.lib.logging.context import save_to_logging_context
from robotops.lib.permissions.actions import Action
from robotops.lib.permissions.models import PermissionResponse
from robotops.lib.permissions.utils import deny_action_for_entity, unsupported_action
from robotops.models.enums.group_role import GroupRole
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User


def _membership_role(db: Session, group_id: int, user_id: int) -> Optional[GroupRole]:
    return db.scalar(
        select(GroupMembership.role).where(GroupMembership.group_id == group_id, GroupMembership.user_id == user_id)
    )


def has_permission(db: Session, user: User, entity: Group, action: Action) -> PermissionResponse:
    """
    Check if a user has permission to perform an action on a Group entity.

    Owners may do anything with their group. Admin members may manage its roster and add assets to it.
    Plain members may only view it. Deleting a group is reserved to its owner.

    Raises:
        NotImplementedError: If the action is not supported for Group entities.
    """
    user_is_owner = entity.owner_id == user.id
    membership_role = _membership_role(db, entity.id, user.id)

    save_to_logging_context(
        {
            "user_is_owner": user_is_owner,
            "group_role": membership_role.value if membership_role else None,
        }
    )

    handlers = {
        Action.READ: _handle_read_action,
        Action.UPDATE: _handle_manage_action,
        Action.ADD_MEMBER: _handle_manage_action,
        Action.REMOVE_MEMBER: _handle_manage_action,
        Action.ADD_ASSET: _handle_manage_action,
        Action.DELETE: _handle_delete_action,
    }

    if action not in handlers:
        raise unsupported_action("group", action, handlers)

    return handlers[action](entity, user_is_owner, membership_role, action)


def _handle_read_action(
    entity: Group, user_is_owner: bool, membership_role: Optional[GroupRole], action: Action
) -> PermissionResponse:
    if user_is_owner or membership_role is not None:
        return PermissionResponse(True)

    return deny_action_for_entity("group", entity.id, action)


def _handle_manage_action(
    entity: Group, user_is_owner: bool, membership_role: Optional[GroupRole], action: Action
) -> PermissionResponse:
    if user_is_owner or membership_role == GroupRole.admin:
        return PermissionResponse(True)

    return deny_action_for_entity("group", entity.id, action)


def _handle_delete_action(
    entity: Group, user_is_owner: bool, membership_role: Optional[GroupRole], action: Action
) -> PermissionResponse:
    if user_is_owner:
        return PermissionResponse(True)

    return deny_action_for_entity("group", entity.id, action)

from sqlalchemy.orm import Session

from robotops.lib.logging.context import save_to_logging_context
from robotops.lib.permissions.actions import Action
from robotops.lib.permissions.models import PermissionResponse
from robotops.lib.permissions.utils import deny_action_for_entity, unsupported_action
from robotops.models.user import User


def has_permission(db: Session, user: User, entity: User, action: Action) -> PermissionResponse:
    """
    Check if a user has permission to perform an action on a User entity.

    Any user may view a profile. Users may update their own profile, and elevated users (administrators
    and staff) may update anyone's. Only elevated users may change a role.
    """
    user_is_self = entity.id == user.id

    save_to_logging_context({"user_is_self": user_is_self, "target_user_id": entity.id})

    handlers = {
        Action.READ: _handle_read_action,
        Action.UPDATE: _handle_update_action,
        Action.CHANGE_ROLE: _handle_change_role_action,
    }

    if action not in handlers:
        raise unsupported_action("user profile", action, handlers)

    return handlers[action](user, entity, user_is_self, action)


def _handle_read_action(user: User, entity: User, user_is_self: bool, action: Action) -> PermissionResponse:
    return PermissionResponse(True)


def _handle_update_action(user: User, entity: User, user_is_self: bool, action: Action) -> PermissionResponse:
    if user_is_self or user.is_elevated:
        return PermissionResponse(True)

    return deny_action_for_entity("user profile", entity.id, action)


def _handle_change_role_action(user: User, entity: User, user_is_self: bool, action: Action) -> PermissionResponse:
    if user.is_elevated:
        return PermissionResponse(True)

    return deny_action_for_entity("user profile", entity.id, action)

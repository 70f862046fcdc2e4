from sqlalchemy.orm import Session

from robotops.lib.logging.context import save_to_logging_context
from robotops.lib.permissions.actions import Action
from robotops.lib.permissions.models import PermissionResponse
from robotops.lib.permissions.resolver import AccessFacts, access_facts
from robotops.lib.permissions.utils import deny_action_for_entity, unsupported_action
from robotops.models.asset import Asset
from robotops.models.enums.permission_level import PermissionLevel
from robotops.models.user import User


def has_permission(db: Session, user: User, entity: Asset, action: Action) -> PermissionResponse:
    """
    Check if a user has permission to perform an action on an Asset entity.

    Decisions are made from the user's resolved permission level on the asset, except for deletion,
    which is reserved to users whose admin rights derive from ownership. An explicit ``admin`` grant
    lets a user administer an asset but never remove it.

    Args:
        db: An active database session.
        user: The acting user.
        entity: The Asset entity to check permissions for.
        action: The action to be performed (READ, UPDATE, DELETE, ASSIGN, SET_PERMISSION, MANAGE_SETTINGS).

    Returns:
        PermissionResponse: Contains the permission result and a message when denied.

    Raises:
        NotFoundError: If the asset no longer exists.
        NotImplementedError: If the action is not supported for Asset entities.
    """
    facts = access_facts(db, user, entity.serial_number)

    save_to_logging_context(
        {
            "resource_owner_type": entity.owner_type,
            "user_is_owner": facts.is_direct_owner,
            "user_holds_ownership_authority": facts.holds_ownership_authority,
            "resolved_permission_level": facts.level.value,
        }
    )

    handlers = {
        Action.READ: _handle_usage_action,
        Action.MANAGE_SETTINGS: _handle_usage_action,
        Action.UPDATE: _handle_admin_action,
        Action.ASSIGN: _handle_admin_action,
        Action.SET_PERMISSION: _handle_admin_action,
        Action.DELETE: _handle_delete_action,
    }

    if action not in handlers:
        raise unsupported_action("asset", action, handlers)

    return handlers[action](entity, facts, action)


def _handle_usage_action(entity: Asset, facts: AccessFacts, action: Action) -> PermissionResponse:
    # Any resolved level other than none is enough to read an asset or keep personal settings for it.
    if facts.level.at_least(PermissionLevel.usage):
        return PermissionResponse(True)

    return deny_action_for_entity("asset", entity.serial_number, action)


def _handle_admin_action(entity: Asset, facts: AccessFacts, action: Action) -> PermissionResponse:
    if facts.level.at_least(PermissionLevel.admin):
        return PermissionResponse(True)

    return deny_action_for_entity("asset", entity.serial_number, action)


def _handle_delete_action(entity: Asset, facts: AccessFacts, action: Action) -> PermissionResponse:
    if facts.holds_ownership_authority:
        return PermissionResponse(True)

    return deny_action_for_entity("asset", entity.serial_number, action)

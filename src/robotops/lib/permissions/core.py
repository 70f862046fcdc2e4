from typing import Any, Callable, Union

from sqlalchemy.orm import Session

from robotops.lib.exceptions import ForbiddenError
from robotops.lib.logging.context import save_to_logging_context
from robotops.lib.permissions.actions import Action
from robotops.lib.permissions.models import PermissionResponse
from robotops.models.asset import Asset
from robotops.models.group import Group
from robotops.models.user import User

# Import entity-specific permission modules
from . import asset, group, user

EntityType = Union[Asset, Group, User]


def has_permission(db: Session, acting_user: User, entity: EntityType, action: Action) -> PermissionResponse:
    """
    Main dispatcher function for permission checks across all entity types.

    This function routes permission checks to the appropriate entity-specific module based on the type
    of the entity provided. Each entity type has its own permission logic and supported actions.

    Args:
        db: An active database session. Asset and group decisions read current state through it.
        acting_user: The user attempting the action.
        entity: The entity to check permissions for. Must be one of the supported types.
        action: The action to be performed on the entity.

    Returns:
        PermissionResponse: Contains the permission result and a message when denied.

    Raises:
        NotImplementedError: If the entity type is not supported.
    """
    entity_handlers: dict[type, Callable[[Session, User, Any, Action], PermissionResponse]] = {
        Asset: asset.has_permission,
        Group: group.has_permission,
        User: user.has_permission,
    }

    entity_type = type(entity)

    if entity_type not in entity_handlers:
        supported_types = ", ".join(cls.__name__ for cls in entity_handlers.keys())
        raise NotImplementedError(
            f"Permission checks are not implemented for entity type '{entity_type.__name__}'. "
            f"Supported entity types: {supported_types}"
        )

    handler = entity_handlers[entity_type]
    return handler(db, acting_user, entity, action)


def assert_permission(db: Session, acting_user: User, entity: EntityType, action: Action) -> PermissionResponse:
    """
    Assert that a user has permission to perform an action on an entity.

    Raises:
        ForbiddenError: If the user lacks sufficient permissions.
    """
    save_to_logging_context({"permission_boundary": action.name})
    permission = has_permission(db, acting_user, entity, action)

    if not permission.permitted:
        message = permission.message if permission.message is not None else "Permission denied"
        raise ForbiddenError(message)

    return permission

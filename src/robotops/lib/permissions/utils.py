import logging

from robotops.lib.logging.context import logging_context
from robotops.lib.permissions.actions import Action
from robotops.lib.permissions.models import PermissionResponse

logger = logging.getLogger(__name__)


def deny_action_for_entity(entity_name: str, identifier: object, action: Action) -> PermissionResponse:
    logger.debug(msg=f"Denying {action.value} access to {entity_name}.", extra=logging_context())
    return PermissionResponse(False, f"insufficient permissions to {action.value} {entity_name} '{identifier}'")


def unsupported_action(entity_name: str, action: Action, handlers: dict) -> NotImplementedError:
    supported_actions = ", ".join(a.value for a in handlers.keys())
    return NotImplementedError(
        f"Action '{action.value}' is not supported for {entity_name} entities. "
        f"Supported actions: {supported_actions}"
    )

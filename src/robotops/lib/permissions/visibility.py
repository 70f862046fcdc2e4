import logging

from sqlalchemy import CompoundSelect, or_, select, union
from sqlalchemy.orm import Session

from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.models.asset import Asset
from robotops.models.asset_permission import AssetPermission
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User

logger = logging.getLogger(__name__)


def accessible_assets_query(user: User) -> CompoundSelect:
    """
    Build the union of every indexed set of assets through which *user* can have access.

    The union covers assets owned by the user, assets owned by a group the user belongs to or owns,
    assets assigned to the user, and assets on which the user holds an explicit permission. Each of these
    sets corresponds to a resolver source which yields at least ``usage``, so membership in the union is
    equivalent to resolving to a level other than ``none``.
    """
    user_id = user.id

    member_group_ids = select(GroupMembership.group_id).where(GroupMembership.user_id == user_id)
    owned_group_ids = select(Group.id).where(Group.owner_id == user_id)

    return union(
        select(Asset.serial_number).where(Asset.owner_user_id == user_id),
        select(Asset.serial_number).where(
            or_(Asset.owner_group_id.in_(member_group_ids), Asset.owner_group_id.in_(owned_group_ids))
        ),
        select(Asset.serial_number).where(Asset.assigned_user_id == user_id),
        select(AssetPermission.asset_serial_number).where(AssetPermission.user_id == user_id),
    )


def accessible_serial_numbers(db: Session, user: User) -> set[str]:
    """
    Return the serial numbers of every asset on which *user* currently holds any permission level.
    """
    serial_numbers = set(db.scalars(accessible_assets_query(user)).all())

    save_to_logging_context({"accessible_asset_count": len(serial_numbers)})
    logger.debug(msg="Enumerated accessible assets.", extra=logging_context())

    return serial_numbers

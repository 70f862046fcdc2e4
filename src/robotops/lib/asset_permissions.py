import logging
from datetime import datetime
from typing import Sequence, Union

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from robotops.db.transaction import atomic
from robotops.db.upsert import upsert
from robotops.lib.assets import fetch_asset_by_serial_number
from robotops.lib.exceptions import InvalidOperationError, NotFoundError
from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.lib.permissions import Action, assert_permission
from robotops.lib.users import fetch_user_by_id
from robotops.models.asset_permission import AssetPermission
from robotops.models.enums.permission_level import PermissionLevel
from robotops.models.user import User

logger = logging.getLogger(__name__)


def _fetch_permission(db: Session, serial_number: str, user_id: int) -> AssetPermission:
    permission = db.scalars(
        select(AssetPermission)
        .where(AssetPermission.asset_serial_number == serial_number, AssetPermission.user_id == user_id)
        .execution_options(populate_existing=True)
    ).one_or_none()

    if permission is None:
        logger.info(msg="The requested explicit permission does not exist.", extra=logging_context())
        raise NotFoundError(f"User with ID {user_id} holds no explicit permission on asset '{serial_number}'")

    return permission


def grant_permission(
    db: Session,
    acting_user: User,
    serial_number: str,
    target_user_id: int,
    level: Union[PermissionLevel, str],
) -> AssetPermission:
    """
    Grant *target_user_id* an explicit permission level on an asset.

    A second grant to the same user replaces the level and the granter of the first one.

    :raises NotFoundError: If the asset or the target user does not exist
    :raises ForbiddenError: If the acting user does not hold admin on the asset
    :raises InvalidOperationError: If the level is not grantable, or the target directly owns the asset
    """
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, acting_user, asset, Action.SET_PERMISSION)

    target_user = fetch_user_by_id(db, target_user_id)

    try:
        level = PermissionLevel(level)
    except ValueError:
        raise InvalidOperationError(f"'{level}' is not a valid permission level")

    save_to_logging_context({"requested_permission_level": level.value})

    if level == PermissionLevel.none:
        logger.info(msg="Refusing to store an empty permission grant.", extra=logging_context())
        raise InvalidOperationError("Only usage or admin permissions can be granted; revoke the permission instead")

    if asset.owner_user_id == target_user.id:
        logger.info(msg="Refusing to grant a permission to the asset's owner.", extra=logging_context())
        raise InvalidOperationError("The owner of an asset already holds full permissions on it")

    with atomic(db):
        upsert(
            db,
            AssetPermission,
            {
                "asset_serial_number": asset.serial_number,
                "user_id": target_user.id,
                "level": level,
                "granted_by_id": acting_user.id,
                "created_at": datetime.now(),
            },
            conflict_columns=("asset_serial_number", "user_id"),
            update_columns=("level", "granted_by_id"),
        )

    logger.info(msg="Granted asset permission.", extra=logging_context())
    return _fetch_permission(db, asset.serial_number, target_user.id)


def revoke_permission(db: Session, acting_user: User, serial_number: str, target_user_id: int) -> None:
    """
    Remove the explicit permission *target_user_id* holds on an asset.

    Only explicit grants can be revoked. Access derived from ownership, membership or assignment is
    untouched, and revoking from a user who only holds such access raises NotFoundError.
    """
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, acting_user, asset, Action.SET_PERMISSION)
    save_to_logging_context({"requested_user": target_user_id})

    if asset.owner_user_id == target_user_id:
        logger.info(msg="Refusing to revoke the permissions of the asset's owner.", extra=logging_context())
        raise InvalidOperationError("The owner's permissions on an asset cannot be revoked")

    permission = _fetch_permission(db, asset.serial_number, target_user_id)

    with atomic(db):
        db.execute(delete(AssetPermission).where(AssetPermission.id == permission.id))

    db.expire_all()
    logger.info(msg="Revoked asset permission.", extra=logging_context())


def list_asset_permissions(db: Session, user: User, serial_number: str) -> Sequence[AssetPermission]:
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, user, asset, Action.READ)

    return db.scalars(
        select(AssetPermission)
        .where(AssetPermission.asset_serial_number == asset.serial_number)
        .order_by(AssetPermission.created_at, AssetPermission.id)
    ).all()

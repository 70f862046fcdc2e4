import logging
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from robotops.db.transaction import atomic
from robotops.lib.exceptions import ConflictError, InvalidOperationError, NotFoundError
from robotops.lib.groups import fetch_group_by_id
from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.lib.permissions import Action, assert_permission, resolve_permission_levels
from robotops.lib.permissions.visibility import accessible_assets_query
from robotops.models.asset import Asset
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User
from robotops.view_models import asset as asset_view_models

logger = logging.getLogger(__name__)


def fetch_asset_by_serial_number(db: Session, serial_number: str) -> Asset:
    save_to_logging_context({"requested_resource": serial_number})
    asset = db.scalars(
        select(Asset).where(Asset.serial_number == serial_number).execution_options(populate_existing=True)
    ).one_or_none()

    if asset is None:
        logger.info(msg="The requested asset does not exist.", extra=logging_context())
        raise NotFoundError(f"Asset with serial number '{serial_number}' not found")

    return asset


def _assert_serial_number_available(db: Session, serial_number: str) -> None:
    # Serial numbers are unique across personal and group assets alike.
    if db.scalar(select(Asset.serial_number).where(Asset.serial_number == serial_number)) is not None:
        logger.info(msg="An asset with the requested serial number already exists.", extra=logging_context())
        raise ConflictError(f"An asset with serial number '{serial_number}' already exists")


def annotate_assets(db: Session, user: User, assets: Iterable[Asset]) -> list[asset_view_models.AccessibleAsset]:
    assets = list(assets)
    levels = resolve_permission_levels(db, user, [asset.serial_number for asset in assets])

    return [
        asset_view_models.AccessibleAsset(
            **asset_view_models.SavedAsset.model_validate(asset).model_dump(),
            permission=levels[asset.serial_number],
        )
        for asset in assets
    ]


def create_user_asset(db: Session, acting_user: User, asset_create: asset_view_models.AssetCreate) -> Asset:
    """
    Register a personal asset owned by the acting user.

    :raises ConflictError: If any asset already has the requested serial number
    """
    save_to_logging_context({"requested_resource": asset_create.serial_number})
    _assert_serial_number_available(db, asset_create.serial_number)

    asset = Asset(
        serial_number=asset_create.serial_number,
        name=asset_create.name,
        model=asset_create.model,
        owner_user_id=acting_user.id,
    )
    with atomic(db):
        db.add(asset)

    db.refresh(asset)
    logger.info(msg="Created personal asset.", extra=logging_context())
    return asset


def create_group_asset(
    db: Session, acting_user: User, group_id: int, asset_create: asset_view_models.AssetCreate
) -> Asset:
    """
    Register an asset owned by a group. The acting user must own the group or be one of its admins.

    :raises NotFoundError: If the group does not exist
    :raises ForbiddenError: If the acting user lacks group admin authority
    :raises ConflictError: If any asset already has the requested serial number
    """
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, acting_user, group, Action.ADD_ASSET)

    save_to_logging_context({"requested_resource": asset_create.serial_number})
    _assert_serial_number_available(db, asset_create.serial_number)

    asset = Asset(
        serial_number=asset_create.serial_number,
        name=asset_create.name,
        model=asset_create.model,
        owner_group_id=group.id,
    )
    with atomic(db):
        db.add(asset)

    db.refresh(asset)
    logger.info(msg="Created group asset.", extra=logging_context())
    return asset


def update_asset(
    db: Session, acting_user: User, serial_number: str, asset_update: asset_view_models.AssetModify
) -> Asset:
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, acting_user, asset, Action.UPDATE)

    updates = asset_update.model_dump(exclude_unset=True)
    if "name" in updates and updates["name"] is None:
        raise InvalidOperationError("An asset's name cannot be removed")

    with atomic(db):
        for field, value in updates.items():
            setattr(asset, field, value)

    db.refresh(asset)
    logger.info(msg="Updated asset.", extra=logging_context())
    return asset


def delete_asset(db: Session, acting_user: User, serial_number: str) -> None:
    """
    Delete an asset together with its permissions and settings.

    Only users whose admin rights derive from ownership (the direct owner, the owning group's owner or
    one of its admins) may delete an asset. An explicit admin grant is not enough.
    """
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, acting_user, asset, Action.DELETE)

    with atomic(db):
        db.delete(asset)

    logger.info(msg="Deleted asset.", extra=logging_context())


def assign_asset(db: Session, acting_user: User, serial_number: str, target_user_id: Optional[int]) -> Asset:
    """
    Assign a group asset to one of the group's members, or clear its assignment when *target_user_id* is None.

    :raises NotFoundError: If the asset does not exist
    :raises ForbiddenError: If the acting user does not hold admin on the asset
    :raises InvalidOperationError: If the asset is personally owned, or the target is not a current member
        of the owning group
    """
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, acting_user, asset, Action.ASSIGN)
    save_to_logging_context({"requested_assignee": target_user_id})

    if asset.owner_group_id is None:
        logger.info(msg="Personal assets cannot be assigned.", extra=logging_context())
        raise InvalidOperationError("Only group assets can be assigned")

    if target_user_id is not None:
        is_member = db.scalar(
            select(GroupMembership.id).where(
                GroupMembership.group_id == asset.owner_group_id, GroupMembership.user_id == target_user_id
            )
        )
        if is_member is None:
            logger.info(msg="The requested assignee is not a member of the owning group.", extra=logging_context())
            raise InvalidOperationError(
                f"User with ID {target_user_id} is not a member of the group which owns this asset"
            )

    with atomic(db):
        asset.assigned_user_id = target_user_id

    db.refresh(asset)
    logger.info(msg="Updated asset assignment.", extra=logging_context())
    return asset


def fetch_asset(db: Session, user: User, serial_number: str) -> Asset:
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, user, asset, Action.READ)
    return asset


def list_accessible_assets(db: Session, user: User) -> list[asset_view_models.AccessibleAsset]:
    """
    List every asset *user* can currently access, newest first, each with the user's permission level.
    """
    accessible = accessible_assets_query(user).subquery()
    assets = db.scalars(
        select(Asset)
        .where(Asset.serial_number.in_(select(accessible.c.serial_number)))
        .order_by(Asset.created_at.desc(), Asset.serial_number)
    ).all()

    return annotate_assets(db, user, assets)


def list_group_assets(db: Session, user: User, group_id: int) -> list[asset_view_models.AccessibleAsset]:
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, user, group, Action.READ)

    assets = db.scalars(
        select(Asset).where(Asset.owner_group_id == group.id).order_by(Asset.created_at.desc(), Asset.serial_number)
    ).all()

    return annotate_assets(db, user, assets)

"""
Per-user settings objects for assets.

A user may keep one JSON object per asset they can access. Reading settings that were never saved returns
an empty object without writing anything; the row is created by the first save and replaced whole by every
later one.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from robotops.db.transaction import atomic
from robotops.db.upsert import upsert
from robotops.lib.assets import annotate_assets, fetch_asset_by_serial_number
from robotops.lib.exceptions import InvalidOperationError
from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.lib.permissions import Action, assert_permission
from robotops.lib.permissions.visibility import accessible_assets_query
from robotops.models.asset_settings import AssetSettings
from robotops.models.user import User
from robotops.view_models import settings as settings_view_models

logger = logging.getLogger(__name__)


def get_settings(db: Session, user: User, serial_number: str) -> dict[str, Any]:
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, user, asset, Action.MANAGE_SETTINGS)

    settings = db.scalar(
        select(AssetSettings.settings).where(
            AssetSettings.asset_serial_number == asset.serial_number, AssetSettings.user_id == user.id
        )
    )
    if settings is None:
        logger.debug(msg="No settings have been saved for this asset.", extra=logging_context())
        return {}

    return settings


def save_settings(db: Session, user: User, serial_number: str, settings: Any) -> dict[str, Any]:
    """
    Replace the settings object *user* keeps for an asset.

    :raises NotFoundError: If the asset does not exist
    :raises ForbiddenError: If the user cannot access the asset
    :raises InvalidOperationError: If *settings* is not a JSON object
    """
    asset = fetch_asset_by_serial_number(db, serial_number)
    assert_permission(db, user, asset, Action.MANAGE_SETTINGS)

    if not isinstance(settings, dict):
        save_to_logging_context({"settings_type": type(settings).__name__})
        logger.info(msg="Refusing to save settings which are not a JSON object.", extra=logging_context())
        raise InvalidOperationError("Settings must be a JSON object")

    now = datetime.now()
    with atomic(db):
        upsert(
            db,
            AssetSettings,
            {
                "asset_serial_number": asset.serial_number,
                "user_id": user.id,
                "settings": settings,
                "updated_at": now,
            },
            conflict_columns=("asset_serial_number", "user_id"),
            update_columns=("settings", "updated_at"),
        )

    logger.info(msg="Saved asset settings.", extra=logging_context())
    return settings


def list_my_settings(db: Session, user: User) -> list[settings_view_models.AssetSettingsEntry]:
    """
    List the settings *user* has saved for assets they can still access, most recently updated first.
    """
    accessible = accessible_assets_query(user).subquery()
    rows = db.scalars(
        select(AssetSettings)
        .options(selectinload(AssetSettings.asset))
        .where(
            AssetSettings.user_id == user.id,
            AssetSettings.asset_serial_number.in_(select(accessible.c.serial_number)),
        )
        .order_by(AssetSettings.updated_at.desc(), AssetSettings.id.desc())
    ).all()

    annotated_assets = annotate_assets(db, user, [row.asset for row in rows])

    return [
        settings_view_models.AssetSettingsEntry(asset=asset, settings=row.settings, updated_at=row.updated_at)
        for row, asset in zip(rows, annotated_assets)
    ]

from sqlalchemy import func, select

from robotops.lib.assets import create_group_asset, create_user_asset
from robotops.lib.groups import create_group, upsert_membership
from robotops.models.enums.group_role import GroupRole
from robotops.view_models.asset import AssetCreate
from robotops.view_models.group import GroupCreate
from tests.helpers.constants import TEST_GROUP, TEST_GROUP_ASSET, TEST_PERSONAL_ASSET


def create_test_group(db, owner, members=(), admins=()):
    """Create a group owned by *owner* and add the given users as plain members or admins."""
    group = create_group(db, owner, GroupCreate(**TEST_GROUP))
    for member in members:
        upsert_membership(db, owner, group.id, member.id, GroupRole.member)
    for admin in admins:
        upsert_membership(db, owner, group.id, admin.id, GroupRole.admin)
    return group


def create_test_group_asset(db, acting_user, group, **overrides):
    return create_group_asset(db, acting_user, group.id, AssetCreate(**{**TEST_GROUP_ASSET, **overrides}))


def create_test_personal_asset(db, owner, **overrides):
    return create_user_asset(db, owner, AssetCreate(**{**TEST_PERSONAL_ASSET, **overrides}))


def count_rows(db, model):
    return db.scalar(select(func.count()).select_from(model))

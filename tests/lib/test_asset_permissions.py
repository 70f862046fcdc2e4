import pytest

from robotops.lib.asset_permissions import grant_permission, list_asset_permissions, revoke_permission
from robotops.lib.assets import assign_asset
from robotops.lib.exceptions import ForbiddenError, InvalidOperationError, NotFoundError
from robotops.lib.groups import upsert_membership
from robotops.lib.permissions import resolve_permission_level
from robotops.models.asset_permission import AssetPermission
from robotops.models.enums.group_role import GroupRole
from robotops.models.enums.permission_level import PermissionLevel
from robotops.view_models.asset_permission import SavedAssetPermission
from tests.helpers.util import count_rows, create_test_group, create_test_group_asset, create_test_personal_asset


def test_shared_fleet_scenario(session, test_user, extra_user):
    group = create_test_group(session, test_user)
    upsert_membership(session, test_user, group.id, extra_user.id, GroupRole.member)
    asset = create_test_group_asset(session, test_user, group)
    serial_number = asset.serial_number

    assign_asset(session, test_user, serial_number, extra_user.id)
    assert resolve_permission_level(session, extra_user, serial_number) == PermissionLevel.usage

    grant_permission(session, test_user, serial_number, extra_user.id, PermissionLevel.admin)
    assert resolve_permission_level(session, extra_user, serial_number) == PermissionLevel.admin

    revoke_permission(session, test_user, serial_number, extra_user.id)
    assert resolve_permission_level(session, extra_user, serial_number) == PermissionLevel.usage

    # The owner's admin comes from ownership, there is no explicit row to revoke.
    with pytest.raises(NotFoundError):
        revoke_permission(session, test_user, serial_number, test_user.id)


def test_regranting_updates_level_and_granter_in_place(session, test_user, extra_user, third_user):
    asset = create_test_personal_asset(session, test_user)

    first = grant_permission(session, test_user, asset.serial_number, extra_user.id, PermissionLevel.admin)
    second = grant_permission(session, extra_user, asset.serial_number, third_user.id, "usage")
    regrant = grant_permission(session, extra_user, asset.serial_number, extra_user.id, PermissionLevel.usage)

    assert second.granted_by_id == extra_user.id
    assert regrant.id == first.id
    assert regrant.level == PermissionLevel.usage
    assert regrant.granted_by_id == extra_user.id
    assert count_rows(session, AssetPermission) == 2

    saved = SavedAssetPermission.model_validate(regrant)
    assert saved.asset_serial_number == asset.serial_number


def test_grant_requires_admin(session, test_user, extra_user, third_user):
    asset = create_test_personal_asset(session, test_user)
    grant_permission(session, test_user, asset.serial_number, extra_user.id, PermissionLevel.usage)

    with pytest.raises(ForbiddenError):
        grant_permission(session, extra_user, asset.serial_number, third_user.id, PermissionLevel.usage)
    with pytest.raises(ForbiddenError):
        revoke_permission(session, extra_user, asset.serial_number, extra_user.id)


def test_grant_rejects_owner_and_empty_levels(session, test_user, extra_user):
    asset = create_test_personal_asset(session, test_user)

    with pytest.raises(InvalidOperationError):
        grant_permission(session, test_user, asset.serial_number, test_user.id, PermissionLevel.usage)
    with pytest.raises(InvalidOperationError):
        grant_permission(session, test_user, asset.serial_number, extra_user.id, PermissionLevel.none)
    with pytest.raises(InvalidOperationError):
        grant_permission(session, test_user, asset.serial_number, extra_user.id, "superuser")
    with pytest.raises(InvalidOperationError):
        revoke_permission(session, test_user, asset.serial_number, test_user.id)

    assert count_rows(session, AssetPermission) == 0


def test_grant_missing_asset_or_user(session, test_user):
    asset = create_test_personal_asset(session, test_user)

    with pytest.raises(NotFoundError):
        grant_permission(session, test_user, "missing", test_user.id, PermissionLevel.usage)
    with pytest.raises(NotFoundError):
        grant_permission(session, test_user, asset.serial_number, 12345, PermissionLevel.usage)


def test_revoke_without_row_raises_not_found(session, test_user, extra_user):
    asset = create_test_personal_asset(session, test_user)

    with pytest.raises(NotFoundError):
        revoke_permission(session, test_user, asset.serial_number, extra_user.id)


def test_list_asset_permissions_requires_visibility(session, test_user, extra_user, third_user):
    group = create_test_group(session, test_user, members=[extra_user])
    asset = create_test_group_asset(session, test_user, group)
    grant_permission(session, test_user, asset.serial_number, third_user.id, PermissionLevel.usage)

    permissions = list_asset_permissions(session, extra_user, asset.serial_number)
    assert [(p.user_id, p.level) for p in permissions] == [(third_user.id, PermissionLevel.usage)]

    revoke_permission(session, test_user, asset.serial_number, third_user.id)
    with pytest.raises(ForbiddenError):
        list_asset_permissions(session, third_user, asset.serial_number)

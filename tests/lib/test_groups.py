import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from robotops.lib.exceptions import ConflictError, ForbiddenError, InvalidOperationError, NotFoundError
from robotops.lib.groups import (
    create_group,
    delete_group,
    fetch_group,
    list_group_members,
    list_groups,
    remove_membership,
    upsert_membership,
)
from robotops.models.asset import Asset
from robotops.models.enums.group_role import GroupRole
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User
from robotops.view_models.group import GroupCreate, SavedGroup
from tests.helpers.constants import TEST_GROUP
from tests.helpers.util import count_rows, create_test_group, create_test_group_asset


def _memberships(db, group):
    return {
        (user_id, role)
        for user_id, role in db.execute(
            select(GroupMembership.user_id, GroupMembership.role).where(GroupMembership.group_id == group.id)
        )
    }


def test_create_group_adds_owner_as_admin_member(session, test_user):
    group = create_group(session, test_user, GroupCreate(**TEST_GROUP))

    assert group.owner_id == test_user.id
    assert _memberships(session, group) == {(test_user.id, GroupRole.admin)}

    saved = SavedGroup.model_validate(group)
    assert saved.owner.username == test_user.username
    assert [member.role for member in saved.members] == [GroupRole.admin]


def test_create_group_with_unknown_owner_leaves_no_rows(session):
    unsaved_owner = User(id=999_999, email="nobody@robotops.dev", username="nobody")

    with pytest.raises(IntegrityError):
        create_group(session, unsaved_owner, GroupCreate(**TEST_GROUP))

    session.rollback()
    assert count_rows(session, Group) == 0
    assert count_rows(session, GroupMembership) == 0


def test_upsert_membership_is_idempotent(session, test_user, extra_user):
    group = create_test_group(session, test_user)

    upsert_membership(session, test_user, group.id, extra_user.id, GroupRole.member)
    membership = upsert_membership(session, test_user, group.id, extra_user.id, GroupRole.member)

    assert membership.role == GroupRole.member
    assert _memberships(session, group) == {(test_user.id, GroupRole.admin), (extra_user.id, GroupRole.member)}


def test_upsert_membership_changes_role_in_place(session, test_user, extra_user):
    group = create_test_group(session, test_user, members=[extra_user])
    original = upsert_membership(session, test_user, group.id, extra_user.id, GroupRole.member)

    promoted = upsert_membership(session, test_user, group.id, extra_user.id, "admin")

    assert promoted.id == original.id
    assert promoted.role == GroupRole.admin


def test_group_admin_can_add_members(session, test_user, extra_user, third_user):
    group = create_test_group(session, test_user, admins=[extra_user])
    membership = upsert_membership(session, extra_user, group.id, third_user.id, GroupRole.member)

    assert membership.user_id == third_user.id


def test_plain_member_cannot_add_members(session, test_user, extra_user, third_user):
    group = create_test_group(session, test_user, members=[extra_user])

    with pytest.raises(ForbiddenError):
        upsert_membership(session, extra_user, group.id, third_user.id, GroupRole.member)


def test_upsert_membership_for_missing_group_or_user(session, test_user):
    with pytest.raises(NotFoundError):
        upsert_membership(session, test_user, 12345, test_user.id, GroupRole.member)

    group = create_test_group(session, test_user)
    with pytest.raises(NotFoundError):
        upsert_membership(session, test_user, group.id, 12345, GroupRole.member)


def test_upsert_membership_rejects_unknown_role(session, test_user, extra_user):
    group = create_test_group(session, test_user)

    with pytest.raises(InvalidOperationError):
        upsert_membership(session, test_user, group.id, extra_user.id, "owner")


def test_owner_cannot_be_demoted(session, test_user, extra_user):
    group = create_test_group(session, test_user, admins=[extra_user])

    with pytest.raises(ConflictError):
        upsert_membership(session, extra_user, group.id, test_user.id, GroupRole.member)

    assert (test_user.id, GroupRole.admin) in _memberships(session, group)


def test_removing_the_owner_conflicts_and_leaves_memberships_unchanged(session, test_user, extra_user):
    group = create_test_group(session, test_user, admins=[extra_user])
    before = _memberships(session, group)

    with pytest.raises(ConflictError):
        remove_membership(session, extra_user, group.id, test_user.id)

    assert _memberships(session, group) == before


def test_remove_membership_clears_assignments(session, test_user, extra_user):
    group = create_test_group(session, test_user, members=[extra_user])
    asset = create_test_group_asset(session, test_user, group)
    session.execute(
        update(Asset).where(Asset.serial_number == asset.serial_number).values(assigned_user_id=extra_user.id)
    )
    session.commit()

    remove_membership(session, test_user, group.id, extra_user.id)

    assert _memberships(session, group) == {(test_user.id, GroupRole.admin)}
    assert session.scalar(select(Asset.assigned_user_id).where(Asset.serial_number == asset.serial_number)) is None


def test_remove_missing_membership_raises_not_found(session, test_user, extra_user):
    group = create_test_group(session, test_user)

    with pytest.raises(NotFoundError):
        remove_membership(session, test_user, group.id, extra_user.id)


def test_authority_is_checked_before_membership_state(session, test_user, extra_user, third_user):
    group = create_test_group(session, test_user, members=[extra_user])

    with pytest.raises(ForbiddenError):
        remove_membership(session, extra_user, group.id, third_user.id)


def test_only_owner_can_delete_group(session, test_user, extra_user):
    group = create_test_group(session, test_user, admins=[extra_user])
    create_test_group_asset(session, test_user, group)

    with pytest.raises(ForbiddenError):
        delete_group(session, extra_user, group.id)

    delete_group(session, test_user, group.id)

    assert count_rows(session, Group) == 0
    assert count_rows(session, GroupMembership) == 0
    assert count_rows(session, Asset) == 0


def test_fetch_group_requires_membership(session, test_user, extra_user, third_user):
    group = create_test_group(session, test_user, members=[extra_user])

    assert fetch_group(session, extra_user, group.id).id == group.id
    with pytest.raises(ForbiddenError):
        fetch_group(session, third_user, group.id)
    with pytest.raises(NotFoundError):
        fetch_group(session, test_user, 12345)


def test_list_groups_returns_owned_and_joined_groups_newest_first(session, test_user, extra_user):
    joined = create_test_group(session, extra_user, members=[test_user])
    owned = create_group(session, test_user, GroupCreate(name="Lab Robots"))
    create_group(session, extra_user, GroupCreate(name="Not Mine"))

    assert [group.id for group in list_groups(session, test_user)] == [owned.id, joined.id]


def test_list_group_members(session, test_user, extra_user, third_user):
    group = create_test_group(session, test_user, members=[extra_user])

    members = list_group_members(session, extra_user, group.id)
    assert [(m.user_id, m.role) for m in members] == [
        (test_user.id, GroupRole.admin),
        (extra_user.id, GroupRole.member),
    ]

    with pytest.raises(ForbiddenError):
        list_group_members(session, third_user, group.id)

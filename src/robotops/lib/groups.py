import logging
from datetime import datetime
from typing import Sequence, Union

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from robotops.db.transaction import atomic
from robotops.db.upsert import upsert
from robotops.lib.exceptions import ConflictError, InvalidOperationError, NotFoundError
from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.lib.permissions import Action, assert_permission
from robotops.lib.users import fetch_user_by_id
from robotops.models.asset import Asset
from robotops.models.enums.group_role import GroupRole
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User
from robotops.view_models import group as group_view_models

logger = logging.getLogger(__name__)


def fetch_group_by_id(db: Session, group_id: int) -> Group:
    save_to_logging_context({"requested_group": group_id})
    group = db.scalars(select(Group).where(Group.id == group_id)).one_or_none()

    if group is None:
        logger.info(msg="The requested group does not exist.", extra=logging_context())
        raise NotFoundError(f"Group with ID {group_id} not found")

    return group


def _fetch_membership(db: Session, group_id: int, user_id: int) -> GroupMembership:
    membership = db.scalars(
        select(GroupMembership)
        .where(GroupMembership.group_id == group_id, GroupMembership.user_id == user_id)
        .execution_options(populate_existing=True)
    ).one_or_none()

    if membership is None:
        logger.info(msg="The requested group membership does not exist.", extra=logging_context())
        raise NotFoundError(f"User with ID {user_id} is not a member of group {group_id}")

    return membership


def create_group(db: Session, owner: User, group_create: group_view_models.GroupCreate) -> Group:
    """
    Create a group owned by *owner*.

    The owner's admin membership is written in the same transaction as the group, so a group never
    exists without it.
    """
    group = Group(name=group_create.name, owner_id=owner.id)

    with atomic(db):
        db.add(group)
        db.flush()
        db.add(GroupMembership(group_id=group.id, user_id=owner.id, role=GroupRole.admin))

    db.refresh(group)
    save_to_logging_context({"requested_group": group.id})
    logger.info(msg="Created group.", extra=logging_context())
    return group


def upsert_membership(
    db: Session, acting_user: User, group_id: int, target_user_id: int, role: Union[GroupRole, str]
) -> GroupMembership:
    """
    Add a user to a group, or change the role of an existing member.

    Repeating the same call leaves a single membership row with the requested role.

    :raises NotFoundError: If the group or the target user does not exist
    :raises ForbiddenError: If the acting user is neither the group's owner nor one of its admins
    :raises ConflictError: If the change would demote the group's owner
    """
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, acting_user, group, Action.ADD_MEMBER)

    try:
        role = GroupRole(role)
    except ValueError:
        raise InvalidOperationError(f"'{role}' is not a valid group role")

    target_user = fetch_user_by_id(db, target_user_id)
    save_to_logging_context({"requested_group_role": role.value})

    if target_user.id == group.owner_id and role != GroupRole.admin:
        logger.info(msg="Refusing to demote the owner of a group.", extra=logging_context())
        raise ConflictError("The group owner must keep the admin role")

    with atomic(db):
        upsert(
            db,
            GroupMembership,
            {"group_id": group.id, "user_id": target_user.id, "role": role, "created_at": datetime.now()},
            conflict_columns=("group_id", "user_id"),
            update_columns=("role",),
        )

    logger.info(msg="Saved group membership.", extra=logging_context())
    return _fetch_membership(db, group.id, target_user.id)


def remove_membership(db: Session, acting_user: User, group_id: int, target_user_id: int) -> None:
    """
    Remove a user from a group.

    Any of the group's assets assigned to the removed user are unassigned in the same transaction.

    :raises NotFoundError: If the group or the membership does not exist
    :raises ForbiddenError: If the acting user is neither the group's owner nor one of its admins
    :raises ConflictError: If the target is the group's owner
    """
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, acting_user, group, Action.REMOVE_MEMBER)
    save_to_logging_context({"requested_user": target_user_id})

    if target_user_id == group.owner_id:
        logger.info(msg="Refusing to remove the owner of a group.", extra=logging_context())
        raise ConflictError("The group owner cannot be removed from the group")

    membership = _fetch_membership(db, group.id, target_user_id)

    with atomic(db):
        db.execute(
            update(Asset)
            .where(Asset.owner_group_id == group.id, Asset.assigned_user_id == target_user_id)
            .values(assigned_user_id=None)
        )
        db.execute(delete(GroupMembership).where(GroupMembership.id == membership.id))

    db.expire_all()
    logger.info(msg="Removed group membership.", extra=logging_context())


def delete_group(db: Session, acting_user: User, group_id: int) -> None:
    """
    Delete a group with its memberships and every asset it owns. Only the group's owner may do this.
    """
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, acting_user, group, Action.DELETE)

    with atomic(db):
        db.delete(group)

    logger.info(msg="Deleted group.", extra=logging_context())


def fetch_group(db: Session, user: User, group_id: int) -> Group:
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, user, group, Action.READ)
    return group


def list_groups(db: Session, user: User) -> Sequence[Group]:
    """
    List the groups *user* owns or belongs to, newest first.
    """
    member_group_ids = select(GroupMembership.group_id).where(GroupMembership.user_id == user.id)
    return db.scalars(
        select(Group)
        .where(or_(Group.owner_id == user.id, Group.id.in_(member_group_ids)))
        .order_by(Group.created_at.desc(), Group.id.desc())
    ).all()


def list_group_members(db: Session, user: User, group_id: int) -> Sequence[GroupMembership]:
    group = fetch_group_by_id(db, group_id)
    assert_permission(db, user, group, Action.READ)

    return db.scalars(
        select(GroupMembership).where(GroupMembership.group_id == group.id).order_by(GroupMembership.id)
    ).all()

import logging
from typing import Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from robotops.db.transaction import atomic
from robotops.lib.exceptions import ConflictError, NotFoundError
from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.lib.permissions import Action, assert_permission
from robotops.models.asset import Asset
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User
from robotops.view_models import user as user_view_models

logger = logging.getLogger(__name__)


def fetch_user_by_id(db: Session, user_id: int) -> User:
    save_to_logging_context({"requested_user": user_id})
    user = db.scalars(select(User).where(User.id == user_id)).one_or_none()

    if user is None:
        logger.info(msg="The requested user does not exist.", extra=logging_context())
        raise NotFoundError(f"User with ID {user_id} not found")

    return user


def _assert_identity_available(
    db: Session, email: Optional[str], username: Optional[str], exclude_user_id: Optional[int] = None
) -> None:
    clauses = []
    if email is not None:
        clauses.append(User.email == email)
    if username is not None:
        clauses.append(User.username == username)
    if not clauses:
        return

    query = select(User.id).where(or_(*clauses))
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)

    if db.scalars(query).first() is not None:
        logger.info(msg="The requested email address or username is already in use.", extra=logging_context())
        raise ConflictError("A user with this email address or username already exists.")


def create_user(db: Session, user_create: user_view_models.UserCreate) -> User:
    """
    Register a user record.

    Authentication credentials are not stored here; this only records the identity other operations
    refer to.

    :param db: An active database session
    :param user_create: The new user's email address, username and optional display name
    :return: The saved user
    :raises ConflictError: If the email address or username is already taken
    """
    save_to_logging_context({"requested_username": user_create.username})
    _assert_identity_available(db, user_create.email, user_create.username)

    user = User(email=user_create.email, username=user_create.username, name=user_create.name)
    with atomic(db):
        db.add(user)

    db.refresh(user)
    logger.info(msg="Created user.", extra=logging_context())
    return user


def update_profile(db: Session, acting_user: User, user_update: user_view_models.UserModify) -> User:
    """
    Update the acting user's own profile.

    Only fields present on *user_update* are changed. Changing the role requires an elevated user
    (an administrator or a staff member).
    """
    updates = user_update.model_dump(exclude_unset=True)
    save_to_logging_context({"requested_user": acting_user.id, "updated_fields": sorted(updates.keys())})

    assert_permission(db, acting_user, acting_user, Action.UPDATE)
    for required_field in ("email", "username", "role"):
        if required_field in updates and updates[required_field] is None:
            del updates[required_field]

    if "role" in updates and updates["role"] != acting_user.role:
        assert_permission(db, acting_user, acting_user, Action.CHANGE_ROLE)

    _assert_identity_available(db, updates.get("email"), updates.get("username"), exclude_user_id=acting_user.id)

    with atomic(db):
        for field, value in updates.items():
            setattr(acting_user, field, value)

    db.refresh(acting_user)
    logger.info(msg="Updated user profile.", extra=logging_context())
    return acting_user


def user_stats(db: Session, user: User) -> user_view_models.UserStats:
    member_group_ids = select(GroupMembership.group_id).where(GroupMembership.user_id == user.id)

    def count(query) -> int:
        return db.scalar(select(func.count()).select_from(query.subquery())) or 0

    return user_view_models.UserStats(
        personal_assets_count=count(select(Asset.serial_number).where(Asset.owner_user_id == user.id)),
        group_assets_count=count(select(Asset.serial_number).where(Asset.owner_group_id.in_(member_group_ids))),
        assigned_assets_count=count(select(Asset.serial_number).where(Asset.assigned_user_id == user.id)),
        groups_count=count(member_group_ids),
        owned_groups_count=count(select(Group.id).where(Group.owner_id == user.id)),
    )


def list_active_users(db: Session) -> Sequence[User]:
    return db.scalars(select(User).where(User.is_active.is_(True)).order_by(User.email)).all()

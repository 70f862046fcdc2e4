"""
Effective permission levels for (user, asset) pairs.

Access to an asset can come from several independent sources at once:

1. Owning the asset directly grants ``admin``.
2. Owning the group which owns the asset grants ``admin``.
3. An ``admin`` membership in the owning group grants ``admin``.
4. Any membership in the owning group grants ``usage``.
5. Being the asset's assigned operator grants ``usage``.
6. An explicit :class:`AssetPermission` row grants the level stored on it.

Every applicable source contributes a candidate level and the result is the highest candidate.
Sources are never short-circuited: a user who is assigned an asset and separately granted
``admin`` on it must resolve to ``admin``.

Levels are always read from the database at call time with column selects, so a revocation is
visible to the very next check.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import Select, and_, select
from sqlalchemy.orm import Session

from robotops.lib.exceptions import NotFoundError
from robotops.lib.logging.context import logging_context, save_to_logging_context
from robotops.models.asset import Asset
from robotops.models.asset_permission import AssetPermission
from robotops.models.enums.group_role import GroupRole
from robotops.models.enums.permission_level import PermissionLevel
from robotops.models.group import Group
from robotops.models.group_membership import GroupMembership
from robotops.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessFacts:
    """The relationships between one user and one asset which can confer access."""

    user_id: int
    serial_number: str
    owner_user_id: Optional[int]
    owner_group_id: Optional[int]
    group_owner_id: Optional[int]
    membership_role: Optional[GroupRole]
    assigned_user_id: Optional[int]
    explicit_level: Optional[PermissionLevel]

    @property
    def is_direct_owner(self) -> bool:
        return self.owner_user_id is not None and self.owner_user_id == self.user_id

    @property
    def is_group_owner(self) -> bool:
        return self.owner_group_id is not None and self.group_owner_id == self.user_id

    @property
    def is_group_admin(self) -> bool:
        return self.owner_group_id is not None and self.membership_role == GroupRole.admin

    @property
    def holds_ownership_authority(self) -> bool:
        """Whether the user's admin rights derive from ownership rather than an explicit grant."""
        return self.is_direct_owner or self.is_group_owner or self.is_group_admin

    def candidate_levels(self) -> list[PermissionLevel]:
        candidates: list[PermissionLevel] = []

        if self.is_direct_owner:
            candidates.append(PermissionLevel.admin)
        if self.is_group_owner:
            candidates.append(PermissionLevel.admin)
        if self.is_group_admin:
            candidates.append(PermissionLevel.admin)
        if self.owner_group_id is not None and self.membership_role is not None:
            candidates.append(PermissionLevel.usage)
        if self.assigned_user_id is not None and self.assigned_user_id == self.user_id:
            candidates.append(PermissionLevel.usage)
        if self.explicit_level is not None:
            candidates.append(self.explicit_level)

        return candidates

    @property
    def level(self) -> PermissionLevel:
        return PermissionLevel.highest(self.candidate_levels())


def _access_facts_query(user_id: int, serial_numbers: Iterable[str]) -> Select:
    # Memberships and explicit permissions are unique per (group, user) and (asset, user), so the outer joins
    # produce exactly one row per asset.
    return (
        select(
            Asset.serial_number,
            Asset.owner_user_id,
            Asset.owner_group_id,
            Asset.assigned_user_id,
            Group.owner_id.label("group_owner_id"),
            GroupMembership.role.label("membership_role"),
            AssetPermission.level.label("explicit_level"),
        )
        .outerjoin(Group, Group.id == Asset.owner_group_id)
        .outerjoin(
            GroupMembership,
            and_(GroupMembership.group_id == Asset.owner_group_id, GroupMembership.user_id == user_id),
        )
        .outerjoin(
            AssetPermission,
            and_(AssetPermission.asset_serial_number == Asset.serial_number, AssetPermission.user_id == user_id),
        )
        .where(Asset.serial_number.in_(list(serial_numbers)))
    )


def _facts_from_row(user_id: int, row) -> AccessFacts:
    return AccessFacts(
        user_id=user_id,
        serial_number=row.serial_number,
        owner_user_id=row.owner_user_id,
        owner_group_id=row.owner_group_id,
        group_owner_id=row.group_owner_id,
        membership_role=row.membership_role,
        assigned_user_id=row.assigned_user_id,
        explicit_level=row.explicit_level,
    )


def access_facts(db: Session, user: User, serial_number: str) -> AccessFacts:
    """
    Load every access-conferring relationship between *user* and the asset with *serial_number*.

    Raises:
        NotFoundError: If no asset has the given serial number.
    """
    row = db.execute(_access_facts_query(user.id, [serial_number])).one_or_none()
    if row is None:
        logger.debug(msg="The requested asset does not exist.", extra=logging_context())
        raise NotFoundError(f"Asset with serial number '{serial_number}' not found")

    return _facts_from_row(user.id, row)


def resolve_permission_level(db: Session, user: User, serial_number: str) -> PermissionLevel:
    """
    Compute the permission level *user* currently holds on the asset with *serial_number*.

    Returns ``PermissionLevel.none`` when no source of access applies; that is a normal outcome rather
    than an error.

    Raises:
        NotFoundError: If no asset has the given serial number.
    """
    facts = access_facts(db, user, serial_number)
    level = facts.level

    save_to_logging_context(
        {
            "resolved_resource": serial_number,
            "user_is_owner": facts.is_direct_owner,
            "resolved_permission_level": level.value,
        }
    )
    return level


def resolve_permission_levels(db: Session, user: User, serial_numbers: Iterable[str]) -> dict[str, PermissionLevel]:
    """
    Compute the permission level *user* holds on each of several assets with a single query.

    Serial numbers which do not identify an asset are left out of the result.
    """
    unique_serial_numbers = set(serial_numbers)
    if not unique_serial_numbers:
        return {}

    rows = db.execute(_access_facts_query(user.id, unique_serial_numbers)).all()
    return {row.serial_number: _facts_from_row(user.id, row).level for row in rows}

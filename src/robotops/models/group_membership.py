# Prevent circular imports
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, relationship

from robotops.db.base import Base
from robotops.models.enums.group_role import GroupRole

if TYPE_CHECKING:
    from robotops.models.group import Group
    from robotops.models.user import User


class GroupMembership(Base):
    __tablename__ = "group_memberships"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="group_membership_group_user_key"),)

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    role: Mapped[GroupRole] = Column(
        Enum(GroupRole, create_constraint=True, length=32, native_enum=False, validate_strings=True),
        nullable=False,
        default=GroupRole.member,
    )
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    group: Mapped["Group"] = relationship(back_populates="memberships")
    user: Mapped["User"] = relationship(back_populates="memberships")

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, relationship

from robotops.db.base import Base

from .user import User

if TYPE_CHECKING:
    from robotops.models.asset import Asset
    from robotops.models.group_membership import GroupMembership


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), index=True, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    owner: Mapped[User] = relationship("User")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    memberships: Mapped[list["GroupMembership"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GroupMembership.id",
    )
    assets: Mapped[list["Asset"]] = relationship(
        back_populates="owner_group", cascade="all, delete-orphan", passive_deletes=True
    )

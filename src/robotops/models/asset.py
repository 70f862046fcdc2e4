from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, relationship

from robotops.db.base import Base

from .group import Group
from .user import User

if TYPE_CHECKING:
    from robotops.models.asset_permission import AssetPermission
    from robotops.models.asset_settings import AssetSettings


class Asset(Base):
    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint(
            "(owner_user_id IS NOT NULL AND owner_group_id IS NULL) OR "
            "(owner_user_id IS NULL AND owner_group_id IS NOT NULL)",
            name="asset_owner_xor",
        ),
        CheckConstraint(
            "assigned_user_id IS NULL OR owner_group_id IS NOT NULL",
            name="asset_assignment_requires_group_owner",
        ),
    )

    serial_number = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    model = Column(String(120), nullable=True)

    owner_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True)
    owner_user: Mapped[Optional[User]] = relationship("User", foreign_keys="Asset.owner_user_id")
    owner_group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), index=True, nullable=True)
    owner_group: Mapped[Optional[Group]] = relationship(back_populates="assets")
    assigned_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True)
    assigned_user: Mapped[Optional[User]] = relationship("User", foreign_keys="Asset.assigned_user_id")

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    permissions: Mapped[list["AssetPermission"]] = relationship(
        back_populates="asset", cascade="all, delete-orphan", passive_deletes=True
    )
    settings: Mapped[list["AssetSettings"]] = relationship(
        back_populates="asset", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def owner_type(self) -> str:
        return "user" if self.owner_user_id is not None else "group"

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, relationship

from robotops.db.base import Base
from robotops.models.enums.user_role import UserRole

if TYPE_CHECKING:
    from robotops.models.asset_permission import AssetPermission
    from robotops.models.asset_settings import AssetSettings
    from robotops.models.group_membership import GroupMembership


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), index=True, nullable=False, unique=True)
    username = Column(String(150), index=True, nullable=False, unique=True)
    name = Column(String(120), nullable=True)
    role: Mapped[UserRole] = Column(
        Enum(UserRole, create_constraint=True, length=32, native_enum=False, validate_strings=True),
        nullable=False,
        default=UserRole.user,
        index=True,
    )
    is_staff = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    date_joined = Column(DateTime, nullable=False, default=datetime.now)

    memberships: Mapped[list["GroupMembership"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    asset_permissions: Mapped[list["AssetPermission"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="AssetPermission.user_id",
    )
    asset_settings: Mapped[list["AssetSettings"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_elevated(self) -> bool:
        return self.role == UserRole.admin or bool(self.is_staff)

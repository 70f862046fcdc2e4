# Prevent circular imports
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, relationship

from robotops.db.base import Base
from robotops.models.enums.permission_level import PermissionLevel

if TYPE_CHECKING:
    from robotops.models.asset import Asset
    from robotops.models.user import User


class AssetPermission(Base):
    __tablename__ = "asset_permissions"
    __table_args__ = (
        UniqueConstraint("asset_serial_number", "user_id", name="asset_permission_asset_user_key"),
        CheckConstraint("level IN ('usage', 'admin')", name="asset_permission_level_grantable"),
    )

    id = Column(Integer, primary_key=True)
    asset_serial_number = Column(
        String(64), ForeignKey("assets.serial_number", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    level: Mapped[PermissionLevel] = Column(
        Enum(PermissionLevel, create_constraint=True, length=32, native_enum=False, validate_strings=True),
        nullable=False,
    )
    granted_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    asset: Mapped["Asset"] = relationship(back_populates="permissions")
    user: Mapped["User"] = relationship(back_populates="asset_permissions", foreign_keys=[user_id])
    granted_by: Mapped[Optional["User"]] = relationship(foreign_keys=[granted_by_id])

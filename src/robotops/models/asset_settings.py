# Prevent circular imports
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, relationship

from robotops.db.base import Base

if TYPE_CHECKING:
    from robotops.models.asset import Asset
    from robotops.models.user import User


class AssetSettings(Base):
    __tablename__ = "asset_settings"
    __table_args__ = (UniqueConstraint("asset_serial_number", "user_id", name="asset_settings_asset_user_key"),)

    id = Column(Integer, primary_key=True)
    asset_serial_number = Column(
        String(64), ForeignKey("assets.serial_number", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    settings = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    asset: Mapped["Asset"] = relationship(back_populates="settings")
    user: Mapped["User"] = relationship(back_populates="asset_settings")

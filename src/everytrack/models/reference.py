from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func

from everytrack.models.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class AssetProvider(Base):
    """
    A bank or broker that holds client accounts.

    `name` is the display name and doubles as the natural key other seed
    units use to reference the row.
    """

    __tablename__ = "asset_provider"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), unique=True, nullable=False)
    icon = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False)  # bank|broker
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class AssetProviderAccountType(Base):
    __tablename__ = "asset_provider_account_type"

    id = Column(String(36), primary_key=True, default=_uuid)
    asset_provider_id = Column(
        String(36),
        ForeignKey("asset_provider.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Currency(Base):
    __tablename__ = "currency"

    id = Column(String(36), primary_key=True, default=_uuid)
    ticker = Column(String(10), unique=True, nullable=False)
    symbol = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

# src/gatecha/models/consumed_challenge.py
"""Replay ledger rows."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gatecha.db.session import Base
from gatecha.db.time import utcnow

if TYPE_CHECKING:
    from .api_key import APIKey


class ConsumedChallenge(Base):
    """Record indicating that a solved challenge has already been redeemed."""

    __tablename__ = "consumed_challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Unique across all keys, not per key.
    challenge: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)
    api_key_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("api_keys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    consumed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    api_key: Mapped[APIKey] = relationship("APIKey", back_populates="consumed_challenges")

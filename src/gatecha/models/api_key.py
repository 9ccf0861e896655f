# src/gatecha/models/api_key.py
"""SQLAlchemy model for API keys and their challenge policy."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gatecha.core.settings import DEFAULT_ALGORITHM, DEFAULT_EXPIRE_SECONDS, DEFAULT_MAX_NUMBER
from gatecha.db.session import Base
from gatecha.db.time import utcnow

if TYPE_CHECKING:
    from .consumed_challenge import ConsumedChallenge
    from .daily_stat import DailyStat


class APIKey(Base):
    """A public key id plus the secret and policy used to issue challenges."""

    __tablename__ = "api_keys"
    # Ids are never reused, so a stale reference cannot resolve to a newer key.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    hmac_secret: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    domain: Mapped[str] = mapped_column(Text, nullable=False, default="")
    max_number: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_NUMBER)
    expire_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_EXPIRE_SECONDS
    )
    algorithm: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_ALGORITHM)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    consumed_challenges: Mapped[list[ConsumedChallenge]] = relationship(
        "ConsumedChallenge",
        back_populates="api_key",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    daily_stats: Mapped[list[DailyStat]] = relationship(
        "DailyStat",
        back_populates="api_key",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<APIKey id={self.id} key_id={self.key_id!r} enabled={self.enabled}>"

# src/gatecha/models/daily_stat.py
"""Per-key, per-day usage counters."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gatecha.db.session import Base

if TYPE_CHECKING:
    from .api_key import APIKey


class DailyStat(Base):
    """Monotonic counters for one API key on one UTC calendar day."""

    __tablename__ = "daily_stats"
    __table_args__ = (UniqueConstraint("api_key_id", "date", name="uq_daily_stats_key_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    api_key_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("api_keys.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    challenges_issued: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verifications_ok: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verifications_fail: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    api_key: Mapped[APIKey] = relationship("APIKey", back_populates="daily_stats")

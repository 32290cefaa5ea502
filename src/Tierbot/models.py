# models.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from Tierbot.db import Base


class PlayerRanking(Base):
    __tablename__ = "player_rankings"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Natural key; upserts conflict on it
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    playstyle: Mapped[int] = mapped_column(Integer)
    movement: Mapped[int] = mapped_column(Integer)
    pvp: Mapped[int] = mapped_column(Integer)
    building: Mapped[int] = mapped_column(Integer)
    projectiles: Mapped[int] = mapped_column(Integer)
    # Derived from the five scores at write time
    overall_score: Mapped[float] = mapped_column(Float)
    tier: Mapped[str] = mapped_column(String(16), index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Boolean, CheckConstraint, String, Text, DateTime, ForeignKey, JSON, Uuid, func
from app.config import TRICK_NAME_COLUMN_LEN
from app.db import Base

class Game(Base):
    __tablename__ = "games"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    opponent: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True, nullable=True)  # NULL while waiting
    letters: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)  # {str(uid): "SK"}
    turn: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="waiting")  # waiting|in-progress|finished
    winner: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    loser: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("status IN ('waiting','in-progress','finished')", name="ck_games_status"),
    )


class Round(Base):
    """One uploaded trick attempt; immutable once written."""
    __tablename__ = "rounds"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    game_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("games.id", ondelete="CASCADE"), index=True, nullable=False)
    player: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    video_url: Mapped[str] = mapped_column(Text(), nullable=False)
    trick_name: Mapped[str] = mapped_column(String(TRICK_NAME_COLUMN_LEN), nullable=False)
    is_response: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    landed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import CheckConstraint, String, Text, DateTime, Uuid, func
from app.db import Base


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_uid: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    # No FK: a submission may point at a challenge that was since removed (awards 0 points)
    challenge_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)

    video_url: Mapped[str | None] = mapped_column(Text(), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # 'pending'|'approved'|'rejected'

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Set exactly once, by the review decision
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text(), nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('pending','approved','rejected')", name="ck_submissions_status"),
        CheckConstraint("reviewed_by IS NULL OR reviewed_by <> owner_uid", name="ck_submissions_no_self_review"),
    )

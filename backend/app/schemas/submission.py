from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime
from app.schemas.review import SubmissionStatus


class SubmissionCreate(BaseModel):
    challenge_id: UUID
    video_url: str = Field(min_length=1, max_length=2048)


class SubmissionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_uid: UUID
    challenge_id: UUID
    video_url: str | None = None
    status: SubmissionStatus
    created_at: datetime
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None


class LeaderboardRow(BaseModel):
    user_id: UUID
    display_name: str
    points: int
    total_points: int
    approvals: int

from __future__ import annotations
from datetime import datetime
from typing import Literal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

SubmissionStatus = Literal["pending", "approved", "rejected"]


# ---------- callable inputs / outputs (camelCase on the wire) ----------

class ApproveSubmissionInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    submission_id: UUID = Field(alias="submissionId")


class RejectSubmissionInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    submission_id: UUID = Field(alias="submissionId")
    rejection_reason: str | None = Field(default=None, alias="rejectionReason", max_length=500)

    @field_validator("rejection_reason")
    @classmethod
    def _blank_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ApproveSubmissionOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    success: bool
    submission_id: UUID = Field(alias="submissionId")
    points_awarded: int = Field(alias="pointsAwarded")
    message: str


class RejectSubmissionOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    success: bool
    submission_id: UUID = Field(alias="submissionId")
    message: str


# ---------- stored records, validated when read ----------

class SubmissionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    owner_uid: UUID
    challenge_id: UUID
    status: SubmissionStatus
    reviewed_by: UUID | None = None
    rejection_reason: str | None = None


class ChallengeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    points: int = 0

    @field_validator("points", mode="before")
    @classmethod
    def _default_points(cls, v):
        return 0 if v is None else v


class ApprovalPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    submission_id: UUID
    reviewed_by: UUID
    decision: Literal["approved", "rejected"]
    points_awarded: int
    rejection_reason: str | None = None
    reviewed_at: datetime

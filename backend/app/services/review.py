"""
Moderation decisions on submissions.

``approve_submission`` and ``reject_submission`` each run as one
transaction. Inside it the submission row is read ``FOR UPDATE`` and checked
in this order:

  1. it exists                        -> NotFound
  2. it is still ``pending``          -> FailedPrecondition (names the status)
  3. the reviewer is not the owner    -> PermissionDenied

Approval then awards the challenge's points (0 if the challenge is gone),
bumps the owner's ``total_points``, and appends one ``approvals`` row and
one ``activity`` row. Rejection appends only the ``approvals`` row.

A second decision on the same submission fails at step 2, so client
retries never double-award. Role checks happen in the route dependency,
before any of this runs.
"""
from __future__ import annotations
from datetime import datetime, timezone
from uuid import UUID

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import AppError, FailedPrecondition, Internal, InvalidRecord, NotFound, PermissionDenied
from app.models.challenge import Challenge
from app.models.review import Activity, Approval
from app.models.submission import Submission
from app.schemas.review import (
    ApproveSubmissionOutput,
    ChallengeRecord,
    RejectSubmissionOutput,
    SubmissionRecord,
)
from app.services.users import increment_points

log = structlog.get_logger()

ACTIVITY_SUBMISSION_APPROVED = "submission-approved"


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _load_reviewable(
    session: AsyncSession, submission_id: UUID, reviewer_uid: UUID, verb: str
) -> tuple[Submission, SubmissionRecord]:
    row = await session.get(Submission, submission_id, with_for_update=True)
    if not row:
        raise NotFound("Submission not found")
    try:
        record = SubmissionRecord.model_validate(row)
    except ValidationError as e:
        raise InvalidRecord(f"Submission {submission_id} failed validation ({e.error_count()} error(s))")

    if record.status != "pending":
        raise FailedPrecondition(f"Cannot {verb} submission with status: {record.status}")
    if record.owner_uid == reviewer_uid:
        raise PermissionDenied(f"Cannot {verb} your own submission")
    return row, record


async def _challenge_points(session: AsyncSession, challenge_id: UUID) -> int:
    ch = await session.get(Challenge, challenge_id)
    if not ch:
        log.info("challenge_missing_zero_points", challenge_id=str(challenge_id))
        return 0
    try:
        return ChallengeRecord.model_validate(ch).points
    except ValidationError as e:
        raise InvalidRecord(f"Challenge {challenge_id} failed validation ({e.error_count()} error(s))")


async def approve_submission(session: AsyncSession, submission_id: UUID, reviewer_uid: UUID) -> ApproveSubmissionOutput:
    try:
        async with session.begin():
            row, record = await _load_reviewable(session, submission_id, reviewer_uid, "approve")
            points = await _challenge_points(session, record.challenge_id)

            now = _now()
            row.status = "approved"
            row.approved_at = now
            row.reviewed_at = now
            row.reviewed_by = reviewer_uid
            row.updated_at = now

            await increment_points(session, record.owner_uid, points)

            session.add(Approval(
                submission_id=record.id,
                reviewed_by=reviewer_uid,
                decision="approved",
                points_awarded=points,
                reviewed_at=now,
            ))
            session.add(Activity(
                type=ACTIVITY_SUBMISSION_APPROVED,
                user_id=record.owner_uid,
                submission_id=record.id,
                points_awarded=points,
                created_at=now,
            ))
    except AppError as e:
        log.info("submission_review_refused", decision="approved", submission_id=str(submission_id),
                 reviewer=str(reviewer_uid), code=e.code, reason=e.message)
        raise
    except Exception:
        log.exception("submission_approve_failed", submission_id=str(submission_id), reviewer=str(reviewer_uid))
        raise Internal("Failed to approve submission")

    log.info("submission_approved", submission_id=str(submission_id), reviewer=str(reviewer_uid),
             owner=str(record.owner_uid), points=points)
    return ApproveSubmissionOutput(
        success=True,
        submission_id=submission_id,
        points_awarded=points,
        message=f"Submission approved successfully. {points} points awarded.",
    )


async def reject_submission(
    session: AsyncSession,
    submission_id: UUID,
    reviewer_uid: UUID,
    rejection_reason: str | None = None,
) -> RejectSubmissionOutput:
    try:
        async with session.begin():
            row, record = await _load_reviewable(session, submission_id, reviewer_uid, "reject")

            now = _now()
            row.status = "rejected"
            row.rejected_at = now
            row.reviewed_at = now
            row.reviewed_by = reviewer_uid
            row.updated_at = now
            if rejection_reason:
                row.rejection_reason = rejection_reason

            session.add(Approval(
                submission_id=record.id,
                reviewed_by=reviewer_uid,
                decision="rejected",
                points_awarded=0,
                rejection_reason=rejection_reason or None,
                reviewed_at=now,
            ))
            # No activity row: rejections stay out of the feed and leaderboard
    except AppError as e:
        log.info("submission_review_refused", decision="rejected", submission_id=str(submission_id),
                 reviewer=str(reviewer_uid), code=e.code, reason=e.message)
        raise
    except Exception:
        log.exception("submission_reject_failed", submission_id=str(submission_id), reviewer=str(reviewer_uid))
        raise Internal("Failed to reject submission")

    log.info("submission_rejected", submission_id=str(submission_id), reviewer=str(reviewer_uid))
    return RejectSubmissionOutput(
        success=True,
        submission_id=submission_id,
        message=f"Submission rejected: {rejection_reason}" if rejection_reason else "Submission rejected successfully",
    )

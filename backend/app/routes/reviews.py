from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.auth_deps import Identity, require_reviewer
from app.db import get_session
from app.models.review import Approval
from app.schemas.review import (
    ApprovalPublic,
    ApproveSubmissionInput,
    ApproveSubmissionOutput,
    RejectSubmissionInput,
    RejectSubmissionOutput,
)
from app.services.review import approve_submission, reject_submission

router = APIRouter(prefix="/reviews", tags=["reviews"])

@router.post("/approve", response_model=ApproveSubmissionOutput)
async def approve(
    payload: ApproveSubmissionInput,
    session: AsyncSession = Depends(get_session),
    reviewer: Identity = Depends(require_reviewer),
):
    return await approve_submission(session, payload.submission_id, reviewer.uid)

@router.post("/reject", response_model=RejectSubmissionOutput)
async def reject(
    payload: RejectSubmissionInput,
    session: AsyncSession = Depends(get_session),
    reviewer: Identity = Depends(require_reviewer),
):
    return await reject_submission(session, payload.submission_id, reviewer.uid, payload.rejection_reason)

@router.get("/audit/{submission_id}", response_model=list[ApprovalPublic])
async def audit_trail(
    submission_id: UUID,
    session: AsyncSession = Depends(get_session),
    reviewer: Identity = Depends(require_reviewer),
):
    rows = (await session.execute(
        select(Approval).where(Approval.submission_id == submission_id).order_by(Approval.reviewed_at.asc())
    )).scalars().all()
    return rows

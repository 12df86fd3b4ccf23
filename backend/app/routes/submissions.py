from __future__ import annotations
from typing import Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth_deps import Identity, get_identity, require_reviewer
from app.db import get_session
from app.errors import NotFound
from app.models.challenge import Challenge
from app.models.submission import Submission
from app.schemas.submission import SubmissionCreate, SubmissionPublic

router = APIRouter(prefix="/submissions", tags=["submissions"])

StatusFilter = Literal["pending", "approved", "rejected", "all"]

@router.post("", status_code=201, response_model=SubmissionPublic)
async def create_submission(
    payload: SubmissionCreate,
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
):
    ch = await session.get(Challenge, payload.challenge_id)
    if not ch:
        raise NotFound("Challenge not found")
    s = Submission(owner_uid=identity.uid, challenge_id=ch.id, video_url=payload.video_url, status="pending")
    session.add(s)
    await session.commit()
    await session.refresh(s)
    return s

@router.get("/mine", response_model=list[SubmissionPublic])
async def list_mine(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
    limit: int = Query(default=20, ge=1, le=100),
):
    q = (select(Submission).where(Submission.owner_uid == identity.uid)
         .order_by(Submission.created_at.desc()).limit(limit))
    return (await session.execute(q)).scalars().all()

@router.get("", response_model=list[SubmissionPublic])
async def review_queue(
    session: AsyncSession = Depends(get_session),
    reviewer: Identity = Depends(require_reviewer),
    status: StatusFilter = Query(default="pending"),
    limit: int = Query(default=20, ge=1, le=100),
):
    q = select(Submission)
    if status != "all":
        q = q.where(Submission.status == status)
    if status == "pending":
        # Reviewers can't act on their own items, so don't list them
        q = q.where(Submission.owner_uid != reviewer.uid)
    q = q.order_by(Submission.created_at.asc()).limit(limit)
    return (await session.execute(q)).scalars().all()

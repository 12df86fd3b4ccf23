from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth_deps import Identity, get_identity, require_reviewer
from app.db import get_session
from app.errors import NotFound
from app.models.challenge import Challenge
from app.schemas.challenge import ChallengeCreate, ChallengePublic

router = APIRouter(prefix="/challenges", tags=["challenges"])

@router.post("", status_code=201, response_model=ChallengePublic)
async def create_challenge(
    payload: ChallengeCreate,
    session: AsyncSession = Depends(get_session),
    reviewer: Identity = Depends(require_reviewer),
):
    ch = Challenge(title=payload.title, description=payload.description, points=payload.points, created_by=reviewer.uid)
    session.add(ch)
    await session.commit()
    await session.refresh(ch)
    return ch

@router.get("", response_model=list[ChallengePublic])
async def list_challenges(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
    limit: int = Query(default=50, ge=1, le=200),
):
    q = select(Challenge).order_by(Challenge.created_at.desc()).limit(limit)
    return (await session.execute(q)).scalars().all()

@router.get("/{challenge_id}", response_model=ChallengePublic)
async def get_challenge(
    challenge_id: UUID,
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
):
    ch = await session.get(Challenge, challenge_id)
    if not ch:
        raise NotFound("Challenge not found")
    return ch

from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth_deps import Identity, get_identity
from app.db import get_session
from app.schemas.submission import LeaderboardRow
from app.services.leaderboard import leaderboard

router = APIRouter(tags=["leaderboard"])

@router.get("/leaderboard", response_model=list[LeaderboardRow])
async def get_leaderboard(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
    days: int | None = Query(default=None, ge=1, le=365, description="Only count approvals from the last N days"),
    limit: int = Query(default=20, ge=1, le=100),
):
    return await leaderboard(session, days=days, limit=limit)

from __future__ import annotations
from datetime import datetime, timezone as dt_tz, timedelta
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.review import Activity
from app.models.user import User
from app.schemas.submission import LeaderboardRow
from app.services.review import ACTIVITY_SUBMISSION_APPROVED


async def leaderboard(session: AsyncSession, days: int | None = None, limit: int = 20) -> list[LeaderboardRow]:
    """Points earned from approved submissions, summed per user from the activity feed."""
    points = func.coalesce(func.sum(Activity.points_awarded), 0).label("points")
    approvals = func.count(Activity.id).label("approvals")
    q = (
        select(Activity.user_id, points, approvals)
        .where(Activity.type == ACTIVITY_SUBMISSION_APPROVED)
        .group_by(Activity.user_id)
    )
    if days:
        cutoff = datetime.now(dt_tz.utc) - timedelta(days=days)
        q = q.where(Activity.created_at >= cutoff)
    q = q.order_by(points.desc(), Activity.user_id).limit(limit)
    rows = (await session.execute(q)).all()
    if not rows:
        return []

    users = {
        u.id: u for u in (await session.execute(
            select(User).where(User.id.in_([r.user_id for r in rows]))
        )).scalars().all()
    }
    out = []
    for r in rows:
        u = users.get(r.user_id)
        out.append(LeaderboardRow(
            user_id=r.user_id,
            display_name=(u.display_name or (u.email or "").split("@")[0]) if u else "",
            points=int(r.points),
            total_points=int(u.total_points) if u else 0,
            approvals=int(r.approvals),
        ))
    return out

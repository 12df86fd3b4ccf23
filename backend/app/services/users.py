from __future__ import annotations
from typing import Literal
from uuid import UUID
import structlog
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User

log = structlog.get_logger()

# both support INSERT .. ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


async def update_user_stats(
    session: AsyncSession,
    uid: UUID,
    result: Literal["won", "lost"],
    tricks_landed: int = 0,
    tricks_missed: int = 0,
) -> bool:
    """Bump game aggregates. Returns False if the user has no profile."""
    user = await session.get(User, uid)
    if not user:
        log.warning("stats_skipped_no_profile", uid=str(uid))
        return False
    user.games_played += 1
    user.games_won += 1 if result == "won" else 0
    user.games_lost += 1 if result == "lost" else 0
    user.tricks_landed += int(tricks_landed)
    user.tricks_missed += int(tricks_missed)
    log.info("stats_updated", uid=str(uid), result=result)
    return True


async def increment_points(session: AsyncSession, uid: UUID, points: int) -> None:
    """``total_points += points`` as one upsert; a missing profile is created holding the points."""
    insert = _UPSERT_INSERTS[session.get_bind().dialect.name]
    stmt = insert(User).values(id=uid, total_points=int(points), roles=[])
    stmt = stmt.on_conflict_do_update(
        index_elements=[User.id],
        set_={"total_points": User.total_points + int(points), "updated_at": func.now()},
    )
    await session.execute(stmt)


async def set_roles(session: AsyncSession, uid: UUID, roles: list[str]) -> User | None:
    user = await session.scalar(select(User).where(User.id == uid))
    if not user:
        return None
    user.roles = sorted(set(roles))
    return user

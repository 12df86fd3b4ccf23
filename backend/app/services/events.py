"""
Post-commit follow-ups for game events.

The game transaction has already committed when these run. Each step gets
its own session and transaction, and any failure is logged and dropped:
a mail or stats outage must never leave a finished game looking unfinished.
"""
from __future__ import annotations
from typing import Awaitable, Callable, Iterable
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services import notify
from app.services.games import GameFinished, GameStarted, OpponentInvited, TurnChanged, count_tricks
from app.services.users import update_user_stats

log = structlog.get_logger()

Step = Callable[[AsyncSession], Awaitable[object]]


async def _best_effort(factory: async_sessionmaker[AsyncSession], name: str, event, step: Step) -> bool:
    try:
        async with factory() as session:
            async with session.begin():
                await step(session)
        return True
    except Exception:
        log.warning("game_event_step_failed", step=name, event=type(event).__name__,
                    game_id=str(event.game_id), exc_info=True)
        return False


async def _finish_stats(session: AsyncSession, event: GameFinished) -> None:
    for uid, result in ((event.winner, "won"), (event.loser, "lost")):
        landed, missed = await count_tricks(session, event.game_id, uid)
        await update_user_stats(session, uid, result, landed, missed)


async def _finish_mail(session: AsyncSession, event: GameFinished) -> None:
    await notify.send_game_finished_email_by_uid(session, event.winner, True, event.loser, event.game_id)
    await notify.send_game_finished_email_by_uid(session, event.loser, False, event.winner, event.game_id)


async def dispatch_game_events(factory: async_sessionmaker[AsyncSession], events: Iterable) -> None:
    for event in events:
        if isinstance(event, TurnChanged):
            await _best_effort(factory, "turn_mail", event,
                               lambda s, e=event: notify.send_turn_email_by_uid(s, e.player, e.game_id))
        elif isinstance(event, GameStarted):
            await _best_effort(factory, "started_mail", event,
                               lambda s, e=event: notify.send_game_started_email_by_uid(s, e.creator, e.opponent, e.game_id))
        elif isinstance(event, GameFinished):
            # Stats and mail are independent; one failing must not block the other
            await _best_effort(factory, "finish_stats", event, lambda s, e=event: _finish_stats(s, e))
            await _best_effort(factory, "finish_mail", event, lambda s, e=event: _finish_mail(s, e))
            log.info("game_finished", game_id=str(event.game_id), winner=str(event.winner), loser=str(event.loser))
        elif isinstance(event, OpponentInvited):
            await _best_effort(factory, "invite_mail", event,
                               lambda s, e=event: notify.send_invite_email(s, e.email, e.inviter, e.game_id))
        else:
            log.warning("game_event_unknown", event=type(event).__name__)

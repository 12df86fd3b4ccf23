"""
Persistence around the SKATE rules.

Every mutation runs in one transaction that reads the game row
``FOR UPDATE``, validates it into a ``GameState``, applies a rule from
``app.services.skate`` and writes the result back. Concurrent moves on the
same game therefore serialize instead of overwriting each other.

Notifications and stats are *not* done here: each call returns the events
that happened, and the caller hands them to ``dispatch_game_events`` once
the transaction has committed.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

import structlog
from pydantic import ValidationError
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFound, InvalidRecord
from app.models.game import Game, Round
from app.schemas.game import GameState, RoundCreate
from app.services.skate import (
    InvalidMove,
    LandedOutcome,
    MissedOutcome,
    initialize_game,
    is_valid_move,
    record_landed_trick,
    record_missed_trick,
)

log = structlog.get_logger()

DEFAULT_TRICK_NAME = "Unnamed Trick"


# ---------- events (handled after commit) ----------

@dataclass(frozen=True)
class TurnChanged:
    game_id: UUID
    player: UUID  # whose turn it is now


@dataclass(frozen=True)
class GameStarted:
    game_id: UUID
    creator: UUID  # moves first
    opponent: UUID


@dataclass(frozen=True)
class GameFinished:
    game_id: UUID
    winner: UUID
    loser: UUID


@dataclass(frozen=True)
class OpponentInvited:
    game_id: UUID
    email: str
    inviter: UUID


@dataclass
class MoveOutcome:
    game: Game
    events: list = field(default_factory=list)
    next_turn: UUID | None = None
    new_letters: str | None = None
    game_finished: bool = False
    winner: UUID | None = None
    loser: UUID | None = None
    round: Round | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------- row <-> state ----------

def to_state(row: Game) -> GameState:
    try:
        return GameState.model_validate(row)
    except ValidationError as e:
        log.error("game_record_invalid", game_id=str(row.id), errors=e.errors(include_url=False))
        raise InvalidRecord(f"Game {row.id} failed validation ({e.error_count()} error(s))")


def _write_state(row: Game, state: GameState) -> None:
    row.opponent = state.opponent
    row.letters = state.letters_json()
    row.turn = state.turn
    row.status = state.status
    row.winner = state.winner
    row.loser = state.loser
    row.updated_at = _now()


async def _lock_game(session: AsyncSession, game_id: UUID) -> Game:
    row = await session.get(Game, game_id, with_for_update=True)
    if not row:
        raise NotFound("Game not found")
    return row


async def _lock_for_move(session: AsyncSession, game_id: UUID, player: UUID) -> tuple[Game, GameState]:
    row = await _lock_game(session, game_id)
    state = to_state(row)
    check = is_valid_move(state, player)
    if not check.valid:
        raise InvalidMove(check.reason)
    return row, state


def _outcome(row: Game, result: LandedOutcome | MissedOutcome, rnd: Round | None = None) -> MoveOutcome:
    if isinstance(result, LandedOutcome):
        return MoveOutcome(
            game=row, events=[TurnChanged(row.id, result.next_turn)],
            next_turn=result.next_turn, round=rnd,
        )
    if result.game_finished:
        return MoveOutcome(
            game=row, events=[GameFinished(row.id, result.winner, result.loser)],
            new_letters=result.new_letters, game_finished=True,
            winner=result.winner, loser=result.loser, round=rnd,
        )
    return MoveOutcome(
        game=row, events=[TurnChanged(row.id, result.state.turn)],
        next_turn=result.state.turn, new_letters=result.new_letters, round=rnd,
    )


# ---------- commands ----------

async def create_game(session: AsyncSession, creator: UUID, invite_email: str | None = None) -> MoveOutcome:
    async with session.begin():
        now = _now()
        row = Game(
            created_by=creator,
            opponent=None,
            letters={str(creator): ""},
            turn=creator,
            status="waiting",
            created_at=now,
            updated_at=now,
        )
        session.add(row)
        await session.flush()
    log.info("game_created", game_id=str(row.id), created_by=str(creator))
    events = [OpponentInvited(row.id, invite_email, creator)] if invite_email else []
    return MoveOutcome(game=row, events=events, next_turn=creator)


async def join_game(session: AsyncSession, game_id: UUID, opponent: UUID) -> MoveOutcome:
    async with session.begin():
        row = await _lock_game(session, game_id)
        state = initialize_game(to_state(row), opponent)
        _write_state(row, state)
    log.info("game_started", game_id=str(row.id), opponent=str(opponent))
    return MoveOutcome(game=row, events=[GameStarted(row.id, state.created_by, opponent)], next_turn=state.turn)


async def land_trick(session: AsyncSession, game_id: UUID, player: UUID) -> MoveOutcome:
    async with session.begin():
        row, state = await _lock_for_move(session, game_id, player)
        result = record_landed_trick(state, player)
        _write_state(row, result.state)
    log.info("trick_landed", game_id=str(row.id), player=str(player), next_turn=str(result.next_turn))
    return _outcome(row, result)


async def miss_trick(session: AsyncSession, game_id: UUID, player: UUID) -> MoveOutcome:
    async with session.begin():
        row, state = await _lock_for_move(session, game_id, player)
        result = record_missed_trick(state, player)
        _write_state(row, result.state)
    log.info("trick_missed", game_id=str(row.id), player=str(player),
             letters=result.new_letters, finished=result.game_finished)
    return _outcome(row, result)


async def upload_round(session: AsyncSession, game_id: UUID, player: UUID, payload: RoundCreate) -> MoveOutcome:
    """Record the uploaded trick and apply its outcome in the same transaction."""
    async with session.begin():
        row, state = await _lock_for_move(session, game_id, player)
        # A set trick is landed by definition; only responses can miss
        landed = payload.landed if payload.is_response else True
        rnd = Round(
            game_id=row.id,
            player=player,
            video_url=payload.video_url,
            trick_name=payload.trick_name or DEFAULT_TRICK_NAME,
            is_response=payload.is_response,
            landed=landed,
            created_at=_now(),
        )
        session.add(rnd)
        result = record_landed_trick(state, player) if landed else record_missed_trick(state, player)
        _write_state(row, result.state)
        await session.flush()
    log.info("round_created", game_id=str(row.id), round_id=str(rnd.id), player=str(player),
             is_response=rnd.is_response, landed=landed)
    return _outcome(row, result, rnd)


# ---------- queries ----------

async def get_game(session: AsyncSession, game_id: UUID) -> Game:
    row = await session.get(Game, game_id)
    if not row:
        raise NotFound("Game not found")
    return row


async def list_games(session: AsyncSession, player: UUID, status: str | None = None, limit: int = 50) -> list[Game]:
    q = select(Game).where(or_(Game.created_by == player, Game.opponent == player))
    if status:
        q = q.where(Game.status == status)
    q = q.order_by(Game.updated_at.desc()).limit(limit)
    return list((await session.execute(q)).scalars().all())


async def list_rounds(session: AsyncSession, game_id: UUID) -> list[Round]:
    q = select(Round).where(Round.game_id == game_id).order_by(Round.created_at.asc())
    return list((await session.execute(q)).scalars().all())


async def count_tricks(session: AsyncSession, game_id: UUID, player: UUID) -> tuple[int, int]:
    """(landed, missed) for one player's rounds in one game."""
    rounds = await list_rounds(session, game_id)
    mine = [r for r in rounds if r.player == player]
    landed = sum(1 for r in mine if r.landed)
    return landed, len(mine) - landed

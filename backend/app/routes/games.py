from __future__ import annotations
from typing import Literal
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth_deps import Identity, get_identity
from app.db import get_session, get_session_factory
from app.errors import PermissionDenied
from app.schemas.game import (
    GameCreate,
    GamePublic,
    MoveResult,
    PlayerGameStats,
    RoundCreate,
    RoundPublic,
)
from app.services import games as svc
from app.services.events import dispatch_game_events
from app.services.skate import calculate_game_stats, format_letters_display

router = APIRouter(prefix="/games", tags=["games"])

StatusFilter = Literal["waiting", "in-progress", "finished"]


def _result(outcome: svc.MoveOutcome) -> MoveResult:
    return MoveResult(
        game=GamePublic.model_validate(outcome.game),
        next_turn=outcome.next_turn,
        new_letters=outcome.new_letters,
        game_finished=outcome.game_finished,
        winner=outcome.winner,
        loser=outcome.loser,
        round=RoundPublic.model_validate(outcome.round) if outcome.round else None,
    )


async def _committed(outcome: svc.MoveOutcome, factory: async_sessionmaker) -> MoveResult:
    # State is already committed; follow-ups are best effort
    await dispatch_game_events(factory, outcome.events)
    return _result(outcome)


@router.post("", status_code=201, response_model=MoveResult)
async def create_game(
    payload: GameCreate,
    session: AsyncSession = Depends(get_session),
    factory: async_sessionmaker = Depends(get_session_factory),
    identity: Identity = Depends(get_identity),
):
    outcome = await svc.create_game(session, identity.uid, payload.invite_email)
    return await _committed(outcome, factory)


@router.get("", response_model=list[GamePublic])
async def list_games(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
    status: StatusFilter | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
):
    return await svc.list_games(session, identity.uid, status=status, limit=limit)


@router.get("/{game_id}", response_model=GamePublic)
async def get_game(
    game_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
):
    return await svc.get_game(session, game_id)


@router.get("/{game_id}/stats/{player_id}", response_model=PlayerGameStats)
async def player_stats(
    game_id: UUID = Path(...),
    player_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
):
    state = svc.to_state(await svc.get_game(session, game_id))
    if not state.is_participant(player_id):
        raise PermissionDenied("Not a player in this game")
    letters = state.letters_for(player_id)
    return PlayerGameStats(letters=letters, display=format_letters_display(letters),
                           **calculate_game_stats(state.letters, player_id))


@router.post("/{game_id}/join", response_model=MoveResult)
async def join_game(
    game_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    factory: async_sessionmaker = Depends(get_session_factory),
    identity: Identity = Depends(get_identity),
):
    outcome = await svc.join_game(session, game_id, identity.uid)
    return await _committed(outcome, factory)


@router.get("/{game_id}/rounds", response_model=list[RoundPublic])
async def list_rounds(
    game_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
):
    await svc.get_game(session, game_id)
    return await svc.list_rounds(session, game_id)


@router.post("/{game_id}/rounds", status_code=201, response_model=MoveResult)
async def upload_round(
    payload: RoundCreate,
    game_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    factory: async_sessionmaker = Depends(get_session_factory),
    identity: Identity = Depends(get_identity),
):
    outcome = await svc.upload_round(session, game_id, identity.uid, payload)
    return await _committed(outcome, factory)


@router.post("/{game_id}/landed", response_model=MoveResult)
async def landed(
    game_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    factory: async_sessionmaker = Depends(get_session_factory),
    identity: Identity = Depends(get_identity),
):
    outcome = await svc.land_trick(session, game_id, identity.uid)
    return await _committed(outcome, factory)


@router.post("/{game_id}/missed", response_model=MoveResult)
async def missed(
    game_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    factory: async_sessionmaker = Depends(get_session_factory),
    identity: Identity = Depends(get_identity),
):
    outcome = await svc.miss_trick(session, game_id, identity.uid)
    return await _committed(outcome, factory)

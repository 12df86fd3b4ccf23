"""
SKATE rules as pure functions over ``GameState``.

Nothing in here touches the database. Each mutating rule returns a new
state (``GameState`` is frozen) plus the facts the caller needs to persist
and to decide on notifications.

Letters climb a fixed ladder::

    "" -> "S" -> "SK" -> "SKA" -> "SKAT" -> "SKATE"

and the first player to reach ``"SKATE"`` loses.
"""
from __future__ import annotations
from dataclasses import dataclass
from uuid import UUID

from app.errors import FailedPrecondition
from app.schemas.game import GameState

LETTER_LADDER: tuple[str, ...] = ("", "S", "SK", "SKA", "SKAT", "SKATE")
SKATE = LETTER_LADDER[-1]
CLOSE_TO_LOSING = 4  # "SKAT"


class InvalidMove(FailedPrecondition):
    """A rule precondition does not hold for the requested move."""


@dataclass(frozen=True)
class MoveCheck:
    valid: bool
    reason: str | None = None


@dataclass(frozen=True)
class LandedOutcome:
    state: GameState
    next_turn: UUID


@dataclass(frozen=True)
class MissedOutcome:
    state: GameState
    new_letters: str
    game_finished: bool
    winner: UUID | None = None
    loser: UUID | None = None


# ---------- ladder helpers ----------

def advance_letters(current: str) -> str:
    """Next rung of the ladder. Stays at SKATE; unknown values are treated as SKATE."""
    try:
        idx = LETTER_LADDER.index(current)
    except ValueError:
        return SKATE
    return LETTER_LADDER[min(idx + 1, len(LETTER_LADDER) - 1)]


def has_lost(letters: str) -> bool:
    return letters == SKATE


def next_player(current: UUID, created_by: UUID, opponent: UUID | None) -> UUID | None:
    return opponent if current == created_by else created_by


def calculate_game_stats(letters: dict, player: UUID) -> dict:
    mine = letters.get(player, "")
    return {
        "letters_count": len(mine),
        "is_close": len(mine) >= CLOSE_TO_LOSING,
        "has_lost": has_lost(mine),
    }


def format_letters_display(letters: str) -> list[str]:
    """Five slots: the earned letter, or "" where not earned yet."""
    earned = LETTER_LADDER.index(letters) if letters in LETTER_LADDER else len(SKATE)
    return [ch if i < earned else "" for i, ch in enumerate(SKATE)]


# ---------- validation ----------

def is_valid_move(state: GameState, player: UUID) -> MoveCheck:
    if state.turn != player:
        return MoveCheck(False, "It's not your turn")
    if state.status != "in-progress":
        return MoveCheck(False, "Game is not in progress")
    if not state.is_participant(player):
        return MoveCheck(False, "You are not a player in this game")
    return MoveCheck(True)


def _require_in_progress_turn(state: GameState, player: UUID) -> None:
    if state.status != "in-progress":
        raise InvalidMove(f"Game is not in progress (status: {state.status})")
    if state.turn != player:
        raise InvalidMove("It's not your turn")


# ---------- transitions ----------

def initialize_game(state: GameState, opponent_id: UUID) -> GameState:
    """waiting -> in-progress: seat the opponent, clear letters, creator starts."""
    if state.status != "waiting":
        raise InvalidMove(f"Game cannot be joined (status: {state.status})")
    if opponent_id == state.created_by:
        raise InvalidMove("You cannot join your own game")
    return state.model_copy(update={
        "opponent": opponent_id,
        "letters": {state.created_by: "", opponent_id: ""},
        "turn": state.created_by,
        "status": "in-progress",
    })


def record_landed_trick(state: GameState, player: UUID) -> LandedOutcome:
    _require_in_progress_turn(state, player)
    nxt = next_player(player, state.created_by, state.opponent)
    return LandedOutcome(state=state.model_copy(update={"turn": nxt}), next_turn=nxt)


def record_missed_trick(state: GameState, player: UUID) -> MissedOutcome:
    # A repeated miss from the player who already lost returns the settled
    # result unchanged, so duplicate submissions cannot move winner/loser.
    if state.status == "finished" and state.loser == player:
        return MissedOutcome(
            state=state, new_letters=state.letters_for(player), game_finished=True,
            winner=state.winner, loser=state.loser,
        )
    _require_in_progress_turn(state, player)

    new_letters = advance_letters(state.letters_for(player))
    letters = dict(state.letters)
    letters[player] = new_letters
    other = next_player(player, state.created_by, state.opponent)

    if has_lost(new_letters):
        # Game over; turn is left where it was
        finished = state.model_copy(update={
            "letters": letters,
            "status": "finished",
            "winner": other,
            "loser": player,
        })
        return MissedOutcome(finished, new_letters, True, winner=other, loser=player)

    moved = state.model_copy(update={"letters": letters, "turn": other})
    return MissedOutcome(moved, new_letters, False)

from __future__ import annotations
from datetime import datetime
from typing import Literal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from app.config import settings

SkateLetters = Literal["", "S", "SK", "SKA", "SKAT", "SKATE"]
GameStatus = Literal["waiting", "in-progress", "finished"]


class GameState(BaseModel):
    """
    Validated in-memory view of a ``games`` row. The SKATE rules in
    ``app.services.skate`` only ever see this type, never the ORM object.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID | None = None
    created_by: UUID
    opponent: UUID | None = None
    letters: dict[UUID, SkateLetters] = Field(default_factory=dict)
    turn: UUID | None = None
    status: GameStatus = "waiting"
    winner: UUID | None = None
    loser: UUID | None = None

    @model_validator(mode="after")
    def _check_shape(self):
        if self.status == "in-progress":
            if self.opponent is None:
                raise ValueError("in-progress game has no opponent")
            if self.turn not in (self.created_by, self.opponent):
                raise ValueError("turn must belong to a participant")
        if self.status == "finished" and (self.winner is None or self.loser is None):
            raise ValueError("finished game needs winner and loser")
        return self

    def is_participant(self, player: UUID) -> bool:
        return player == self.created_by or (self.opponent is not None and player == self.opponent)

    def letters_for(self, player: UUID) -> str:
        return self.letters.get(player, "")

    def letters_json(self) -> dict[str, str]:
        return {str(uid): v for uid, v in self.letters.items()}


class GameCreate(BaseModel):
    invite_email: EmailStr | None = None


class RoundCreate(BaseModel):
    video_url: str = Field(min_length=1, max_length=2048)
    trick_name: str | None = None
    is_response: bool = False
    landed: bool = True

    @field_validator("trick_name")
    @classmethod
    def _trick_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("trick_name must not be blank")
        if len(v) > settings.trick_name_max_len:
            raise ValueError(f"trick_name longer than {settings.trick_name_max_len} characters")
        return v


class GamePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_by: UUID
    opponent: UUID | None = None
    letters: dict[str, str]
    turn: UUID | None = None
    status: GameStatus
    winner: UUID | None = None
    loser: UUID | None = None
    created_at: datetime
    updated_at: datetime


class RoundPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    game_id: UUID
    player: UUID
    video_url: str
    trick_name: str
    is_response: bool
    landed: bool
    created_at: datetime


class MoveResult(BaseModel):
    game: GamePublic
    next_turn: UUID | None = None
    new_letters: str | None = None
    game_finished: bool = False
    winner: UUID | None = None
    loser: UUID | None = None
    round: RoundPublic | None = None


class PlayerGameStats(BaseModel):
    letters: str
    letters_count: int
    is_close: bool
    has_lost: bool
    display: list[str]

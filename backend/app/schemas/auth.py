from __future__ import annotations
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from uuid import UUID
from datetime import datetime

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    display_name: str | None = Field(default=None, min_length=1, max_length=64)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class RolesUpdate(BaseModel):
    roles: list[str] = Field(default_factory=list)

class UserStats(BaseModel):
    games_played: int
    games_won: int
    games_lost: int
    tricks_landed: int
    tricks_missed: int

class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr | None = None
    display_name: str | None = None
    roles: list[str] = Field(default_factory=list)
    total_points: int = 0
    created_at: datetime

class UserProfile(UserPublic):
    stats: UserStats

class TokenPair(BaseModel):
    access: str
    refresh: str

from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Header, Path
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import Identity, get_identity, require_admin
from app.db import get_session
from app.errors import FailedPrecondition, NotFound, Unauthenticated
from app.models.user import User
from app.schemas.auth import RegisterRequest, LoginRequest, RolesUpdate, UserProfile, UserPublic, UserStats, TokenPair
from app.security import REFRESH, hash_password, verify_password, make_access_token, make_refresh_token, decode_token
from app.services.users import set_roles

router = APIRouter(tags=["auth"])

def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        roles=list(user.roles or []),
        total_points=user.total_points,
        created_at=user.created_at,
        stats=UserStats(
            games_played=user.games_played,
            games_won=user.games_won,
            games_lost=user.games_lost,
            tricks_landed=user.tricks_landed,
            tricks_missed=user.tricks_missed,
        ),
    )

@router.post("/auth/register", status_code=201, response_model=UserPublic)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_session)):
    email = payload.email.lower()
    exists = await session.scalar(select(User).where(User.email == email))
    if exists:
        raise FailedPrecondition("Email already registered")
    user = User(
        email=email,
        display_name=payload.display_name or email.split("@")[0],
        password_hash=hash_password(payload.password),
        roles=[],
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user

@router.post("/auth/login", response_model=TokenPair)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)):
    user = await session.scalar(select(User).where(User.email == payload.email.lower()))
    if not user or not user.password_hash or not verify_password(payload.password, user.password_hash):
        raise Unauthenticated("Invalid credentials")
    return TokenPair(access=make_access_token(str(user.id), user.roles or []), refresh=make_refresh_token(str(user.id)))

@router.post("/auth/refresh", response_model=TokenPair)
async def refresh(authorization: str | None = Header(None), session: AsyncSession = Depends(get_session)):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthenticated("Missing refresh token")
    token = authorization.split(" ", 1)[1]
    try:
        data = decode_token(token)
    except Exception:
        raise Unauthenticated("Invalid token")
    if data.get("type") != REFRESH:
        raise Unauthenticated("Wrong token type")
    try:
        uid = UUID(str(data.get("sub")))
    except ValueError:
        raise Unauthenticated("Invalid token subject")
    user = await session.get(User, uid)
    if not user:
        raise Unauthenticated("User not found")
    # Roles are re-read so grants and revocations apply on the next refresh
    return TokenPair(access=make_access_token(str(user.id), user.roles or []), refresh=make_refresh_token(str(user.id)))

@router.get("/auth/me", response_model=UserProfile)
async def me(identity: Identity = Depends(get_identity), session: AsyncSession = Depends(get_session)):
    user = await session.get(User, identity.uid)
    if not user:
        raise Unauthenticated("User not found")
    return _profile(user)

@router.get("/users/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_identity),
):
    user = await session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return _profile(user)

@router.post("/admin/users/{user_id}/roles", response_model=UserPublic)
async def update_roles(
    payload: RolesUpdate,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    admin: Identity = Depends(require_admin),
):
    user = await set_roles(session, user_id, payload.roles)
    if not user:
        raise NotFound("User not found")
    await session.commit()
    return user

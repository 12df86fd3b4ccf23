from __future__ import annotations
import uuid
from typing import Iterable
from sqlalchemy import select, func
from app.db import SessionLocal
from app.models.user import User
from app.security import make_access_token


def auth_headers(uid: uuid.UUID, roles: Iterable[str] = ()) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_access_token(str(uid), roles)}"}


async def seed(*objs) -> None:
    async with SessionLocal() as s:
        s.add_all(objs)
        await s.commit()


async def make_user(email: str | None = None, **kw) -> User:
    uid = uuid.uuid4()
    u = User(
        id=uid,
        email=email or f"u-{uid.hex[:8]}@example.com",
        display_name=kw.pop("display_name", f"sk8_{uid.hex[:6]}"),
        roles=kw.pop("roles", []),
        **kw,
    )
    await seed(u)
    return u


async def fetch(model, pk):
    async with SessionLocal() as s:
        return await s.get(model, pk)


async def count(model, *where) -> int:
    async with SessionLocal() as s:
        q = select(func.count()).select_from(model)
        for w in where:
            q = q.where(w)
        return int(await s.scalar(q) or 0)


async def rows(model, *where, order_by=None) -> list:
    async with SessionLocal() as s:
        q = select(model)
        for w in where:
            q = q.where(w)
        if order_by is not None:
            q = q.order_by(order_by)
        return list((await s.execute(q)).scalars().all())

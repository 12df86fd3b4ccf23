from __future__ import annotations
import asyncio
import uuid

import httpx
import pytest
from httpx import AsyncClient

from app.main import app
from app.models.game import Game, Round
from app.models.mail import MailMessage
from app.models.user import User
from app.services import events as events_mod
from app.services import notify
from helpers import auth_headers, fetch, make_user, rows


def _client() -> AsyncClient:
    return AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


async def _mail_to(email: str) -> list[MailMessage]:
    return [m for m in await rows(MailMessage) if email in m.to]


async def _started_game(ac: AsyncClient, u1: User, u2: User) -> str:
    r = await ac.post("/games", json={}, headers=auth_headers(u1.id))
    assert r.status_code == 201, r.text
    game_id = r.json()["game"]["id"]
    r = await ac.post(f"/games/{game_id}/join", headers=auth_headers(u2.id))
    assert r.status_code == 200, r.text
    return game_id


@pytest.mark.asyncio
async def test_create_invite_and_join():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        r = await ac.post("/games", json={"invite_email": "friend@example.com"}, headers=auth_headers(u1.id))
        assert r.status_code == 201, r.text
        game = r.json()["game"]
        assert game["status"] == "waiting"
        assert game["opponent"] is None
        assert game["letters"] == {str(u1.id): ""}

        invites = await _mail_to("friend@example.com")
        assert len(invites) == 1
        assert invites[0].subject == "You're invited to a SKATE game!"
        assert game["id"] in invites[0].text

        # can't play yourself
        r = await ac.post(f"/games/{game['id']}/join", headers=auth_headers(u1.id))
        assert r.status_code == 409
        assert r.json()["error"]["code"] == "failed-precondition"

        r = await ac.post(f"/games/{game['id']}/join", headers=auth_headers(u2.id))
        assert r.status_code == 200
        started = r.json()["game"]
        assert started["status"] == "in-progress"
        assert started["opponent"] == str(u2.id)
        assert started["turn"] == str(u1.id)
        assert started["letters"] == {str(u1.id): "", str(u2.id): ""}

        # creator hears the game started, not that a trick is waiting
        started_mail = await _mail_to(u1.email)
        assert [m.subject for m in started_mail] == ["Your SKATE game has started"]
        assert "You set the first trick" in started_mail[0].text

        # a third player can't join a running game
        r = await ac.post(f"/games/{game['id']}/join", headers=auth_headers(uuid.uuid4()))
        assert r.status_code == 409

        r = await ac.get("/games?status=in-progress", headers=auth_headers(u2.id))
        assert [g["id"] for g in r.json()] == [game["id"]]


@pytest.mark.asyncio
async def test_rounds_drive_turns_and_letters():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)

        # out of turn
        r = await ac.post(f"/games/{gid}/rounds", json={"video_url": "v/1.mp4"}, headers=auth_headers(u2.id))
        assert r.status_code == 409
        assert r.json()["error"]["message"] == "It's not your turn"

        # u1 sets a trick: always landed, turn passes
        r = await ac.post(f"/games/{gid}/rounds", json={"video_url": "v/1.mp4", "landed": False},
                          headers=auth_headers(u1.id))
        assert r.status_code == 201, r.text
        body = r.json()
        assert body["round"]["landed"] is True
        assert body["round"]["trick_name"] == "Unnamed Trick"
        assert body["next_turn"] == str(u2.id)

        # u2 misses the response
        r = await ac.post(f"/games/{gid}/rounds",
                          json={"video_url": "v/2.mp4", "trick_name": "Tre flip", "is_response": True, "landed": False},
                          headers=auth_headers(u2.id))
        assert r.status_code == 201, r.text
        body = r.json()
        assert body["new_letters"] == "S"
        assert body["game_finished"] is False
        assert body["game"]["letters"][str(u2.id)] == "S"
        assert body["game"]["turn"] == str(u1.id)

        r = await ac.get(f"/games/{gid}/rounds", headers=auth_headers(u1.id))
        assert [(x["player"], x["trick_name"], x["landed"]) for x in r.json()] == [
            (str(u1.id), "Unnamed Trick", True),
            (str(u2.id), "Tre flip", False),
        ]

        r = await ac.get(f"/games/{gid}/stats/{u2.id}", headers=auth_headers(u1.id))
        assert r.json() == {"letters": "S", "letters_count": 1, "is_close": False, "has_lost": False,
                            "display": ["S", "", "", "", ""]}


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["   ", "x" * 101])
async def test_bad_trick_name_is_rejected(name):
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        r = await ac.post(f"/games/{gid}/rounds", json={"video_url": "v.mp4", "trick_name": name},
                          headers=auth_headers(u1.id))
        assert r.status_code == 422


@pytest.mark.asyncio
async def test_play_to_skate_finishes_game_updates_stats_and_mails():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        h1, h2 = auth_headers(u1.id), auth_headers(u2.id)

        for expected in ["S", "SK", "SKA", "SKAT"]:
            assert (await ac.post(f"/games/{gid}/landed", headers=h1)).status_code == 200
            r = await ac.post(f"/games/{gid}/missed", headers=h2)
            assert r.status_code == 200
            assert r.json()["new_letters"] == expected
            assert r.json()["game_finished"] is False

        assert (await ac.post(f"/games/{gid}/landed", headers=h1)).status_code == 200
        r = await ac.post(f"/games/{gid}/missed", headers=h2)
        assert r.status_code == 200
        body = r.json()
        assert body["new_letters"] == "SKATE"
        assert body["game_finished"] is True
        assert body["winner"] == str(u1.id)
        assert body["loser"] == str(u2.id)
        assert body["game"]["status"] == "finished"

        # nothing moves after the end
        assert (await ac.post(f"/games/{gid}/missed", headers=h2)).status_code == 409
        assert (await ac.post(f"/games/{gid}/landed", headers=h1)).status_code == 409

    game = await fetch(Game, uuid.UUID(gid))
    assert (game.status, game.winner, game.loser) == ("finished", u1.id, u2.id)

    winner = await fetch(User, u1.id)
    loser = await fetch(User, u2.id)
    assert (winner.games_played, winner.games_won, winner.games_lost) == (1, 1, 0)
    assert (loser.games_played, loser.games_won, loser.games_lost) == (1, 0, 1)

    assert "You won the SKATE game!" in [m.subject for m in await _mail_to(u1.email)]
    assert "Game over - Better luck next time!" in [m.subject for m in await _mail_to(u2.email)]


@pytest.mark.asyncio
async def test_trick_counts_come_from_rounds():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        h1, h2 = auth_headers(u1.id), auth_headers(u2.id)
        for _ in range(5):
            await ac.post(f"/games/{gid}/rounds", json={"video_url": "set.mp4"}, headers=h1)
            await ac.post(f"/games/{gid}/rounds", json={"video_url": "resp.mp4", "is_response": True, "landed": False},
                          headers=h2)

    winner = await fetch(User, u1.id)
    loser = await fetch(User, u2.id)
    assert (winner.tricks_landed, winner.tricks_missed) == (5, 0)
    assert (loser.tricks_landed, loser.tricks_missed) == (0, 5)


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_move(monkeypatch):
    u1 = await make_user()
    u2 = await make_user()

    async def boom(*a, **kw):
        raise RuntimeError("mail backend down")

    monkeypatch.setattr(notify, "send_turn_email_by_uid", boom)
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        r = await ac.post(f"/games/{gid}/landed", headers=auth_headers(u1.id))
        assert r.status_code == 200
        assert r.json()["next_turn"] == str(u2.id)

    assert (await fetch(Game, uuid.UUID(gid))).turn == u2.id
    assert await _mail_to(u2.email) == []


@pytest.mark.asyncio
async def test_stats_failure_still_sends_finish_mail(monkeypatch):
    u1 = await make_user()
    u2 = await make_user()

    async def boom(*a, **kw):
        raise RuntimeError("stats store down")

    monkeypatch.setattr(events_mod, "update_user_stats", boom)
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        for _ in range(5):
            await ac.post(f"/games/{gid}/landed", headers=auth_headers(u1.id))
            r = await ac.post(f"/games/{gid}/missed", headers=auth_headers(u2.id))
            assert r.status_code == 200
        assert r.json()["game_finished"] is True

    assert (await fetch(User, u1.id)).games_played == 0
    assert "You won the SKATE game!" in [m.subject for m in await _mail_to(u1.email)]


@pytest.mark.asyncio
async def test_turn_mail_skips_player_without_profile():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        r = await ac.post(f"/games/{gid}/landed", headers=auth_headers(u1.id))
        assert r.status_code == 200
    assert [m.subject for m in await _mail_to(u2.email)] == ["Your turn in SKATE"]

    # no users row, so the started mail is skipped rather than failing the join
    ghost = uuid.uuid4()
    async with _client() as ac:
        r = await ac.post("/games", json={}, headers=auth_headers(ghost))
        gid = r.json()["game"]["id"]
        r = await ac.post(f"/games/{gid}/join", headers=auth_headers(u1.id))
        assert r.status_code == 200
        assert r.json()["game"]["turn"] == str(ghost)


@pytest.mark.asyncio
async def test_unknown_game_and_missing_auth():
    async with _client() as ac:
        r = await ac.get(f"/games/{uuid.uuid4()}", headers=auth_headers(uuid.uuid4()))
        assert r.status_code == 404
        r = await ac.post(f"/games/{uuid.uuid4()}/missed", headers=auth_headers(uuid.uuid4()))
        assert r.status_code == 404
        r = await ac.post("/games", json={})
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_simultaneous_moves_serialize():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        h1 = auth_headers(u1.id)
        first, second = await asyncio.gather(
            ac.post(f"/games/{gid}/missed", headers=h1),
            ac.post(f"/games/{gid}/missed", headers=h1),
        )

    results = sorted([first, second], key=lambda r: r.status_code)
    assert [r.status_code for r in results] == [200, 409]
    assert results[1].json()["error"]["message"] == "It's not your turn"

    game = await fetch(Game, uuid.UUID(gid))
    assert game.letters == {str(u1.id): "S", str(u2.id): ""}
    assert game.turn == u2.id


@pytest.mark.asyncio
async def test_duplicate_response_upload_records_one_round():
    u1 = await make_user()
    u2 = await make_user()
    async with _client() as ac:
        gid = await _started_game(ac, u1, u2)
        await ac.post(f"/games/{gid}/landed", headers=auth_headers(u1.id))
        # u2 double-submits the same missed response
        body = {"video_url": "resp.mp4", "is_response": True, "landed": False}
        responses = await asyncio.gather(*[
            ac.post(f"/games/{gid}/rounds", json=body, headers=auth_headers(u2.id)) for _ in range(3)
        ])

    assert sorted(r.status_code for r in responses) == [201, 409, 409]
    game = await fetch(Game, uuid.UUID(gid))
    assert game.letters[str(u2.id)] == "S"
    assert len(await rows(Round, Round.game_id == game.id)) == 1

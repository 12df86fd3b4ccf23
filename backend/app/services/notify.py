from __future__ import annotations
from uuid import UUID
import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.models.mail import MailMessage
from app.models.user import User

log = structlog.get_logger()


def game_link(game_id: UUID) -> str:
    return f"{settings.public_base_url}/game/{game_id}"


async def get_user_email(session: AsyncSession, uid: UUID) -> str | None:
    user = await session.get(User, uid)
    return user.email if user and user.email else None


async def enqueue_mail(session: AsyncSession, to: str, subject: str, text: str) -> MailMessage:
    msg = MailMessage(to=[to], subject=subject, text=text)
    session.add(msg)
    await session.flush()
    log.info("mail_queued", mail_id=str(msg.id), subject=subject)
    return msg


async def send_turn_email_by_uid(session: AsyncSession, player_uid: UUID, game_id: UUID) -> MailMessage | None:
    email = await get_user_email(session, player_uid)
    if not email:
        log.warning("mail_skipped_no_email", uid=str(player_uid), kind="turn")
        return None
    return await enqueue_mail(
        session,
        email,
        "Your turn in SKATE",
        f"Opponent uploaded a trick. Respond here: {game_link(game_id)}",
    )


async def send_game_finished_email_by_uid(
    session: AsyncSession, player_uid: UUID, won: bool, opponent_uid: UUID, game_id: UUID
) -> MailMessage | None:
    email = await get_user_email(session, player_uid)
    if not email:
        log.warning("mail_skipped_no_email", uid=str(player_uid), kind="game_finished")
        return None
    opponent_email = await get_user_email(session, opponent_uid)

    if won:
        subject = "You won the SKATE game!"
        against = f" against {opponent_email}" if opponent_email else ""
        text = f"Congratulations! You won the SKATE game{against}. View game: {game_link(game_id)}"
    else:
        subject = "Game over - Better luck next time!"
        who = f" {opponent_email} won this SKATE game." if opponent_email else ""
        text = f"Game over!{who} Ready for a rematch? {settings.public_base_url}/lobby"
    return await enqueue_mail(session, email, subject, text)


async def send_invite_email(session: AsyncSession, to: str, inviter_uid: UUID, game_id: UUID) -> MailMessage:
    inviter = await session.get(User, inviter_uid)
    who = (inviter.display_name or inviter.email) if inviter else None
    return await enqueue_mail(
        session,
        to,
        "You're invited to a SKATE game!",
        f"{who or 'A skater'} has challenged you to a game of SKATE on {settings.app_display_name}! "
        f"Join here: {game_link(game_id)}",
    )


async def send_game_started_email_by_uid(
    session: AsyncSession, creator_uid: UUID, opponent_uid: UUID, game_id: UUID
) -> MailMessage | None:
    email = await get_user_email(session, creator_uid)
    if not email:
        log.warning("mail_skipped_no_email", uid=str(creator_uid), kind="game_started")
        return None
    opponent = await session.get(User, opponent_uid)
    who = (opponent.display_name or opponent.email) if opponent else None
    return await enqueue_mail(
        session,
        email,
        "Your SKATE game has started",
        f"{who or 'Your opponent'} joined your game. You set the first trick: {game_link(game_id)}",
    )

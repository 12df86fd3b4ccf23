from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

def _ts(name: str, nullable: bool = False, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("now()") if default else None,
        nullable=nullable,
    )

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("display_name", sa.String(length=64), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("roles", sa.JSON(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("games_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("games_won", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("games_lost", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tricks_landed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tricks_missed", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("total_points >= 0", name="ck_users_points_nonneg"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "challenges",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        _ts("created_at"),
        sa.CheckConstraint("points >= 0", name="ck_challenges_points_nonneg"),
    )

    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("owner_uid", sa.Uuid(), nullable=False),
        sa.Column("challenge_id", sa.Uuid(), nullable=False),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        _ts("created_at"),
        _ts("updated_at", nullable=True, default=False),
        sa.Column("reviewed_by", sa.Uuid(), nullable=True),
        _ts("reviewed_at", nullable=True, default=False),
        _ts("approved_at", nullable=True, default=False),
        _ts("rejected_at", nullable=True, default=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.CheckConstraint("status IN ('pending','approved','rejected')", name="ck_submissions_status"),
        sa.CheckConstraint("reviewed_by IS NULL OR reviewed_by <> owner_uid", name="ck_submissions_no_self_review"),
    )
    op.create_index("ix_submissions_owner_uid", "submissions", ["owner_uid"])
    op.create_index("ix_submissions_challenge_id", "submissions", ["challenge_id"])

    op.create_table(
        "approvals",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reviewed_by", sa.Uuid(), nullable=False),
        sa.Column("decision", sa.String(length=16), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        _ts("reviewed_at"),
        # One decision per submission, even if two transactions race
        sa.UniqueConstraint("submission_id", name="uq_approvals_one_per_submission"),
    )
    op.create_index("ix_approvals_submission_id", "approvals", ["submission_id"])

    op.create_table(
        "activity",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
    )
    op.create_index("ix_activity_user_id", "activity", ["user_id"])
    op.create_index("ix_activity_submission_id", "activity", ["submission_id"])

    op.create_table(
        "games",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("opponent", sa.Uuid(), nullable=True),
        sa.Column("letters", sa.JSON(), nullable=False),
        sa.Column("turn", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="waiting"),
        sa.Column("winner", sa.Uuid(), nullable=True),
        sa.Column("loser", sa.Uuid(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("status IN ('waiting','in-progress','finished')", name="ck_games_status"),
    )
    op.create_index("ix_games_created_by", "games", ["created_by"])
    op.create_index("ix_games_opponent", "games", ["opponent"])

    op.create_table(
        "rounds",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("game_id", sa.Uuid(), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("player", sa.Uuid(), nullable=False),
        sa.Column("video_url", sa.Text(), nullable=False),
        sa.Column("trick_name", sa.String(length=100), nullable=False),
        sa.Column("is_response", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("landed", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
    )
    op.create_index("ix_rounds_game_id", "rounds", ["game_id"])

    op.create_table(
        "mail",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("to", sa.JSON(), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        _ts("created_at"),
    )

def downgrade() -> None:
    op.drop_table("mail")
    op.drop_index("ix_rounds_game_id", table_name="rounds")
    op.drop_table("rounds")
    op.drop_index("ix_games_opponent", table_name="games")
    op.drop_index("ix_games_created_by", table_name="games")
    op.drop_table("games")
    op.drop_index("ix_activity_submission_id", table_name="activity")
    op.drop_index("ix_activity_user_id", table_name="activity")
    op.drop_table("activity")
    op.drop_index("ix_approvals_submission_id", table_name="approvals")
    op.drop_table("approvals")
    op.drop_index("ix_submissions_challenge_id", table_name="submissions")
    op.drop_index("ix_submissions_owner_uid", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("challenges")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

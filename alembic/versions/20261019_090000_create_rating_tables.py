"""Create DMR rating tables

Revision ID: 5d1e0c7a9b32
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# Revision identifiers, used by Alembic.
revision: str = "5d1e0c7a9b32"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "player_ratings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("season_id", sa.String(length=64), nullable=False),
        sa.Column("sport", sa.String(length=20), nullable=False),
        sa.Column("game_type", sa.String(length=10), nullable=False),
        sa.Column("rating", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("rating_deviation", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("volatility", sa.Float(), nullable=False),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_provisional", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("peak_rating", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("peak_rating_date", sa.DateTime(), nullable=True),
        sa.Column("lowest_rating", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("last_updated_at", sa.DateTime(), nullable=True),
        sa.Column("last_match_id", sa.String(length=64), nullable=True),
        sa.Column("rd_at_last_match", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("volatility > 0", name="ck_player_ratings_volatility_positive"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "player_id", "season_id", "sport", "game_type",
            name="uq_player_ratings_identity",
        ),
    )
    op.create_index("idx_player_ratings_last_updated", "player_ratings", ["last_updated_at"])
    op.create_index("idx_player_ratings_season", "player_ratings", ["season_id"])

    op.create_table(
        "rating_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_rating_id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.String(length=64), nullable=True),
        sa.Column("rating_before", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("rating_after", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("delta", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("rd_before", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("rd_after", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("reason", sa.String(length=30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["player_rating_id"], ["player_ratings.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rating_history_player_rating_id", "rating_history", ["player_rating_id"])
    op.create_index("ix_rating_history_match_id", "rating_history", ["match_id"])

    op.create_table(
        "initial_ratings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("singles", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("doubles", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("rd", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_initial_ratings_player_id", "initial_ratings", ["player_id"])

    op.create_table(
        "rating_parameter_sets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("params", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("source", sa.String(length=30), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("idx_rating_parameter_sets_active", "rating_parameter_sets", ["is_active"])


def downgrade() -> None:
    op.drop_index("idx_rating_parameter_sets_active", table_name="rating_parameter_sets")
    op.drop_table("rating_parameter_sets")

    op.drop_index("ix_initial_ratings_player_id", table_name="initial_ratings")
    op.drop_table("initial_ratings")

    op.drop_index("ix_rating_history_match_id", table_name="rating_history")
    op.drop_index("ix_rating_history_player_rating_id", table_name="rating_history")
    op.drop_table("rating_history")

    op.drop_index("idx_player_ratings_season", table_name="player_ratings")
    op.drop_index("idx_player_ratings_last_updated", table_name="player_ratings")
    op.drop_table("player_ratings")

"""Initial schema: artists, catalog, events, prediction lists and import statuses.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

IMPORT_STAGES = (
    "initializing",
    "resolving",
    "syncing-core",
    "syncing-catalog",
    "syncing-events",
    "finalizing",
    "completed",
    "failed",
)


def _timestamp(name: str, *, nullable: bool) -> sa.Column[object]:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "artist",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("normalized_name", sa.String(255), nullable=False),
        sa.Column("catalog_id", sa.String(64), nullable=True),
        sa.Column("ticketing_id", sa.String(64), nullable=True),
        sa.Column("other_provider_id", sa.String(64), nullable=True),
        sa.Column("genres", sa.JSON(), nullable=False),
        sa.Column("popularity", sa.Integer(), nullable=True),
        sa.Column("followers", sa.Integer(), nullable=True),
        sa.Column("image_url", sa.String(512), nullable=True),
        _timestamp("last_synced_at", nullable=True),
        _timestamp("last_full_sync_at", nullable=True),
        _timestamp("created_at", nullable=False),
        _timestamp("updated_at", nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_artist"),
        sa.UniqueConstraint("catalog_id", name="uq_artist_catalog_id"),
        sa.UniqueConstraint("ticketing_id", name="uq_artist_ticketing_id"),
        sa.UniqueConstraint("other_provider_id", name="uq_artist_other_provider_id"),
    )
    op.create_index("ix_artist_normalized_name", "artist", ["normalized_name"])
    op.create_index("ix_artist_last_synced_at", "artist", ["last_synced_at"])

    op.create_table(
        "catalog_item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("artist_id", sa.Uuid(), nullable=False),
        sa.Column("catalog_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("album_title", sa.String(512), nullable=True),
        sa.Column("album_type", sa.String(32), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("popularity", sa.Integer(), nullable=False),
        sa.Column("isrc", sa.String(16), nullable=True),
        sa.Column("preview_url", sa.String(512), nullable=True),
        _timestamp("updated_at", nullable=False),
        sa.ForeignKeyConstraint(
            ["artist_id"],
            ["artist.id"],
            name="fk_catalog_item_artist_id_artist",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_catalog_item"),
        sa.UniqueConstraint("artist_id", "catalog_id", name="uq_catalog_item_artist_catalog"),
    )

    op.create_table(
        "scheduled_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("artist_id", sa.Uuid(), nullable=False),
        sa.Column("ticketing_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(512), nullable=False),
        sa.Column("starts_on", sa.Date(), nullable=True),
        _timestamp("starts_at", nullable=True),
        sa.Column("venue_name", sa.String(255), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("country", sa.String(8), nullable=True),
        sa.Column("url", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        _timestamp("updated_at", nullable=False),
        sa.ForeignKeyConstraint(
            ["artist_id"],
            ["artist.id"],
            name="fk_scheduled_event_artist_id_artist",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_scheduled_event"),
        sa.UniqueConstraint(
            "artist_id", "ticketing_id", name="uq_scheduled_event_artist_ticketing"
        ),
    )

    op.create_table(
        "prediction_list",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("artist_id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.String(64), nullable=True),
        _timestamp("created_at", nullable=False),
        sa.ForeignKeyConstraint(
            ["artist_id"],
            ["artist.id"],
            name="fk_prediction_list_artist_id_artist",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_prediction_list"),
    )
    op.create_index(
        "ix_prediction_list_artist_event", "prediction_list", ["artist_id", "event_id"]
    )

    op.create_table(
        "prediction_list_entry",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("prediction_list_id", sa.Integer(), nullable=False),
        sa.Column("catalog_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["prediction_list_id"],
            ["prediction_list.id"],
            name="fk_prediction_list_entry_prediction_list_id_prediction_list",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_prediction_list_entry"),
        sa.UniqueConstraint(
            "prediction_list_id", "position", name="uq_prediction_list_entry_list_position"
        ),
    )

    op.create_table(
        "import_status",
        sa.Column("import_key", sa.String(255), nullable=False),
        sa.Column(
            "stage",
            sa.Enum(*IMPORT_STAGES, name="importstage", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("progress_percent", sa.Integer(), nullable=False),
        sa.Column("message", sa.String(1024), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        _timestamp("started_at", nullable=False),
        _timestamp("updated_at", nullable=False),
        _timestamp("completed_at", nullable=True),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("alias_of", sa.String(255), nullable=True),
        sa.Column("redirect_to", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("import_key", name="pk_import_status"),
    )
    op.create_index("ix_import_status_stage", "import_status", ["stage"])


def downgrade() -> None:
    op.drop_index("ix_import_status_stage", table_name="import_status")
    op.drop_table("import_status")
    op.drop_table("prediction_list_entry")
    op.drop_index("ix_prediction_list_artist_event", table_name="prediction_list")
    op.drop_table("prediction_list")
    op.drop_table("scheduled_event")
    op.drop_table("catalog_item")
    op.drop_index("ix_artist_last_synced_at", table_name="artist")
    op.drop_index("ix_artist_normalized_name", table_name="artist")
    op.drop_table("artist")

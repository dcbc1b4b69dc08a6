"""SQLAlchemy table metadata for the setlistsync datastore."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from setlistsync.domain.model import ImportStage

if TYPE_CHECKING:
    from enum import StrEnum


UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

artist_table = Table(
    "artist",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("slug", String(255), nullable=False),
    Column("normalized_name", String(255), nullable=False),
    Column("catalog_id", String(64), nullable=True, unique=True),
    Column("ticketing_id", String(64), nullable=True, unique=True),
    Column("other_provider_id", String(64), nullable=True, unique=True),
    Column("genres", JSON, nullable=False, default=list),
    Column("popularity", Integer, nullable=True),
    Column("followers", Integer, nullable=True),
    Column("image_url", String(512), nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=True),
    Column("last_full_sync_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_artist_normalized_name", "normalized_name"),
    Index("ix_artist_last_synced_at", "last_synced_at"),
)

catalog_item_table = Table(
    "catalog_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "artist_id",
        UUIDColumnType,
        ForeignKey("artist.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("catalog_id", String(64), nullable=False),
    Column("title", String(512), nullable=False),
    Column("album_title", String(512), nullable=True),
    Column("album_type", String(32), nullable=True),
    Column("duration_ms", Integer, nullable=True),
    Column("popularity", Integer, nullable=False, default=0),
    Column("isrc", String(16), nullable=True),
    Column("preview_url", String(512), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("artist_id", "catalog_id", name="uq_catalog_item_artist_catalog"),
)

scheduled_event_table = Table(
    "scheduled_event",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "artist_id",
        UUIDColumnType,
        ForeignKey("artist.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("ticketing_id", String(64), nullable=False),
    Column("name", String(512), nullable=False),
    Column("starts_on", Date, nullable=True),
    Column("starts_at", UTCDateTime(), nullable=True),
    Column("venue_name", String(255), nullable=True),
    Column("city", String(255), nullable=True),
    Column("country", String(8), nullable=True),
    Column("url", String(1024), nullable=True),
    Column("status", String(32), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("artist_id", "ticketing_id", name="uq_scheduled_event_artist_ticketing"),
)

prediction_list_table = Table(
    "prediction_list",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "artist_id",
        UUIDColumnType,
        ForeignKey("artist.id", ondelete="CASCADE"),
        nullable=False,
    ),
    # ticketing id of the event; NULL for the artist-level list
    Column("event_id", String(64), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_prediction_list_artist_event", "artist_id", "event_id"),
)

prediction_list_entry_table = Table(
    "prediction_list_entry",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "prediction_list_id",
        Integer,
        ForeignKey("prediction_list.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("catalog_id", String(64), nullable=False),
    Column("title", String(512), nullable=False),
    Column("position", Integer, nullable=False),
    UniqueConstraint(
        "prediction_list_id", "position", name="uq_prediction_list_entry_list_position"
    ),
)

import_status_table = Table(
    "import_status",
    mapper_registry.metadata,
    Column("import_key", String(255), primary_key=True),
    Column(
        "stage",
        Enum(
            ImportStage,
            native_enum=False,
            values_callable=_enum_values,
            length=32,
        ),
        nullable=False,
    ),
    Column("progress_percent", Integer, nullable=False, default=0),
    Column("message", String(1024), nullable=False, default=""),
    Column("error", Text, nullable=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Column("completed_at", UTCDateTime(), nullable=True),
    Column("entity_id", UUIDColumnType, nullable=True),
    Column("alias_of", String(255), nullable=True),
    # set on alias rows only: the key this row resolves to
    Column("redirect_to", String(255), nullable=True),
    Index("ix_import_status_stage", "stage"),
)


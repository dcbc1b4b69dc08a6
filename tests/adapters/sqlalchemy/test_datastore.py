from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text

from setlistsync.domain.errors import DatastoreError
from setlistsync.domain.model import (
    ArtistProfile,
    CatalogItem,
    ContentCounts,
    ExternalIdentifierSet,
    UpsertOutcome,
)

from tests.support.fakes import make_event, make_items

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from setlistsync.adapters.sqlalchemy import SqlAlchemyArtistDatastore

SYNCED = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _profile(catalog_id: str = "cat-aurora", name: str = "Aurora Belt") -> ArtistProfile:
    return ArtistProfile(
        catalog_id=catalog_id,
        name=name,
        genres=("shoegaze", "dream pop"),
        popularity=61,
        followers=12000,
        image_url="https://img.example/aurora.jpg",
    )


def test_upsert_entity_creates_and_finds_artist(sql_datastore: SqlAlchemyArtistDatastore) -> None:
    entity_id = sql_datastore.upsert_entity(
        _profile(), ExternalIdentifierSet(ticketing_id="tm-aurora"), synced_at=SYNCED
    )

    record = sql_datastore.get_entity(entity_id)
    assert record is not None
    assert record.name == "Aurora Belt"
    assert record.slug == "aurora-belt"
    assert record.genres == ("shoegaze", "dream pop")
    assert record.last_synced_at == SYNCED
    assert record.identifiers == ExternalIdentifierSet(
        catalog_id="cat-aurora", ticketing_id="tm-aurora", display_name="Aurora Belt"
    )
    by_ticketing = sql_datastore.find_entity(ExternalIdentifierSet(ticketing_id="tm-aurora"))
    by_name = sql_datastore.find_entity(ExternalIdentifierSet(display_name="AURORA  belt"))
    assert by_ticketing is not None
    assert by_name is not None
    assert by_ticketing.id == by_name.id == entity_id


def test_upsert_entity_updates_in_place(sql_datastore: SqlAlchemyArtistDatastore) -> None:
    first = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)

    second = sql_datastore.upsert_entity(
        _profile(name="Aurora Belt (Band)"),
        ExternalIdentifierSet(ticketing_id="tm-aurora"),
        synced_at=SYNCED + timedelta(hours=1),
    )

    assert second == first
    record = sql_datastore.get_entity(first)
    assert record is not None
    assert record.name == "Aurora Belt (Band)"
    assert record.identifiers.ticketing_id == "tm-aurora"


def test_name_lookup_is_skipped_when_catalog_id_given(
    sql_datastore: SqlAlchemyArtistDatastore,
) -> None:
    sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)

    found = sql_datastore.find_entity(
        ExternalIdentifierSet(catalog_id="cat-other", display_name="Aurora Belt")
    )

    assert found is None


def test_ticketing_id_of_another_artist_is_not_attached(
    sql_datastore: SqlAlchemyArtistDatastore,
) -> None:
    owner = sql_datastore.upsert_entity(
        _profile(), ExternalIdentifierSet(ticketing_id="tm-shared"), synced_at=SYNCED
    )
    other = sql_datastore.upsert_entity(
        _profile("cat-other", "Other Artist"), ExternalIdentifierSet(), synced_at=SYNCED
    )

    again = sql_datastore.upsert_entity(
        _profile("cat-other", "Other Artist"),
        ExternalIdentifierSet(catalog_id="cat-other", ticketing_id="tm-shared"),
        synced_at=SYNCED,
    )

    assert again == other != owner
    record = sql_datastore.get_entity(other)
    owner_record = sql_datastore.get_entity(owner)
    assert record is not None
    assert owner_record is not None
    assert record.identifiers.ticketing_id is None
    assert owner_record.identifiers.ticketing_id == "tm-shared"


def test_catalog_and_event_upserts_report_outcomes(
    sql_datastore: SqlAlchemyArtistDatastore,
) -> None:
    entity_id = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)

    assert sql_datastore.upsert_catalog_items(entity_id, make_items(3)) == UpsertOutcome(3, 0)
    assert sql_datastore.upsert_catalog_items(entity_id, make_items(4)) == UpsertOutcome(1, 3)
    assert sql_datastore.upsert_events(entity_id, [make_event("ev-1")]) == UpsertOutcome(1, 0)
    assert sql_datastore.content_counts(entity_id) == ContentCounts(catalog_items=4, events=1)


def test_create_default_records_per_upcoming_event(
    sql_datastore: SqlAlchemyArtistDatastore,
    sqlite_database: Engine,
) -> None:
    entity_id = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)
    sql_datastore.upsert_catalog_items(entity_id, make_items(7))
    sql_datastore.upsert_events(
        entity_id,
        [
            make_event("ev-past", starts_on=date(2026, 1, 10)),
            make_event("ev-1", starts_on=date(2026, 5, 1)),
            make_event("ev-2", starts_on=date(2026, 6, 1)),
        ],
    )

    created = sql_datastore.create_default_records(entity_id, song_count=5, today=date(2026, 3, 1))
    again = sql_datastore.create_default_records(entity_id, song_count=5, today=date(2026, 3, 1))

    assert created == 2
    assert again == 0
    with sqlite_database.connect() as conn:
        events = conn.execute(
            text("SELECT event_id FROM prediction_list ORDER BY event_id")
        ).scalars().all()
        positions = conn.execute(
            text(
                "SELECT e.catalog_id FROM prediction_list_entry e "
                "JOIN prediction_list l ON l.id = e.prediction_list_id "
                "WHERE l.event_id = 'ev-1' ORDER BY e.position"
            )
        ).scalars().all()
    assert events == ["ev-1", "ev-2"]
    assert positions == ["trk-7", "trk-6", "trk-5", "trk-4", "trk-3"]


def test_create_default_records_needs_songs(sql_datastore: SqlAlchemyArtistDatastore) -> None:
    entity_id = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)
    sql_datastore.upsert_events(entity_id, [make_event("ev-1")])

    created = sql_datastore.create_default_records(entity_id, song_count=5, today=date(2026, 3, 1))

    assert created == 0


def test_artist_level_list_without_upcoming_events(
    sql_datastore: SqlAlchemyArtistDatastore,
) -> None:
    entity_id = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)
    sql_datastore.upsert_catalog_items(
        entity_id, [CatalogItem(catalog_id="only", title="Only Song", popularity=3)]
    )

    created = sql_datastore.create_default_records(entity_id, song_count=5, today=date(2026, 3, 1))

    assert created == 1


def test_stale_listing_and_mark_synced(sql_datastore: SqlAlchemyArtistDatastore) -> None:
    old = sql_datastore.upsert_entity(
        _profile("cat-old", "Old"), ExternalIdentifierSet(), synced_at=SYNCED - timedelta(days=3)
    )
    fresh = sql_datastore.upsert_entity(
        _profile("cat-fresh", "Fresh"), ExternalIdentifierSet(), synced_at=SYNCED
    )

    stale = sql_datastore.list_stale_entities(synced_before=SYNCED - timedelta(days=1), limit=10)
    assert [record.id for record in stale] == [old]

    sql_datastore.mark_synced(old, at=SYNCED, full=True)
    sql_datastore.mark_synced(fresh, at=SYNCED, full=False)

    old_record = sql_datastore.get_entity(old)
    fresh_record = sql_datastore.get_entity(fresh)
    assert old_record is not None
    assert fresh_record is not None
    assert old_record.last_full_sync_at == SYNCED
    assert fresh_record.last_full_sync_at is None
    assert not sql_datastore.list_stale_entities(synced_before=SYNCED - timedelta(days=2), limit=10)


def test_full_stale_listing_uses_the_catalog_sync_stamp(
    sql_datastore: SqlAlchemyArtistDatastore,
) -> None:
    artist = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)
    cutoff = SYNCED - timedelta(hours=24)

    assert sql_datastore.list_stale_entities(synced_before=cutoff, limit=10) == []
    full = sql_datastore.list_stale_entities(synced_before=cutoff, limit=10, full=True)
    assert [record.id for record in full] == [artist]

    sql_datastore.mark_synced(artist, at=SYNCED, full=True)

    assert sql_datastore.list_stale_entities(synced_before=cutoff, limit=10, full=True) == []


def test_partial_run_keeps_the_previous_sync_stamp(
    sql_datastore: SqlAlchemyArtistDatastore,
) -> None:
    artist = sql_datastore.upsert_entity(_profile(), ExternalIdentifierSet(), synced_at=SYNCED)
    later = SYNCED + timedelta(minutes=5)

    sql_datastore.mark_synced(artist, at=later, full=True, partial=True)

    record = sql_datastore.get_entity(artist)
    assert record is not None
    assert record.last_synced_at == SYNCED
    assert record.last_full_sync_at == later


def test_database_errors_become_datastore_errors(
    sql_datastore: SqlAlchemyArtistDatastore,
    sqlite_database: Engine,
) -> None:
    with sqlite_database.begin() as conn:
        conn.execute(text("DROP TABLE prediction_list_entry"))
        conn.execute(text("DROP TABLE prediction_list"))
        conn.execute(text("DROP TABLE catalog_item"))
        conn.execute(text("DROP TABLE scheduled_event"))
        conn.execute(text("DROP TABLE artist"))

    with pytest.raises(DatastoreError, match="lookup"):
        sql_datastore.find_entity(ExternalIdentifierSet(catalog_id="cat-aurora"))

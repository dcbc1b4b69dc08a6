from __future__ import annotations

import uuid

import pytest

from setlistsync.domain.errors import ResolutionError, TransientProviderError
from setlistsync.domain.import_pipeline import (
    curate_catalog,
    is_live_recording,
    select_default_songs,
)
from setlistsync.domain.model import CatalogItem, ExternalIdentifierSet, Provider

from tests.support.fakes import make_event, make_items
from tests.support.pipeline import PipelineHarness


@pytest.mark.parametrize(
    ("title", "album", "expected"),
    [
        ("Northern Lights", "Studio Album", False),
        ("Northern Lights (Live)", "Studio Album", True),
        ("Northern Lights - Acoustic Version", None, True),
        ("Northern Lights [Live at Wembley]", None, True),
        ("Northern Lights", "Live at the Roundhouse", True),
        ("Northern Lights", "MTV Unplugged", True),
        ("Alive", "Studio Album", False),
        ("Deliver", "Livestock", False),
    ],
)
def test_is_live_recording(title: str, album: str | None, *, expected: bool) -> None:
    item = CatalogItem(catalog_id="t", title=title, album_title=album)

    assert is_live_recording(item) is expected


def test_is_live_recording_honours_flag() -> None:
    assert is_live_recording(CatalogItem(catalog_id="t", title="Song", is_live=True))


def test_curate_catalog_drops_live_and_deduplicates() -> None:
    items = [
        CatalogItem(catalog_id="a", title="Song A", isrc="usabc0000001", popularity=10),
        CatalogItem(catalog_id="a2", title="Song A (Remastered)", isrc="USABC0000001", popularity=40),
        CatalogItem(catalog_id="b", title="Song B", popularity=5),
        CatalogItem(catalog_id="b2", title="song b!", popularity=1),
        CatalogItem(catalog_id="c", title="Song C (Live)", popularity=99),
    ]

    curated = curate_catalog(items)

    assert [item.catalog_id for item in curated.items] == ["a2", "b"]
    assert curated.skipped_live == 1
    assert curated.deduplicated == 2


def test_select_default_songs_by_popularity() -> None:
    items = make_items(8)

    picked = select_default_songs(items, count=3)

    assert [item.catalog_id for item in picked] == ["trk-8", "trk-7", "trk-6"]


def test_sync_core_upserts_profile(harness: PipelineHarness) -> None:
    harness.catalog.add_artist("cat-aurora", "Aurora Belt", genres=("shoegaze",))

    entity_id, payload = harness.steps.sync_core(ExternalIdentifierSet(catalog_id="cat-aurora"))

    record = harness.datastore.records[entity_id]
    assert record.name == "Aurora Belt"
    assert record.last_synced_at == harness.clock.now
    assert payload == {"name": "Aurora Belt", "genres": 1}


def test_sync_core_requires_catalog_id(harness: PipelineHarness) -> None:
    with pytest.raises(ResolutionError):
        harness.steps.sync_core(ExternalIdentifierSet(display_name="Aurora Belt"))


def test_sync_catalog_reports_counts(harness: PipelineHarness) -> None:
    live = CatalogItem(catalog_id="live-1", title="Song 1 (Live)")
    harness.catalog.add_artist("cat-aurora", "Aurora Belt", items=[*make_items(4), live])
    entity_id = uuid.uuid4()

    payload = harness.steps.sync_catalog(entity_id, ExternalIdentifierSet(catalog_id="cat-aurora"))

    assert payload == {
        "items": 4,
        "inserted": 4,
        "updated": 0,
        "skipped_live": 1,
        "deduplicated": 0,
    }


def test_sync_events_retries_transient_failures(harness: PipelineHarness) -> None:
    harness.ticketing.add_attraction("tm-1", "Aurora Belt", events=[make_event("ev-1")])
    harness.ticketing.fail_next("get_events", TransientProviderError(Provider.TICKETMASTER, "503"))
    entity_id = uuid.uuid4()

    payload = harness.steps.sync_events(entity_id, "tm-1")

    assert payload == {"events": 1, "inserted": 1, "updated": 0}
    assert harness.ticketing.count("get_events") == 2


def test_create_defaults_per_upcoming_event(harness: PipelineHarness) -> None:
    entity_id = uuid.uuid4()
    harness.datastore.upsert_catalog_items(entity_id, make_items(7))
    harness.datastore.upsert_events(entity_id, [make_event("ev-1"), make_event("ev-2")])

    assert harness.steps.create_defaults(entity_id) == {"created": 2}
    assert harness.steps.create_defaults(entity_id) == {"created": 0}
    _, _, songs = harness.datastore.prediction_lists[0]
    assert songs == ["trk-7", "trk-6", "trk-5", "trk-4", "trk-3"]

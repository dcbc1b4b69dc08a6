from __future__ import annotations

from setlistsync.adapters.memory import InMemoryImportStatusStore
from setlistsync.domain.import_pipeline import StatusTracker
from setlistsync.domain.model import ImportOptions, ImportStage, ImportStatus

from tests.support.fakes import FakeClock

KEY = "provisional:catalog:cat-aurora"


def _tracker(options: ImportOptions) -> tuple[StatusTracker, InMemoryImportStatusStore]:
    clock = FakeClock()
    store = InMemoryImportStatusStore()
    status = ImportStatus.initial(KEY, now=clock())
    return StatusTracker(store, status, options=options, clock=clock), store


def test_total_counts_resolution_core_and_enabled_steps() -> None:
    full, _ = _tracker(ImportOptions.full())
    light, _ = _tracker(ImportOptions.light())
    core_only, _ = _tracker(
        ImportOptions(sync_catalog=False, sync_events=False, create_defaults=False)
    )

    assert full.total_steps == 5
    assert light.total_steps == 4
    assert core_only.total_steps == 2


def test_advance_writes_progress_from_finished_steps() -> None:
    tracker, store = _tracker(ImportOptions.light())
    tracker.step_finished()

    status = tracker.advance(ImportStage.SYNCING_CORE, "core")

    assert status.progress_percent == 25
    assert store.read(KEY) == status


def test_step_finished_is_capped_at_total() -> None:
    tracker, _ = _tracker(ImportOptions(sync_catalog=False, sync_events=False, create_defaults=False))
    for _ in range(5):
        tracker.step_finished()

    assert tracker.progress == 100


def test_fail_and_complete_are_written() -> None:
    tracker, store = _tracker(ImportOptions.full())
    tracker.advance(ImportStage.RESOLVING, "resolving")

    failed = tracker.fail("no match found")

    assert failed.stage is ImportStage.FAILED
    assert store.read(KEY) == failed

    other, other_store = _tracker(ImportOptions.full())
    completed = other.complete("done")
    assert completed.progress_percent == 100
    assert other_store.read(KEY) == completed

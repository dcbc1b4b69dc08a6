from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from setlistsync.domain.errors import WorkerPoolSaturatedError
from setlistsync.domain.import_service import WorkerPool
from setlistsync.domain.model import (
    ArtistProfile,
    ExternalIdentifierSet,
    ImportStage,
    permanent_import_key,
)

from tests.support.fakes import make_items
from tests.support.pipeline import PipelineHarness


class BlockingProfile:
    """Hold ``get_by_id`` until released so a run stays live."""

    def __init__(self, harness: PipelineHarness) -> None:
        self.entered = threading.Event()
        self.release = threading.Event()
        self._original = harness.catalog.get_by_id
        harness.catalog.get_by_id = self  # pyright: ignore[reportAttributeAccessIssue]

    def __call__(self, catalog_id: str) -> ArtistProfile:
        self.entered.set()
        self.release.wait(timeout=5)
        return self._original(catalog_id)


def test_start_import_runs_in_background(harness: PipelineHarness) -> None:
    harness.catalog.add_artist("cat-aurora", "Aurora Belt", items=make_items(3))
    service = harness.service()

    ticket = service.start_import(ExternalIdentifierSet(catalog_id="cat-aurora"))
    service.shutdown(wait=True)

    assert ticket.accepted
    assert ticket.import_key == "provisional:catalog:cat-aurora"
    status = service.get_status(ticket.import_key)
    assert status is not None
    assert status.stage is ImportStage.COMPLETED
    assert status.import_key.startswith("artist:")


def test_start_import_refuses_duplicate_live_run(harness: PipelineHarness) -> None:
    harness.catalog.add_artist("cat-aurora", "Aurora Belt")
    blocker = BlockingProfile(harness)
    service = harness.service(max_workers=2)
    identifiers = ExternalIdentifierSet(catalog_id="cat-aurora")

    try:
        first = service.start_import(identifiers)
        assert blocker.entered.wait(timeout=5)
        second = service.start_import(identifiers)
    finally:
        blocker.release.set()
        service.shutdown(wait=True)

    assert first.accepted
    assert not second.accepted
    assert second.existing_status is not None
    assert second.existing_status.import_key == first.import_key


def test_known_artist_uses_permanent_key(harness: PipelineHarness) -> None:
    harness.catalog.add_artist("cat-aurora", "Aurora Belt")
    record = harness.datastore.add_record("Aurora Belt", catalog_id="cat-aurora")
    service = harness.service()

    report = service.run_import(ExternalIdentifierSet(display_name="aurora belt"))

    assert report.import_key == permanent_import_key(record.id)
    assert report.success
    service.shutdown()


def test_start_import_rejects_empty_identifiers(harness: PipelineHarness) -> None:
    service = harness.service()

    with pytest.raises(ValueError, match="At least one"):
        service.start_import(ExternalIdentifierSet())
    service.shutdown()


def test_saturated_pool_fails_the_admitted_status(harness: PipelineHarness) -> None:
    harness.catalog.add_artist("cat-a", "Artist A")
    harness.catalog.add_artist("cat-b", "Artist B")
    blocker = BlockingProfile(harness)
    service = harness.service(max_workers=1, max_pending=0)

    try:
        service.start_import(ExternalIdentifierSet(catalog_id="cat-a"))
        assert blocker.entered.wait(timeout=5)
        with pytest.raises(WorkerPoolSaturatedError):
            service.start_import(ExternalIdentifierSet(catalog_id="cat-b"))
    finally:
        blocker.release.set()
        service.shutdown(wait=True)

    status = service.get_status("provisional:catalog:cat-b")
    assert status is not None
    assert status.stage is ImportStage.FAILED
    assert "queue is full" in (status.error or "")


def test_list_active_and_cleanup(harness: PipelineHarness) -> None:
    service = harness.service()
    live = harness.guard.begin_run("provisional:name:live")
    done = harness.guard.begin_run("provisional:name:done")
    harness.store.write(done.status.complete(now=harness.clock.now))

    assert service.list_active() == [live.status]

    harness.clock.advance(timedelta(hours=25))
    removed = service.cleanup()

    assert removed == 1
    assert service.get_status("provisional:name:done") is None
    assert service.get_status("provisional:name:live") == live.status
    service.shutdown()


def test_worker_pool_rejects_work_beyond_capacity() -> None:
    pool = WorkerPool(max_workers=1, max_pending=1)
    gate = threading.Event()
    try:
        first = pool.submit(gate.wait, 5)
        second = pool.submit(lambda: "queued")
        with pytest.raises(WorkerPoolSaturatedError, match="queue is full"):
            pool.submit(lambda: "rejected")
        gate.set()
        assert first.result(timeout=5) is True
        assert second.result(timeout=5) == "queued"
    finally:
        gate.set()
        pool.shutdown()


def test_concurrent_start_imports_admit_a_single_run(harness: PipelineHarness) -> None:
    harness.catalog.add_artist("cat-aurora", "Aurora Belt")
    blocker = BlockingProfile(harness)
    service = harness.service(max_workers=2, max_pending=8)
    identifiers = ExternalIdentifierSet(catalog_id="cat-aurora")
    callers = 6
    barrier = threading.Barrier(callers)
    tickets = []
    tickets_lock = threading.Lock()

    def start() -> None:
        barrier.wait(timeout=5)
        ticket = service.start_import(identifiers)
        with tickets_lock:
            tickets.append(ticket)

    threads = [threading.Thread(target=start) for _ in range(callers)]
    try:
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
    finally:
        blocker.release.set()
        service.shutdown(wait=True)

    assert len(tickets) == callers
    assert sum(ticket.accepted for ticket in tickets) == 1
    assert {ticket.import_key for ticket in tickets} == {"provisional:catalog:cat-aurora"}

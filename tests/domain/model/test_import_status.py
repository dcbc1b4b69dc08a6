from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from setlistsync.domain.model import ImportStage, ImportStatus, InvalidStatusTransitionError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _status() -> ImportStatus:
    return ImportStatus.initial("provisional:name:aurorabelt", now=NOW)


def test_initial_status() -> None:
    status = _status()

    assert status.stage is ImportStage.INITIALIZING
    assert status.progress_percent == 0
    assert not status.is_terminal


def test_advance_moves_forward_and_records_entity() -> None:
    entity_id = uuid.uuid4()

    status = _status().advance(
        ImportStage.SYNCING_CORE,
        progress=20,
        message="core",
        now=NOW + timedelta(seconds=5),
        entity_id=entity_id,
    )

    assert status.stage is ImportStage.SYNCING_CORE
    assert status.progress_percent == 20
    assert status.entity_id == entity_id
    assert status.updated_at == NOW + timedelta(seconds=5)


def test_advance_rejects_backwards_stage() -> None:
    status = _status().advance(ImportStage.SYNCING_CATALOG, progress=40, message="", now=NOW)

    with pytest.raises(InvalidStatusTransitionError):
        status.advance(ImportStage.RESOLVING, progress=40, message="", now=NOW)


def test_advance_rejects_decreasing_progress() -> None:
    status = _status().advance(ImportStage.RESOLVING, progress=40, message="", now=NOW)

    with pytest.raises(InvalidStatusTransitionError, match="progress"):
        status.advance(ImportStage.SYNCING_CORE, progress=20, message="", now=NOW)


def test_advance_cannot_reach_terminal_stage() -> None:
    with pytest.raises(InvalidStatusTransitionError):
        _status().advance(ImportStage.COMPLETED, progress=100, message="", now=NOW)


def test_progress_is_clamped() -> None:
    status = _status().advance(ImportStage.RESOLVING, progress=250, message="", now=NOW)

    assert status.progress_percent == 100


def test_complete_sets_full_progress() -> None:
    status = _status().complete(now=NOW, message="done")

    assert status.stage is ImportStage.COMPLETED
    assert status.progress_percent == 100
    assert status.completed_at == NOW


def test_fail_keeps_progress_and_is_terminal() -> None:
    status = _status().advance(ImportStage.SYNCING_CORE, progress=40, message="", now=NOW)

    failed = status.fail("no match found", now=NOW)

    assert failed.stage is ImportStage.FAILED
    assert failed.error == "no match found"
    assert failed.progress_percent == 40
    with pytest.raises(InvalidStatusTransitionError):
        failed.complete(now=NOW)
    with pytest.raises(InvalidStatusTransitionError):
        failed.fail("again", now=NOW)


def test_is_stale_only_for_live_runs() -> None:
    window = timedelta(minutes=30)
    status = _status()

    assert not status.is_stale(NOW + timedelta(minutes=29), window)
    assert status.is_stale(NOW + timedelta(minutes=31), window)
    assert not status.complete(now=NOW).is_stale(NOW + timedelta(days=1), window)


def test_estimated_seconds_remaining() -> None:
    status = _status()
    assert status.estimated_seconds_remaining(NOW) is None

    halfway = status.advance(ImportStage.SYNCING_CATALOG, progress=50, message="", now=NOW)

    assert halfway.estimated_seconds_remaining(NOW + timedelta(seconds=30)) == pytest.approx(30)
    assert halfway.complete(now=NOW).estimated_seconds_remaining(NOW) == 0.0


def test_rekey_records_alias() -> None:
    entity_id = uuid.uuid4()

    moved = _status().rekey(f"artist:{entity_id}", alias_of="provisional:name:aurorabelt")

    assert moved.import_key == f"artist:{entity_id}"
    assert moved.alias_of == "provisional:name:aurorabelt"
    assert moved.started_at == NOW

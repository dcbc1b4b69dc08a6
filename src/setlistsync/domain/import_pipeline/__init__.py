"""Import pipeline: concurrency guard, status tracking, steps and orchestration."""

from __future__ import annotations

from .guard import ConcurrencyGuard, RunAdmission
from .orchestrator import ImportOrchestrator
from .progress import StatusTracker
from .steps import (
    CuratedCatalog,
    ImportSteps,
    curate_catalog,
    is_live_recording,
    select_default_songs,
)

__all__ = [
    "ConcurrencyGuard",
    "CuratedCatalog",
    "ImportOrchestrator",
    "ImportSteps",
    "RunAdmission",
    "StatusTracker",
    "curate_catalog",
    "is_live_recording",
    "select_default_songs",
]

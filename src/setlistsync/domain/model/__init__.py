"""Public domain model surface."""

from __future__ import annotations

from setlistsync.domain.model.catalog import (
    ArtistCandidate,
    ArtistProfile,
    ArtistRecord,
    CatalogItem,
    ContentCounts,
    ScheduledEvent,
    UpsertOutcome,
)
from setlistsync.domain.model.enums import ImportStage, Provider, SchedulerState, StepName, StepStatus
from setlistsync.domain.model.identifiers import (
    ExternalIdentifierSet,
    derive_import_key,
    is_exact_name_match,
    is_provisional,
    names_match,
    normalize_name,
    permanent_import_key,
    provisional_import_key,
    slugify,
)
from setlistsync.domain.model.reports import ImportOptions, ImportTicket, RunReport, StepResult
from setlistsync.domain.model.status import ImportStatus, InvalidStatusTransitionError, clamp_progress

__all__ = [
    "ArtistCandidate",
    "ArtistProfile",
    "ArtistRecord",
    "CatalogItem",
    "ContentCounts",
    "ExternalIdentifierSet",
    "ImportOptions",
    "ImportStage",
    "ImportStatus",
    "ImportTicket",
    "InvalidStatusTransitionError",
    "Provider",
    "RunReport",
    "ScheduledEvent",
    "SchedulerState",
    "StepName",
    "StepResult",
    "StepStatus",
    "UpsertOutcome",
    "clamp_progress",
    "derive_import_key",
    "is_exact_name_match",
    "is_provisional",
    "names_match",
    "normalize_name",
    "permanent_import_key",
    "provisional_import_key",
    "slugify",
]

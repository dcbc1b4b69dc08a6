"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    ArtistDatastore,
    ArtistRepository,
    CatalogItemRepository,
    PredictionListRepository,
    Repository,
    ScheduledEventRepository,
)
from .providers import CatalogProvider, TicketingProvider
from .scheduling import JobTrigger
from .status_store import ImportStatusStore
from .unit_of_work import ArtistRepositories, ArtistUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "ArtistDatastore",
    "ArtistRepositories",
    "ArtistRepository",
    "ArtistUnitOfWork",
    "CatalogItemRepository",
    "CatalogProvider",
    "ImportStatusStore",
    "JobTrigger",
    "PredictionListRepository",
    "Repository",
    "RepositoryCollection",
    "ScheduledEventRepository",
    "TicketingProvider",
    "UnitOfWork",
]

"""SQLAlchemy adapter package for setlistsync."""

from __future__ import annotations

from .datastore import SqlAlchemyArtistDatastore
from .mappings import mapper_registry
from .repositories import (
    SqlAlchemyArtistRepository,
    SqlAlchemyCatalogItemRepository,
    SqlAlchemyPredictionListRepository,
    SqlAlchemyScheduledEventRepository,
)
from .status_store import SqlAlchemyImportStatusStore
from .unit_of_work import (
    SqlAlchemyArtistUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyArtistDatastore",
    "SqlAlchemyArtistRepository",
    "SqlAlchemyArtistUnitOfWork",
    "SqlAlchemyCatalogItemRepository",
    "SqlAlchemyImportStatusStore",
    "SqlAlchemyPredictionListRepository",
    "SqlAlchemyScheduledEventRepository",
    "StartupError",
    "is_started",
    "mapper_registry",
    "shutdown",
    "startup",
]

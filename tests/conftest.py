from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from setlistsync.adapters.sqlalchemy import SqlAlchemyArtistDatastore, SqlAlchemyImportStatusStore
from setlistsync.adapters.sqlalchemy.unit_of_work import shutdown, startup

from tests.support.pipeline import PipelineHarness

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so worker threads see the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_database(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()


@pytest.fixture
def sql_datastore(sqlite_database: Engine) -> SqlAlchemyArtistDatastore:
    del sqlite_database
    return SqlAlchemyArtistDatastore()


@pytest.fixture
def sql_status_store(sqlite_database: Engine) -> SqlAlchemyImportStatusStore:
    return SqlAlchemyImportStatusStore(sqlite_database)


@pytest.fixture
def harness() -> PipelineHarness:
    return PipelineHarness()

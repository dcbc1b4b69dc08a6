"""A fully wired import pipeline over in-memory fakes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from setlistsync.adapters.memory import InMemoryImportStatusStore
from setlistsync.domain.identity import IdentityResolver
from setlistsync.domain.import_pipeline import ConcurrencyGuard, ImportOrchestrator, ImportSteps
from setlistsync.domain.import_service import ImportService, WorkerPool
from setlistsync.domain.retry import RetryPolicy

from tests.support.fakes import (
    FakeCatalogProvider,
    FakeClock,
    FakeTicketingProvider,
    InMemoryArtistDatastore,
    RecordingSleep,
)

STALENESS = timedelta(minutes=30)
MAX_RUN = timedelta(minutes=15)


@dataclass
class PipelineHarness:
    clock: FakeClock = field(default_factory=FakeClock)
    catalog: FakeCatalogProvider = field(default_factory=FakeCatalogProvider)
    ticketing: FakeTicketingProvider = field(default_factory=FakeTicketingProvider)
    datastore: InMemoryArtistDatastore = field(default_factory=InMemoryArtistDatastore)
    store: InMemoryImportStatusStore = field(default_factory=InMemoryImportStatusStore)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: RecordingSleep = field(init=False)
    guard: ConcurrencyGuard = field(init=False)
    resolver: IdentityResolver = field(init=False)
    steps: ImportSteps = field(init=False)
    orchestrator: ImportOrchestrator = field(init=False)

    def __post_init__(self) -> None:
        self.sleep = RecordingSleep(self.clock)
        self.guard = ConcurrencyGuard(self.store, staleness_window=STALENESS, clock=self.clock)
        self.resolver = IdentityResolver(
            catalog=self.catalog,
            ticketing=self.ticketing,
            datastore=self.datastore,
            retry_policy=self.retry_policy,
            sleep=self.sleep,
            clock=self.clock,
        )
        self.steps = ImportSteps(
            catalog=self.catalog,
            ticketing=self.ticketing,
            datastore=self.datastore,
            retry_policy=self.retry_policy,
            sleep=self.sleep,
            clock=self.clock,
        )
        self.orchestrator = ImportOrchestrator(
            resolver=self.resolver,
            steps=self.steps,
            guard=self.guard,
            max_run_duration=MAX_RUN,
            clock=self.clock,
        )

    def service(self, *, max_workers: int = 1, max_pending: int = 0) -> ImportService:
        return ImportService(
            orchestrator=self.orchestrator,
            pool=WorkerPool(max_workers=max_workers, max_pending=max_pending),
            status_retention=timedelta(hours=24),
            alias_ttl=timedelta(hours=1),
            clock=self.clock,
        )

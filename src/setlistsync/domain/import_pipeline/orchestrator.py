"""Sequence the import steps for one artist and report on each of them."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, NoReturn

from setlistsync.domain.errors import DatastoreError, ImportPipelineError, RunTimeoutError
from setlistsync.domain.model import (
    ImportOptions,
    ImportStage,
    RunReport,
    StepName,
    StepStatus,
    derive_import_key,
    permanent_import_key,
)
from setlistsync.domain.time_windows import Deadline, utcnow

from .progress import StatusTracker

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta
    from uuid import UUID

    from setlistsync.domain.identity import IdentityResolver
    from setlistsync.domain.model import ExternalIdentifierSet, ImportStatus, StepResult
    from setlistsync.domain.time_windows import Clock

    from .guard import ConcurrencyGuard
    from .steps import ImportSteps

log = getLogger(__name__)


class _RunAborted(Exception):  # noqa: N818
    """Internal signal: the run has been failed and written; stop sequencing."""


class ImportOrchestrator:
    """Run resolution, core sync and the optional steps for one artist.

    Resolution and core sync are fatal: if either fails the run fails. Catalog,
    events and defaults fail independently and only mark their own step, unless
    the failure came from the datastore, which fails the whole run.
    """

    def __init__(
        self,
        *,
        resolver: IdentityResolver,
        steps: ImportSteps,
        guard: ConcurrencyGuard,
        max_run_duration: timedelta,
        clock: Clock = utcnow,
    ) -> None:
        self.resolver = resolver
        self.steps = steps
        self.guard = guard
        self.max_run_duration = max_run_duration
        self._clock = clock

    def run(
        self,
        identifiers: ExternalIdentifierSet,
        options: ImportOptions | None = None,
        *,
        entity_id: UUID | None = None,
        admitted: ImportStatus | None = None,
    ) -> RunReport:
        """Run an import.

        ``admitted`` is the status a caller already claimed through the guard; without
        it the run claims its own key first and returns an ``already_running`` report
        if another run holds it.
        """

        options = options or ImportOptions.full()
        if admitted is None:
            admission = self.guard.begin_run(derive_import_key(identifiers, entity_id=entity_id))
            if not admission.proceed:
                return RunReport(
                    import_key=admission.import_key,
                    identifiers=identifiers,
                    already_running=True,
                    existing_status=admission.status,
                )
            admitted = admission.status

        report = RunReport(
            import_key=admitted.import_key,
            identifiers=identifiers,
            entity_id=entity_id,
            started_at=self._clock(),
        )
        tracker = StatusTracker(self.guard.store, admitted, options=options, clock=self._clock)
        deadline = Deadline.after(self.max_run_duration, clock=self._clock)
        try:
            self._execute(report, tracker, options, deadline)
        except _RunAborted:
            pass
        except Exception as exc:
            log.exception("Import %s crashed", report.import_key)
            if not tracker.status.is_terminal:
                tracker.fail(f"unexpected error: {exc}")
            report.error = str(exc)
            report.skip_pending(self._clock(), "run aborted")
            raise
        finally:
            report.ended_at = self._clock()
        return report

    def _execute(
        self,
        report: RunReport,
        tracker: StatusTracker,
        options: ImportOptions,
        deadline: Deadline,
    ) -> None:
        tracker.advance(ImportStage.RESOLVING, "Resolving artist identifiers")
        try:
            resolved = self.resolver.resolve(report.identifiers, deadline=deadline)
        except ImportPipelineError as exc:
            self._abort(report, tracker, str(exc))
        report.identifiers = resolved.identifiers
        tracker.step_finished()
        self._check_deadline(report, tracker, deadline)

        name = resolved.identifiers.display_name or resolved.identifiers.catalog_id
        tracker.advance(ImportStage.SYNCING_CORE, f"Syncing profile for {name}")
        core = report.step(StepName.SYNC_CORE)
        core.start(self._clock())
        try:
            entity_id, payload = self.steps.sync_core(resolved.identifiers, deadline=deadline)
        except ImportPipelineError as exc:
            core.fail(self._clock(), str(exc))
            self._abort(report, tracker, str(exc))
        core.complete(self._clock(), payload)
        report.entity_id = entity_id
        tracker.step_finished()

        admission = self.guard.promote(tracker.status, permanent_import_key(entity_id))
        if not admission.proceed:
            report.success = True
            report.already_running = True
            report.existing_status = admission.status
            report.import_key = admission.import_key
            report.skip_pending(self._clock(), f"handed over to {admission.import_key}")
            return
        tracker.replace(admission.status)
        report.import_key = admission.import_key
        tracker.advance(ImportStage.SYNCING_CORE, "Profile synced", entity_id=entity_id)

        identifiers = resolved.identifiers
        self._optional_step(
            report,
            tracker,
            StepName.SYNC_CATALOG,
            ImportStage.SYNCING_CATALOG,
            options,
            deadline,
            run=lambda: self.steps.sync_catalog(entity_id, identifiers, deadline=deadline),
        )
        ticketing_id = identifiers.ticketing_id
        self._optional_step(
            report,
            tracker,
            StepName.SYNC_EVENTS,
            ImportStage.SYNCING_EVENTS,
            options,
            deadline,
            run=lambda: self.steps.sync_events(entity_id, ticketing_id or "", deadline=deadline),
            skip_reason=None if ticketing_id else "no ticketing id known",
        )
        self._optional_step(
            report,
            tracker,
            StepName.CREATE_DEFAULTS,
            ImportStage.FINALIZING,
            options,
            deadline,
            run=lambda: self.steps.create_defaults(entity_id),
            skip_reason=lambda: self._defaults_skip_reason(entity_id),
        )

        # a failed step leaves last_synced_at at the core-sync stamp
        catalog_synced = report.step(StepName.SYNC_CATALOG).status is StepStatus.COMPLETED
        partial = StepStatus.FAILED in report.step_statuses
        try:
            self.steps.datastore.mark_synced(
                entity_id, at=self._clock(), full=catalog_synced, partial=partial
            )
        except DatastoreError as exc:
            self._abort(report, tracker, str(exc))
        report.success = True
        tracker.complete(_summarize(report), entity_id=entity_id)

    def _optional_step(
        self,
        report: RunReport,
        tracker: StatusTracker,
        name: StepName,
        stage: ImportStage,
        options: ImportOptions,
        deadline: Deadline,
        *,
        run: Callable[[], dict[str, object]],
        skip_reason: str | Callable[[], str | None] | None = None,
    ) -> None:
        result = report.step(name)
        if not options.is_enabled(name):
            result.skip(self._clock(), "disabled for this run")
            return
        self._check_deadline(report, tracker, deadline)
        tracker.advance(stage, f"Running {name}")
        try:
            reason = skip_reason() if callable(skip_reason) else skip_reason
        except DatastoreError as exc:
            result.fail(self._clock(), str(exc))
            self._abort(report, tracker, str(exc))
        if reason is not None:
            result.skip(self._clock(), reason)
            log.info("[%s] %s skipped: %s", report.import_key, name, reason)
        else:
            self._run_step(report, tracker, result, run)
        tracker.step_finished()

    def _run_step(
        self,
        report: RunReport,
        tracker: StatusTracker,
        result: StepResult,
        run: Callable[[], dict[str, object]],
    ) -> None:
        result.start(self._clock())
        try:
            payload = run()
        except DatastoreError as exc:
            result.fail(self._clock(), str(exc))
            self._abort(report, tracker, str(exc))
        except ImportPipelineError as exc:
            result.fail(self._clock(), str(exc))
            log.warning("[%s] %s failed: %s", report.import_key, result.name, exc)
            return
        result.complete(self._clock(), payload)

    def _defaults_skip_reason(self, entity_id: UUID) -> str | None:
        counts = self.steps.datastore.content_counts(entity_id)
        if counts.has_content:
            return None
        return "no catalog or events to build from"

    def _check_deadline(self, report: RunReport, tracker: StatusTracker, deadline: Deadline) -> None:
        if deadline.expired(clock=self._clock):
            error = RunTimeoutError(
                f"run exceeded its {self.max_run_duration.total_seconds():.0f}s budget"
            )
            self._abort(report, tracker, str(error))

    def _abort(self, report: RunReport, tracker: StatusTracker, error: str) -> NoReturn:
        report.success = False
        report.error = error
        report.skip_pending(self._clock(), "run aborted")
        tracker.fail(error)
        raise _RunAborted


def _summarize(report: RunReport) -> str:
    done = sum(1 for result in report.steps if result.status is StepStatus.COMPLETED)
    failed = [str(result.name) for result in report.steps if result.status is StepStatus.FAILED]
    if failed:
        return f"Import finished with {done} steps completed; failed: {', '.join(failed)}"
    return f"Import finished with {done} steps completed"

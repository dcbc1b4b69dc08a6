"""APScheduler-backed timer for the sync scheduler."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


class APSchedulerTrigger:
    """Fire callbacks from a ``BackgroundScheduler`` on cron expressions (UTC).

    Jobs are keyed by name; scheduling an existing name replaces its trigger.
    """

    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler

    def schedule(self, name: str, cron: str, callback: Callable[[], object]) -> None:
        trigger = CronTrigger.from_crontab(cron, timezone="UTC")
        self._scheduler.add_job(
            callback,
            trigger=trigger,
            id=name,
            name=name,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=300,
        )
        log.debug("Armed %s with %s", name, cron)

    def unschedule(self, name: str) -> None:
        try:
            self._scheduler.remove_job(name)
        except JobLookupError:
            log.debug("No armed job named %s", name)

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self, *, wait: bool = True) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)


if TYPE_CHECKING:
    from setlistsync.domain.ports import JobTrigger

    _trigger_check: JobTrigger = APSchedulerTrigger()

"""Exponential backoff for provider calls inside a single step.

The policy is a plain value; ``build_retrying`` turns it into a ``tenacity``
controller. Sleeping and the clock are injected so tests can run the whole
schedule instantly.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.stop import stop_base

from setlistsync.domain.errors import TransientProviderError
from setlistsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from tenacity import RetryCallState

    from setlistsync.domain.time_windows import Clock, Deadline

log = getLogger(__name__)

type Sleep = Callable[[float], None]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the ``attempt``-th failure (1-based)."""

        return min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)

    def delays(self) -> list[float]:
        return [self.delay_for(attempt) for attempt in range(1, self.max_attempts)]


class stop_at_deadline(stop_base):  # noqa: N801
    """Stop when the upcoming backoff would not fit in the remaining budget."""

    def __init__(self, deadline: Deadline, *, clock: Clock = utcnow) -> None:
        self.deadline = deadline
        self.clock = clock

    def __call__(self, retry_state: RetryCallState) -> bool:
        remaining = self.deadline.remaining(clock=self.clock).total_seconds()
        return remaining < retry_state.upcoming_sleep


def build_retrying(
    policy: RetryPolicy,
    *,
    label: str,
    sleep: Sleep = time.sleep,
    deadline: Deadline | None = None,
    clock: Clock = utcnow,
) -> Retrying:
    stop: stop_base = stop_after_attempt(policy.max_attempts)
    if deadline is not None:
        stop = stop | stop_at_deadline(deadline, clock=clock)

    def _log_retry(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        log.warning(
            "%s attempt %d/%d failed (%s); retrying in %.1fs",
            label,
            retry_state.attempt_number,
            policy.max_attempts,
            outcome.exception() if outcome is not None else None,
            retry_state.upcoming_sleep,
        )

    return Retrying(
        stop=stop,
        wait=wait_exponential(
            multiplier=policy.base_delay,
            exp_base=policy.multiplier,
            min=0,
            max=policy.max_delay,
        ),
        retry=retry_if_exception_type(TransientProviderError),
        sleep=sleep,
        before_sleep=_log_retry,
        reraise=True,
    )


def call_with_retry[T](
    func: Callable[[], T],
    *,
    policy: RetryPolicy,
    label: str,
    sleep: Sleep = time.sleep,
    deadline: Deadline | None = None,
    clock: Clock = utcnow,
) -> T:
    """Call ``func`` and retry on ``TransientProviderError`` per ``policy``.

    Permanent errors propagate on the first attempt. A retry whose backoff would
    overrun ``deadline`` is not attempted; the last transient error is raised
    instead.
    """

    retrying = build_retrying(policy, label=label, sleep=sleep, deadline=deadline, clock=clock)
    try:
        return retrying(func)
    except TransientProviderError as exc:
        log.warning("%s gave up: %s", label, exc)
        raise

"""Error taxonomy for the import pipeline and scheduler."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from setlistsync.domain.model import Provider


class ImportPipelineError(Exception):
    """Base class for errors raised by the import pipeline."""


class ResolutionError(ImportPipelineError):
    """No provider (and no local record) could identify the requested artist."""

    def __init__(self, message: str = "no match found") -> None:
        super().__init__(message)


class ProviderError(ImportPipelineError):
    """A provider call failed; subclasses tell the retrier whether to try again."""

    def __init__(self, provider: Provider, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class TransientProviderError(ProviderError):
    """Network, timeout or rate-limit failure; eligible for retry."""


class PermanentProviderError(ProviderError):
    """Not-found or invalid-input failure; retrying cannot help."""


class DatastoreError(ImportPipelineError):
    """The local store failed; entity state can no longer be trusted for this run."""


class RunTimeoutError(ImportPipelineError):
    """A run exceeded its wall-clock budget."""


class WorkerPoolSaturatedError(ImportPipelineError):
    """The background import pool has no free admission slot."""


class UnknownJobError(LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown sync job: {name}")
        self.name = name


class JobAlreadyRunningError(RuntimeError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Sync job {name} is already running")
        self.name = name

"""Exception hierarchy for Legend Studio.

Input errors are raised before any backend call is made. Backend errors abort
the current unit of work. Storage errors never fail the operation that
triggered the write; the history store turns them into warnings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from legendstudio.assets.generator import GenerationSummary


class StudioError(Exception):
    """Base class for all Legend Studio errors."""


class InputValidationError(StudioError):
    """Raised when a dispatch is rejected locally (missing prompt, ratio, subject)."""


class BackendError(StudioError):
    """Raised when the generative backend fails or returns nothing usable."""


class OrchestratorBusyError(StudioError):
    """Raised when a dispatch arrives while the orchestrator is already running one."""


class TotalBatchFailure(StudioError):
    """Raised when every scene in a batch failed."""

    def __init__(self, message: str, summary: GenerationSummary) -> None:
        super().__init__(message)
        self.summary = summary


class StorageError(StudioError):
    """Raised by a storage backend when a record cannot be written or read."""


class StorageQuotaError(StorageError):
    """Raised when a write is rejected because the storage quota is exhausted."""

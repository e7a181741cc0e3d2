"""Custom exception types raised while cooking a new theme."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .pipeline import StepResult


class CookerError(RuntimeError):
    """Base class for every error raised by cooker."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InputValidationError(CookerError):
    """Raised when a prompt answer does not satisfy its constraints."""


class UserAbort(CookerError):
    """Raised when the user types the sentinel answer at any prompt."""

    def __init__(self, message: str = "aborted by user") -> None:
        super().__init__(message)


class CommandError(CookerError):
    """Raised when an external command cannot be run or exits non-zero."""


class SubstitutionError(CookerError):
    """Raised when a file cannot be read or rewritten during substitution."""


class StepFailure(CookerError):
    """Raised when a pipeline step fails."""

    def __init__(self, step: str, reason: str) -> None:
        super().__init__(f"{step}: {reason}")
        self.step = step
        self.reason = reason


class PipelineAborted(StepFailure):
    """Raised by the pipeline runner once a step has failed."""

    def __init__(self, step: str, reason: str, results: Sequence["StepResult"]) -> None:
        super().__init__(step, reason)
        self.results = tuple(results)


__all__ = [
    "CommandError",
    "CookerError",
    "InputValidationError",
    "PipelineAborted",
    "StepFailure",
    "SubstitutionError",
    "UserAbort",
]

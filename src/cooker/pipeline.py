"""Ordered, fail-fast execution of named setup steps."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence

from .errors import PipelineAborted
from .output import Reporter

if TYPE_CHECKING:
    from .collaborators import Collaborators
    from .config import CookerSettings, IdentitySpec

__all__ = ["Step", "StepContext", "StepPipeline", "StepResult", "StepStatus"]


LOGGER = logging.getLogger(__name__)


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StepContext:
    """Everything a step needs, resolved once before the pipeline starts."""

    project_path: Path
    identity: "IdentitySpec"
    settings: "CookerSettings"
    collaborators: "Collaborators"


StepAction = Callable[[StepContext], None]


@dataclass(frozen=True, slots=True)
class Step:
    """A named unit of work. ``action`` raises to signal failure."""

    name: str
    action: StepAction


@dataclass(slots=True)
class StepResult:
    name: str
    status: StepStatus = StepStatus.PENDING
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is StepStatus.SUCCEEDED


class StepPipeline:
    """Run steps strictly in order and stop at the first failure."""

    def __init__(self, reporter: Reporter) -> None:
        self._reporter = reporter

    def run(self, steps: Sequence[Step], context: StepContext) -> list[StepResult]:
        """Execute ``steps`` and return one :class:`StepResult` per step.

        Raises
        ------
        PipelineAborted
            When a step raises. Steps after it keep the ``pending`` status and
            completed steps are not rolled back.
        """

        results = [StepResult(step.name) for step in steps]
        for step, result in zip(steps, results):
            result.status = StepStatus.RUNNING
            LOGGER.info("step started name=%s", step.name)
            self._reporter.started(step.name)
            try:
                step.action(context)
            except Exception as exc:
                reason = str(exc) or type(exc).__name__
                result.status = StepStatus.FAILED
                result.detail = reason
                LOGGER.error("step failed name=%s reason=%s", step.name, reason)
                self._reporter.failed(step.name, reason)
                raise PipelineAborted(step.name, reason, results) from exc

            result.status = StepStatus.SUCCEEDED
            LOGGER.info("step succeeded name=%s", step.name)
            self._reporter.succeeded(step.name)

        return results

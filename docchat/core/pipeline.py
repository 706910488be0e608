"""
Per-request pipeline state machine.

Idle -> Retrieving -> Assembling -> Generating -> Done, with Failed reachable
from any non-terminal stage. No stage is re-entered and both Done and Failed
are terminal.

Dependencies: docchat.core.exceptions
System role: Stage tracking for the query path
"""

import enum
import logging
import time

from docchat.core.exceptions import PipelineStateError

logger = logging.getLogger(__name__)


class PipelineStage(str, enum.Enum):
    """Stages of one ask request."""

    IDLE = "idle"
    RETRIEVING = "retrieving"
    ASSEMBLING = "assembling"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


TRANSITIONS: dict[PipelineStage, PipelineStage] = {
    PipelineStage.IDLE: PipelineStage.RETRIEVING,
    PipelineStage.RETRIEVING: PipelineStage.ASSEMBLING,
    PipelineStage.ASSEMBLING: PipelineStage.GENERATING,
    PipelineStage.GENERATING: PipelineStage.DONE,
}

TERMINAL = frozenset({PipelineStage.DONE, PipelineStage.FAILED})


class PipelineRun:
    """Tracks the stage of one request and the time spent in each stage."""

    def __init__(self, request_id: str = "") -> None:
        self.request_id = request_id
        self.stage = PipelineStage.IDLE
        self.visited: list[PipelineStage] = [PipelineStage.IDLE]
        self.error: BaseException | None = None
        self.failed_at: PipelineStage | None = None
        self.durations_ms: dict[PipelineStage, int] = {}
        self._entered = time.perf_counter()

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL

    def _enter(self, stage: PipelineStage) -> None:
        now = time.perf_counter()
        self.durations_ms[self.stage] = int((now - self._entered) * 1000)
        self._entered = now
        self.stage = stage
        self.visited.append(stage)

    def advance(self, stage: PipelineStage) -> None:
        """
        Move to the next stage.

        Raises:
            PipelineStateError: When stage is not the single legal successor
        """
        expected = TRANSITIONS.get(self.stage)
        if stage is PipelineStage.FAILED or stage != expected:
            raise PipelineStateError(
                f"Illegal pipeline transition {self.stage.value} -> {stage.value}",
                details={"request_id": self.request_id},
            )
        self._enter(stage)
        logger.debug(f"{__name__}:advance - {self.request_id} entered {stage.value}")

    def fail(self, error: BaseException) -> None:
        """
        Enter the absorbing Failed stage.

        Raises:
            PipelineStateError: When the run already terminated
        """
        if self.is_terminal:
            raise PipelineStateError(
                f"Cannot fail a pipeline in terminal stage {self.stage.value}",
                details={"request_id": self.request_id},
            )
        self.failed_at = self.stage
        self.error = error
        self._enter(PipelineStage.FAILED)
        logger.error(
            f"{__name__}:fail - {self.request_id} failed during {self.failed_at.value}: "
            f"{type(error).__name__}"
        )

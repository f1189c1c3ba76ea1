"""Stage results and the runner that turns stage errors into results."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from league_scoring.types import StageResponseDict

logger = logging.getLogger(__name__)

# Stage outcomes
DONE = "done"
SKIPPED = "skipped"
NOTHING_TO_DO = "nothing_to_do"
FAILED = "failed"

HTTP_STATUS = {
    DONE: 200,
    SKIPPED: 200,
    NOTHING_TO_DO: 404,
    FAILED: 500,
}


@dataclass
class StageResult:
    """Outcome of one stage invocation."""

    outcome: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def done(cls, message: str, **data: Any) -> "StageResult":
        return cls(DONE, message, dict(data))

    @classmethod
    def skipped(cls, message: str, **data: Any) -> "StageResult":
        """Precondition already satisfied, nothing was written."""
        return cls(SKIPPED, message, dict(data))

    @classmethod
    def nothing_to_do(cls, message: str, **data: Any) -> "StageResult":
        """No tournament or season to work on."""
        return cls(NOTHING_TO_DO, message, dict(data))

    @classmethod
    def failed(cls, message: str, error: str) -> "StageResult":
        return cls(FAILED, message, {}, error)

    @property
    def success(self) -> bool:
        return self.outcome != FAILED

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.outcome]

    def to_response(self) -> StageResponseDict:
        """Response body for the trigger endpoints."""
        body: StageResponseDict = {"success": self.success, "message": self.message}
        if self.data:
            body["data"] = self.data
        if self.error is not None:
            body["error"] = self.error
        return body


async def run_stage(name: str, stage: Callable[[], Awaitable[StageResult]]) -> StageResult:
    """
    Run a stage and report its outcome.

    Any exception raised by the stage becomes a FAILED result, so callers
    never see one. Duration is added to the result data.

    Args:
        name: Stage name used in log messages
        stage: Zero-argument coroutine function running the stage

    Returns:
        StageResult
    """
    started = time.perf_counter()
    logger.info(f"Starting {name}")

    try:
        result = await stage()
    except Exception as e:
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.exception(f"{name} failed after {duration_ms}ms: {e}")
        return StageResult.failed(f"Failed to {name.replace('-', ' ')}", str(e) or e.__class__.__name__)

    duration_ms = int((time.perf_counter() - started) * 1000)
    result.data["duration_ms"] = duration_ms
    logger.info(f"{name} finished in {duration_ms}ms ({result.outcome}): {result.message}")
    return result

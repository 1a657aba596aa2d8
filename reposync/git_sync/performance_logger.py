"""Timing of git operations for sync outcomes and slow-operation warnings."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional

from ..logging_config import mask_credentials

SLOW_OPERATION_SECONDS = 30.0


@dataclass
class OperationTimer:
    """Timing of one operation; ``duration`` is final once the block exits."""
    operation: str
    start_time: float
    end_time: Optional[float] = None
    success: bool = True

    @property
    def duration(self) -> float:
        end_time = self.end_time if self.end_time is not None else time.monotonic()
        return end_time - self.start_time


@contextmanager
def time_operation(
    operation: str,
    logger: Optional[logging.Logger] = None,
    log_level: int = logging.DEBUG
) -> Generator[OperationTimer, None, None]:
    """
    Time the enclosed block.

    Failures are logged with their elapsed time and re-raised. Operations
    slower than SLOW_OPERATION_SECONDS produce a warning.
    """
    logger = logger or logging.getLogger('reposync.git_sync.performance')
    timer = OperationTimer(operation=operation, start_time=time.monotonic())
    logger.log(log_level, f"Starting {operation}")

    try:
        yield timer
    except Exception as e:
        timer.success = False
        timer.end_time = time.monotonic()
        logger.debug(f"{operation} failed after {timer.duration:.3f}s: {mask_credentials(str(e))}")
        raise
    finally:
        if timer.end_time is None:
            timer.end_time = time.monotonic()

    logger.log(log_level, f"{operation} completed in {timer.duration:.3f}s")
    if timer.duration > SLOW_OPERATION_SECONDS:
        logger.warning(f"Slow git operation detected: {operation} took {timer.duration:.3f}s")

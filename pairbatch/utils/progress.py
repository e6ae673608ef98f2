"""Progress tracking utilities for batch runs."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from pairbatch.models.batch_result import BatchResult

logger = get_logger(__name__)


@dataclass
class ProgressTracker:
    """Report progress of a batch. Counts are read from the result, not kept here."""

    total: int
    result: BatchResult
    start_time: float = field(default_factory=time.monotonic)

    @property
    def processed(self) -> int:
        return self.result.total_count

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since start."""
        return time.monotonic() - self.start_time

    @property
    def progress_percentage(self) -> float:
        """Percentage of total items processed."""
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100.0

    def log_progress(self, every_n: int = 1) -> None:
        """Log progress every N items and after the last one."""
        if self.processed % every_n == 0 or self.processed == self.total:
            logger.info(
                "batch_progress",
                processed=self.processed,
                total=self.total,
                successful=self.result.success_count,
                failed=self.result.failure_count,
                skipped=self.result.skipped_count,
                percentage=f"{self.progress_percentage:.1f}%",
                elapsed=f"{self.elapsed_seconds:.1f}s",
            )

"""Persistence and rendering of batch results."""

from __future__ import annotations

import json
from pathlib import Path

from pairbatch.core.reporting import artifact_filename, format_batch_summary
from pairbatch.models.batch_result import BatchResult
from pairbatch.utils.logger import get_logger

logger = get_logger(__name__)


class ResultReporter:
    """Writes one JSON artifact per run and renders a text summary.

    Artifacts are created exclusively; an existing file is never rewritten.
    """

    def __init__(self, results_dir: str | Path) -> None:
        self.results_dir = Path(results_dir)

    def artifact_path(self, result: BatchResult) -> Path:
        return self.results_dir / artifact_filename(result.network, result.timestamp)

    def persist(self, result: BatchResult) -> Path:
        """Write ``result`` to a new artifact file and return its path.

        Raises:
            FileExistsError: an artifact for the same network and timestamp
                already exists.
        """
        self.results_dir.mkdir(parents=True, exist_ok=True)
        path = self.artifact_path(result)
        payload = result.model_dump(mode="json", by_alias=True)

        with path.open("x", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")

        logger.info(
            "batch_result_saved",
            path=str(path),
            total=result.total_count,
            successful=result.success_count,
            failed=result.failure_count,
        )
        return path

    @staticmethod
    def render(result: BatchResult, artifact_path: str | Path | None = None) -> str:
        return format_batch_summary(result, str(artifact_path) if artifact_path else None)

    @staticmethod
    def load(path: str | Path) -> BatchResult:
        """Read a persisted artifact back into a BatchResult."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return BatchResult.model_validate(data)

"""Batch result model for a trading pair creation run."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from pairbatch.models.outcome import OperationOutcome, OutcomeStatus


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class BatchResult(BaseModel):
    """Run metadata plus ordered outcomes.

    Counts are always derived from ``outcomes``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    network: str
    chain_id: int = 0
    timestamp: datetime = Field(default_factory=_utc_now)
    submitting_identity: str
    contracts: dict[str, str] = Field(default_factory=dict)
    outcomes: list[OperationOutcome] = Field(default_factory=list)

    @computed_field(alias="totalCount")  # type: ignore[prop-decorator]
    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @computed_field(alias="successCount")  # type: ignore[prop-decorator]
    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_success)

    @computed_field(alias="failureCount")  # type: ignore[prop-decorator]
    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.is_success)

    @computed_field(alias="skippedCount")  # type: ignore[prop-decorator]
    @property
    def skipped_count(self) -> int:
        return sum(
            1 for outcome in self.outcomes if outcome.status is OutcomeStatus.SKIPPED_DUPLICATE
        )

    def record(self, outcome: OperationOutcome) -> None:
        """Append a finalized outcome in processing order."""
        self.outcomes.append(outcome)

    @property
    def succeeded(self) -> list[OperationOutcome]:
        """Outcomes that created a pair during this run."""
        return [o for o in self.outcomes if o.status is OutcomeStatus.SUCCEEDED]

    @property
    def failed(self) -> list[OperationOutcome]:
        """Outcomes that failed."""
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]

"""Per-item outcome of a trading pair saga."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pairbatch.core.errors import ErrorKind


class OutcomeStatus(StrEnum):
    """Terminal status of one work item."""

    SUCCEEDED = "succeeded"
    SKIPPED_DUPLICATE = "skipped-duplicate"
    FAILED = "failed"


class SagaStep(StrEnum):
    """Ordered steps of a trading pair saga."""

    IDEMPOTENCY_CHECK = "idempotency-check"
    APPROVE_QUOTE = "approve-quote"
    APPROVE_ASSET = "approve-asset"
    CREATE_PAIR = "create-pair"
    VERIFY = "verify"


class OperationOutcome(BaseModel):
    """Terminal result for one work item. Frozen once built."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    symbol: str
    asset_address: str
    company_name: str = ""
    quote_liquidity: Decimal
    asset_liquidity: Decimal
    fee_rate: int
    status: OutcomeStatus
    attempts: int
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    failed_step: SagaStep | None = None
    resource_created: bool = False
    verified_price: Decimal | None = None
    tx_hashes: tuple[str, ...] = ()

    @field_validator("attempts")
    @classmethod
    def validate_attempts(cls, value: int) -> int:
        """Attempts must not be negative."""
        if value < 0:
            msg = "attempts must not be negative"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_error_fields(self) -> OperationOutcome:
        """Failed outcomes carry an error kind; the others carry none."""
        if self.status is OutcomeStatus.FAILED and self.error_kind is None:
            msg = "failed outcomes must have an error_kind"
            raise ValueError(msg)
        if self.status is not OutcomeStatus.FAILED and self.error_kind is not None:
            msg = "only failed outcomes may have an error_kind"
            raise ValueError(msg)
        return self

    @property
    def is_success(self) -> bool:
        """Succeeded and skipped duplicates both count as successes."""
        return self.status is not OutcomeStatus.FAILED

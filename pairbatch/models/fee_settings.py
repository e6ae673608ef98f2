"""Fee settings model for priced ledger writes."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class OperationClass(StrEnum):
    """Weight class of a ledger write, used to pick a gas ceiling."""

    APPROVAL = "approval"
    CREATION = "creation"


class FeeSettings(BaseModel):
    """Gas price and gas limit for one write."""

    model_config = ConfigDict(frozen=True)

    operation_class: OperationClass
    gas_price: int
    gas_limit: int

    @field_validator("gas_price", "gas_limit")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Gas price and limit must be positive."""
        if value <= 0:
            msg = "gas_price and gas_limit must be greater than 0"
            raise ValueError(msg)
        return value

    @property
    def max_cost(self) -> int:
        """Upper bound on the fee paid for this write, in wei."""
        return self.gas_price * self.gas_limit

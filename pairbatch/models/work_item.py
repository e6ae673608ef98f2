"""Work item model: one trading pair to create."""

from __future__ import annotations

import re
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator


class WorkItem(BaseModel):
    """A trading pair to create between the quote stablecoin and one asset token.

    Liquidity amounts are in whole token units (18 decimals on the ledger).
    ``fee_rate`` is in basis points (30 == 0.3%).
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    asset_address: str
    name: str = ""
    company_name: str = ""
    quote_liquidity: Decimal
    asset_liquidity: Decimal
    fee_rate: int
    target_liquidity: Decimal = Decimal(0)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, value: str) -> str:
        """Symbol must be 1-20 uppercase letters or digits."""
        if not re.fullmatch(r"[A-Z0-9]{1,20}", value):
            msg = "symbol must be 1-20 uppercase letters or digits"
            raise ValueError(msg)
        return value

    @field_validator("asset_address")
    @classmethod
    def validate_asset_address(cls, value: str) -> str:
        """Asset address must be a 20-byte hex address."""
        if not re.fullmatch(r"0x[0-9a-fA-F]{40}", value):
            msg = "asset_address must be a 0x-prefixed 40-character hex address"
            raise ValueError(msg)
        return value

    @field_validator("quote_liquidity", "asset_liquidity")
    @classmethod
    def validate_liquidity(cls, value: Decimal) -> Decimal:
        """Initial liquidity must be positive."""
        if value <= 0:
            msg = "liquidity amounts must be greater than 0"
            raise ValueError(msg)
        return value

    @field_validator("target_liquidity")
    @classmethod
    def validate_target_liquidity(cls, value: Decimal) -> Decimal:
        """Target liquidity must not be negative."""
        if value < 0:
            msg = "target_liquidity must not be negative"
            raise ValueError(msg)
        return value

    @field_validator("fee_rate")
    @classmethod
    def validate_fee_rate(cls, value: int) -> int:
        """Fee rate must be between 0 and 1000 basis points."""
        if value < 0 or value > 1000:
            msg = "fee_rate must be between 0 and 1000 basis points"
            raise ValueError(msg)
        return value

    @property
    def fee_percent(self) -> Decimal:
        """Fee rate expressed in percent."""
        return Decimal(self.fee_rate) / 100

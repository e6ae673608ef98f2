"""Value types exchanged with a ledger client."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SubmitKind(StrEnum):
    """Write operations a ledger client can submit."""

    APPROVE_QUOTE = "approve-quote"
    APPROVE_ASSET = "approve-asset"
    CREATE_PAIR = "create-pair"
    MINT_QUOTE = "mint-quote"


class QueryKind(StrEnum):
    """Read-only queries a ledger client can answer."""

    TRADING_PAIR = "trading-pair"
    ASSET_INFO = "asset-info"
    CURRENT_PRICE = "current-price"
    QUOTE_BALANCE = "quote-balance"
    NATIVE_BALANCE = "native-balance"


class OperationReceipt(BaseModel):
    """Confirmation of a submitted write."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int | None = None
    gas_used: int | None = None
    status: int = 1


class SequenceNumbers(BaseModel):
    """Confirmed and pending-inclusive nonce views for one identity."""

    model_config = ConfigDict(frozen=True)

    confirmed: int
    including_pending: int

    @property
    def pending_count(self) -> int:
        """Number of writes submitted but not yet confirmed."""
        return max(0, self.including_pending - self.confirmed)

    @property
    def has_pending(self) -> bool:
        return self.pending_count > 0


class TradingPairState(BaseModel):
    """On-ledger state of a trading pair."""

    model_config = ConfigDict(frozen=True)

    asset_address: str
    quote_reserve: Decimal = Decimal(0)
    asset_reserve: Decimal = Decimal(0)
    fee_rate: int = 0
    is_active: bool = False


class AssetInfo(BaseModel):
    """Metadata published by an asset token contract."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    company_name: str = ""
    sector: str = ""
    is_active: bool = True

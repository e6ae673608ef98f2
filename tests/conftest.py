"""Shared test fixtures for batch trading pair creation."""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest

from pairbatch.core.errors import ErrorKind, PermanentLedgerError
from pairbatch.models.config import Config
from pairbatch.models.ledger import (
    AssetInfo,
    OperationReceipt,
    QueryKind,
    SequenceNumbers,
    SubmitKind,
    TradingPairState,
)
from pairbatch.models.work_item import WorkItem
from pairbatch.services.fee_estimator import FeeEstimator
from pairbatch.services.item_saga import ItemSaga
from pairbatch.services.retry_executor import RetryExecutor

if TYPE_CHECKING:
    from collections.abc import Callable

    from pairbatch.models.fee_settings import FeeSettings

IDENTITY = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
QUOTE_TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DEX = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"


class FakeLedger:
    """In-memory ledger implementing LedgerClientProtocol.

    Failures are queued per (operation kind, asset address) and raised in
    order, one per call, before the operation takes effect.
    """

    def __init__(self) -> None:
        self.fee_snapshot: int | None = 2
        self.sequence = SequenceNumbers(confirmed=7, including_pending=7)
        self.quote_balance = Decimal(1_000_000)
        self.native_balance = Decimal("1.5")
        self.pairs: dict[str, TradingPairState] = {}
        self.missing_assets: set[str] = set()
        self.submitted: list[tuple[SubmitKind, dict[str, Any], FeeSettings]] = []
        self.queries: list[tuple[QueryKind, dict[str, Any]]] = []
        self._failures: dict[tuple[str, str | None], list[Exception]] = defaultdict(list)
        self._tx_counter = 0

    def fail(self, kind: SubmitKind | QueryKind, errors: list[Exception], asset: str | None = None) -> None:
        """Queue errors for the next calls of ``kind`` for ``asset``."""
        key = (str(kind), asset.lower() if asset else None)
        self._failures[key].extend(errors)

    def _raise_queued(self, kind: SubmitKind | QueryKind, params: dict[str, Any]) -> None:
        asset = params.get("asset")
        key = (str(kind), asset.lower() if asset else None)
        if self._failures.get(key):
            raise self._failures[key].pop(0)

    def submit(
        self,
        kind: SubmitKind,
        params: dict[str, Any],
        fee_settings: FeeSettings,
        timeout: float | None = None,
    ) -> OperationReceipt:
        self.submitted.append((kind, params, fee_settings))
        self._raise_queued(kind, params)

        if kind is SubmitKind.CREATE_PAIR:
            asset = params["asset"].lower()
            if asset in self.pairs and self.pairs[asset].is_active:
                raise PermanentLedgerError(ErrorKind.EXECUTION_REVERTED, "TradingPairExists")
            self.pairs[asset] = TradingPairState(
                asset_address=params["asset"],
                quote_reserve=params["quote_amount"],
                asset_reserve=params["asset_amount"],
                fee_rate=params["fee_rate"],
                is_active=True,
            )
        elif kind is SubmitKind.MINT_QUOTE:
            self.quote_balance += params["amount"]

        self._tx_counter += 1
        return OperationReceipt(
            tx_hash=f"0x{self._tx_counter:064x}",
            block_number=100 + self._tx_counter,
            gas_used=fee_settings.gas_limit // 2,
        )

    def query(self, kind: QueryKind, params: dict[str, Any]) -> Any:
        self.queries.append((kind, params))
        self._raise_queued(kind, params)

        if kind is QueryKind.ASSET_INFO:
            if params["asset"].lower() in self.missing_assets:
                raise PermanentLedgerError(ErrorKind.RESOURCE_NOT_FOUND, "not a stock token")
            return AssetInfo(symbol="FAKE", company_name="Fake Holdings Plc")
        if kind is QueryKind.TRADING_PAIR:
            pair = self.pairs.get(params["asset"].lower())
            if pair is None:
                raise PermanentLedgerError(ErrorKind.RESOURCE_NOT_FOUND, "pair not found")
            return pair
        if kind is QueryKind.CURRENT_PRICE:
            pair = self.pairs[params["asset"].lower()]
            return pair.quote_reserve / pair.asset_reserve
        if kind is QueryKind.QUOTE_BALANCE:
            return self.quote_balance
        return self.native_balance

    def get_fee_snapshot(self) -> int | None:
        return self.fee_snapshot

    def get_sequence_numbers(self, identity: str) -> SequenceNumbers:
        return self.sequence

    def submitted_kinds(self, asset: str | None = None) -> list[SubmitKind]:
        return [
            kind
            for kind, params, _ in self.submitted
            if asset is None or params.get("asset", "").lower() == asset.lower()
        ]


@pytest.fixture
def config() -> Config:
    """Configuration without .env, with zero retry delay."""
    return Config(  # type: ignore[call-arg]
        _env_file=None,
        retry_interval_seconds=0,
        fee_floor_wei=2,
        step_timeout_seconds=None,
    )


@pytest.fixture
def identity() -> str:
    return IDENTITY


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def retry_executor() -> RetryExecutor:
    return RetryExecutor(max_retries=3, interval_seconds=0)


@pytest.fixture
def fee_estimator(ledger: FakeLedger) -> FeeEstimator:
    return FeeEstimator(ledger, floor_wei=2, buffer_percent=50)


@pytest.fixture
def saga(ledger: FakeLedger, fee_estimator: FeeEstimator, retry_executor: RetryExecutor) -> ItemSaga:
    return ItemSaga(ledger, fee_estimator, retry_executor, confirmation_timeout=5.0)


@pytest.fixture
def make_item() -> Callable[..., WorkItem]:
    """Factory for valid work items with distinct addresses."""
    counter = {"n": 0}

    def factory(symbol: str = "DANGCEM", **overrides: Any) -> WorkItem:
        counter["n"] += 1
        data: dict[str, Any] = {
            "symbol": symbol,
            "asset_address": f"0x{counter['n']:040x}",
            "name": f"{symbol.title()} Token",
            "company_name": f"{symbol.title()} Plc",
            "quote_liquidity": Decimal(50_000),
            "asset_liquidity": Decimal(1_000),
            "fee_rate": 30,
            "target_liquidity": Decimal(100_000),
        }
        data.update(overrides)
        return WorkItem(**data)

    return factory

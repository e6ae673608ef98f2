"""Per-item trading pair creation saga.

Steps run strictly in order: idempotency check, quote approval, asset
approval, pair creation, price verification. Each step goes through the
retry executor. A failed step ends the saga; committed steps are not
compensated, since re-running the batch skips pairs that already exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, TypeVar

from pairbatch.core.errors import ErrorKind, LedgerError, error_kind
from pairbatch.models.fee_settings import OperationClass
from pairbatch.models.ledger import AssetInfo, QueryKind, SubmitKind, TradingPairState
from pairbatch.models.outcome import OperationOutcome, OutcomeStatus, SagaStep
from pairbatch.utils.cancellation import CancellationToken
from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from pairbatch.models.config import Config
    from pairbatch.models.ledger import OperationReceipt
    from pairbatch.models.work_item import WorkItem
    from pairbatch.services.fee_estimator import FeeEstimator
    from pairbatch.services.protocols import LedgerClientProtocol
    from pairbatch.services.retry_executor import RetryExecutor

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass
class _SagaProgress:
    """Mutable bookkeeping for one saga run, turned into a frozen outcome once."""

    item: WorkItem
    step: SagaStep = SagaStep.IDEMPOTENCY_CHECK
    attempts: int = 0
    created: bool = False
    company_name: str = ""
    tx_hashes: list[str] = field(default_factory=list)

    def record_attempts(self, attempts: int) -> None:
        self.attempts = max(self.attempts, attempts)

    def finish(
        self,
        status: OutcomeStatus,
        *,
        price: Decimal | None = None,
        error: BaseException | None = None,
    ) -> OperationOutcome:
        return OperationOutcome(
            symbol=self.item.symbol,
            asset_address=self.item.asset_address,
            company_name=self.company_name or self.item.company_name,
            quote_liquidity=self.item.quote_liquidity,
            asset_liquidity=self.item.asset_liquidity,
            fee_rate=self.item.fee_rate,
            status=status,
            attempts=self.attempts,
            error_kind=error_kind(error) if error is not None else None,
            error_message=str(error) if error is not None else None,
            failed_step=self.step if error is not None else None,
            resource_created=self.created,
            verified_price=price,
            tx_hashes=tuple(self.tx_hashes),
        )


class ItemSaga:
    """Creates one trading pair through approvals, creation and verification."""

    def __init__(
        self,
        ledger: LedgerClientProtocol,
        fee_estimator: FeeEstimator,
        retry_executor: RetryExecutor,
        confirmation_timeout: float = 120.0,
        step_timeout: float | None = None,
    ) -> None:
        self.ledger = ledger
        self.fees = fee_estimator
        self.retry = retry_executor
        self.confirmation_timeout = confirmation_timeout
        self.step_timeout = step_timeout

    @classmethod
    def from_config(
        cls,
        ledger: LedgerClientProtocol,
        fee_estimator: FeeEstimator,
        retry_executor: RetryExecutor,
        config: Config,
    ) -> ItemSaga:
        return cls(
            ledger,
            fee_estimator,
            retry_executor,
            confirmation_timeout=config.confirmation_timeout_seconds,
            step_timeout=config.step_timeout_seconds,
        )

    def run(self, item: WorkItem, token: CancellationToken | None = None) -> OperationOutcome:
        """Run every step for ``item`` and return its terminal outcome.

        Step failures become a ``failed`` outcome; they are not raised.
        """
        parent = token or CancellationToken()
        progress = _SagaProgress(item=item)
        logger.info("item_saga_started", symbol=item.symbol, asset=item.asset_address)

        try:
            progress.step = SagaStep.IDEMPOTENCY_CHECK
            existing = self._run_step(progress, parent, lambda t: self._inspect(item, progress))
            if existing is not None and existing.is_active:
                logger.info("trading_pair_exists", symbol=item.symbol, asset=item.asset_address)
                return progress.finish(OutcomeStatus.SKIPPED_DUPLICATE)

            progress.step = SagaStep.APPROVE_QUOTE
            self._submit_step(
                progress,
                parent,
                SubmitKind.APPROVE_QUOTE,
                {"amount": item.quote_liquidity},
                OperationClass.APPROVAL,
            )

            progress.step = SagaStep.APPROVE_ASSET
            self._submit_step(
                progress,
                parent,
                SubmitKind.APPROVE_ASSET,
                {"asset": item.asset_address, "amount": item.asset_liquidity},
                OperationClass.APPROVAL,
            )

            progress.step = SagaStep.CREATE_PAIR
            self._submit_step(
                progress,
                parent,
                SubmitKind.CREATE_PAIR,
                {
                    "asset": item.asset_address,
                    "quote_amount": item.quote_liquidity,
                    "asset_amount": item.asset_liquidity,
                    "fee_rate": item.fee_rate,
                },
                OperationClass.CREATION,
            )
            progress.created = True

            progress.step = SagaStep.VERIFY
            price = self._run_step(
                progress,
                parent,
                lambda t: self.ledger.query(QueryKind.CURRENT_PRICE, {"asset": item.asset_address}),
            )
        except Exception as exc:
            logger.error(
                "item_saga_failed",
                symbol=item.symbol,
                step=progress.step.value,
                attempts=progress.attempts,
                error_kind=error_kind(exc).value,
                error=str(exc),
                pair_created=progress.created,
            )
            return progress.finish(OutcomeStatus.FAILED, error=exc)

        logger.info(
            "trading_pair_created",
            symbol=item.symbol,
            price=str(price),
            attempts=progress.attempts,
        )
        return progress.finish(OutcomeStatus.SUCCEEDED, price=Decimal(str(price)))

    def _inspect(self, item: WorkItem, progress: _SagaProgress) -> TradingPairState | None:
        """Read the asset's metadata and any existing pair for it."""
        info: AssetInfo = self.ledger.query(QueryKind.ASSET_INFO, {"asset": item.asset_address})
        progress.company_name = info.company_name
        logger.info(
            "asset_token_found",
            symbol=info.symbol,
            company=info.company_name,
            configured_symbol=item.symbol,
        )
        try:
            return self.ledger.query(QueryKind.TRADING_PAIR, {"asset": item.asset_address})
        except LedgerError as exc:
            if exc.kind is ErrorKind.RESOURCE_NOT_FOUND:
                return None
            raise

    def _submit_step(
        self,
        progress: _SagaProgress,
        parent: CancellationToken,
        kind: SubmitKind,
        params: dict[str, Any],
        operation_class: OperationClass,
    ) -> OperationReceipt:
        def submit(step_token: CancellationToken) -> OperationReceipt:
            # Re-price every attempt so a retry after an underpriced replacement
            # picks up the latest fee snapshot.
            fee_settings = self.fees.estimate(operation_class)
            step_token.raise_if_cancelled()
            return self.ledger.submit(
                kind,
                params,
                fee_settings,
                timeout=step_token.bound(self.confirmation_timeout),
            )

        receipt = self._run_step(progress, parent, submit)
        progress.tx_hashes.append(receipt.tx_hash)
        logger.info(
            "saga_step_confirmed",
            symbol=progress.item.symbol,
            step=progress.step.value,
            tx_hash=receipt.tx_hash,
            gas_used=receipt.gas_used,
        )
        return receipt

    def _run_step(
        self,
        progress: _SagaProgress,
        parent: CancellationToken,
        operation: Callable[[CancellationToken], T],
    ) -> T:
        step_token = parent.child(self.step_timeout)
        attempts = 0

        def attempt() -> T:
            nonlocal attempts
            attempts += 1
            return operation(step_token)

        try:
            result = self.retry.execute(
                attempt,
                token=step_token,
                name=f"{progress.step.value} {progress.item.symbol}",
            )
        finally:
            progress.record_attempts(attempts)
        return result.value

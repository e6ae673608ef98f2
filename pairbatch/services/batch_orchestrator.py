"""Sequential batch orchestration of trading pair sagas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pairbatch.core.errors import ErrorKind, OperationCancelledError, error_kind
from pairbatch.models.batch_result import BatchResult
from pairbatch.models.outcome import OperationOutcome, OutcomeStatus
from pairbatch.services.fee_estimator import FeeEstimator
from pairbatch.services.item_saga import ItemSaga
from pairbatch.services.pending_detector import PendingOperationDetector
from pairbatch.services.retry_executor import RetryExecutor
from pairbatch.utils.cancellation import CancellationToken
from pairbatch.utils.logger import get_logger
from pairbatch.utils.progress import ProgressTracker

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from pairbatch.models.config import Config
    from pairbatch.models.work_item import WorkItem
    from pairbatch.services.protocols import LedgerClientProtocol

logger = get_logger(__name__)


def _failed_outcome(item: WorkItem, exc: BaseException, attempts: int = 0) -> OperationOutcome:
    return OperationOutcome(
        symbol=item.symbol,
        asset_address=item.asset_address,
        company_name=item.company_name,
        quote_liquidity=item.quote_liquidity,
        asset_liquidity=item.asset_liquidity,
        fee_rate=item.fee_rate,
        status=OutcomeStatus.FAILED,
        attempts=attempts,
        error_kind=error_kind(exc),
        error_message=str(exc),
    )


class BatchOrchestrator:
    """Drive one saga per work item, in order, from a single identity.

    Items run one at a time because every write shares the identity's nonce.
    An error escaping a saga becomes a failed outcome for that item and the
    batch moves on.
    """

    def __init__(
        self,
        ledger: LedgerClientProtocol,
        saga: ItemSaga,
        detector: PendingOperationDetector | None = None,
        on_outcome: Callable[[int, int, OperationOutcome], None] | None = None,
    ) -> None:
        self.ledger = ledger
        self.saga = saga
        self.detector = detector or PendingOperationDetector(ledger)
        self.on_outcome = on_outcome

    @classmethod
    def from_config(
        cls,
        ledger: LedgerClientProtocol,
        config: Config,
        on_outcome: Callable[[int, int, OperationOutcome], None] | None = None,
    ) -> BatchOrchestrator:
        fees = FeeEstimator.from_config(ledger, config)
        retry = RetryExecutor.from_config(config)
        saga = ItemSaga.from_config(ledger, fees, retry, config)
        return cls(ledger, saga, PendingOperationDetector(ledger), on_outcome=on_outcome)

    def run(
        self,
        items: Sequence[WorkItem],
        identity: str,
        *,
        network: str,
        chain_id: int = 0,
        contracts: dict[str, str] | None = None,
        token: CancellationToken | None = None,
    ) -> BatchResult:
        """Process ``items`` in order and return the aggregated result.

        Items not started because ``token`` was cancelled are recorded as
        failed with kind ``cancelled``.
        """
        token = token or CancellationToken()
        result = BatchResult(
            network=network,
            chain_id=chain_id,
            submitting_identity=identity,
            contracts=dict(contracts or {}),
        )
        tracker = ProgressTracker(total=len(items), result=result)

        logger.info("batch_started", network=network, identity=identity, items=len(items))
        self.detector.check(identity)

        for index, item in enumerate(items, start=1):
            if token.cancelled:
                outcome = _failed_outcome(
                    item, OperationCancelledError(token.reason or "batch cancelled")
                )
            else:
                outcome = self._run_item(item, token)

            result.record(outcome)
            tracker.log_progress()
            if self.on_outcome is not None:
                self.on_outcome(index, len(items), outcome)

        logger.info(
            "batch_completed",
            network=network,
            total=result.total_count,
            successful=result.success_count,
            failed=result.failure_count,
            skipped=result.skipped_count,
            cancelled=sum(1 for o in result.failed if o.error_kind is ErrorKind.CANCELLED),
            elapsed=f"{tracker.elapsed_seconds:.1f}s",
        )
        return result

    def _run_item(self, item: WorkItem, token: CancellationToken) -> OperationOutcome:
        try:
            return self.saga.run(item, token)
        except Exception as exc:
            logger.error(
                "batch_item_failed",
                symbol=item.symbol,
                error_kind=error_kind(exc).value,
                error=str(exc),
            )
            return _failed_outcome(item, exc)

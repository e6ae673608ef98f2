"""Advisory detection of in-flight writes for the submitting identity."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from pairbatch.models.ledger import SequenceNumbers
    from pairbatch.services.protocols import LedgerClientProtocol

logger = get_logger(__name__)


class PendingOperationDetector:
    """Compares confirmed and pending nonces. Never blocks a run."""

    def __init__(self, ledger: LedgerClientProtocol) -> None:
        self.ledger = ledger

    def check(self, identity: str) -> SequenceNumbers | None:
        """Warn when ``identity`` has unconfirmed writes.

        Returns the observed sequence numbers, or None when they could not
        be read.
        """
        try:
            numbers = self.ledger.get_sequence_numbers(identity)
        except Exception as exc:
            logger.warning("pending_check_failed", identity=identity, error=str(exc))
            return None

        if numbers.has_pending:
            logger.warning(
                "pending_operations_detected",
                identity=identity,
                pending=numbers.pending_count,
                confirmed_nonce=numbers.confirmed,
                pending_nonce=numbers.including_pending,
                advice="buffered gas pricing will be used; consider waiting for confirmation",
            )
        else:
            logger.info("no_pending_operations", identity=identity, nonce=numbers.confirmed)
        return numbers

"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pairbatch.models.fee_settings import FeeSettings
    from pairbatch.models.ledger import (
        OperationReceipt,
        QueryKind,
        SequenceNumbers,
        SubmitKind,
    )


class LedgerClientProtocol(Protocol):
    """Protocol for the ledger a batch writes to.

    Implementations raise ``LedgerError`` subclasses on failure.
    """

    def submit(
        self,
        kind: SubmitKind,
        params: dict[str, Any],
        fee_settings: FeeSettings,
        timeout: float | None = None,
    ) -> OperationReceipt: ...

    def query(self, kind: QueryKind, params: dict[str, Any]) -> Any: ...

    def get_fee_snapshot(self) -> int | None: ...

    def get_sequence_numbers(self, identity: str) -> SequenceNumbers: ...

"""Typed error taxonomy for ledger operations.

Ledger failures carry an ``ErrorKind``. Retry decisions match that kind
against an explicit allow-list; node error messages are translated into
kinds once, at the ledger client boundary, by ``classify_node_error``.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a failed ledger operation."""

    FEE_TOO_LOW_FOR_REPLACEMENT = "fee-too-low-for-replacement"
    SEQUENCE_NUMBER_TOO_LOW = "sequence-number-too-low"
    OPERATION_ALREADY_SUBMITTED = "operation-already-submitted"
    INSUFFICIENT_FUNDS = "insufficient-funds"
    EXECUTION_REVERTED = "execution-reverted"
    RESOURCE_NOT_FOUND = "resource-not-found"
    CONFIRMATION_TIMEOUT = "confirmation-timeout"
    UNREACHABLE = "unreachable"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


TRANSIENT_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.FEE_TOO_LOW_FOR_REPLACEMENT,
        ErrorKind.SEQUENCE_NUMBER_TOO_LOW,
        ErrorKind.OPERATION_ALREADY_SUBMITTED,
    }
)

# Node message fragments, checked in order. Only the ledger client calls this.
_NODE_MESSAGE_PATTERNS: list[tuple[str, ErrorKind]] = [
    ("replacement transaction underpriced", ErrorKind.FEE_TOO_LOW_FOR_REPLACEMENT),
    ("nonce too low", ErrorKind.SEQUENCE_NUMBER_TOO_LOW),
    ("already known", ErrorKind.OPERATION_ALREADY_SUBMITTED),
    ("insufficient funds", ErrorKind.INSUFFICIENT_FUNDS),
    ("execution reverted", ErrorKind.EXECUTION_REVERTED),
]


class LedgerError(Exception):
    """Base class for classified ledger failures."""

    transient: bool = False

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        self.kind = ErrorKind(kind)
        self.message = message or self.kind.value
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class TransientLedgerError(LedgerError):
    """A failure expected to clear up on resubmission."""

    transient = True


class PermanentLedgerError(LedgerError):
    """A failure that resubmitting will not fix."""


class OperationCancelledError(PermanentLedgerError):
    """Raised when a cancellation token fires or its deadline passes."""

    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(ErrorKind.CANCELLED, message)


class SetupError(Exception):
    """Failure before the first work item is attempted; fatal to the run."""


def ledger_error(kind: ErrorKind, message: str = "") -> LedgerError:
    """Build the transient or permanent variant for ``kind``."""
    if kind in TRANSIENT_KINDS:
        return TransientLedgerError(kind, message)
    return PermanentLedgerError(kind, message)


def classify_node_error(message: str) -> ErrorKind:
    """Map a JSON-RPC node error message to an ``ErrorKind``."""
    lowered = message.lower()
    for fragment, kind in _NODE_MESSAGE_PATTERNS:
        if fragment in lowered:
            return kind
    return ErrorKind.UNKNOWN


def error_kind(exc: BaseException) -> ErrorKind:
    """Return the kind of a ledger error, or UNKNOWN for anything else."""
    if isinstance(exc, LedgerError):
        return exc.kind
    return ErrorKind.UNKNOWN


def is_retryable(
    exc: BaseException,
    allowed_kinds: frozenset[ErrorKind] = TRANSIENT_KINDS,
) -> bool:
    """Retry only ledger errors whose kind is on the allow-list."""
    return isinstance(exc, LedgerError) and exc.kind in allowed_kinds

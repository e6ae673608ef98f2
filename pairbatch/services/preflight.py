"""Setup-phase checks run before the first work item."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from pairbatch.core.errors import SetupError
from pairbatch.models.fee_settings import OperationClass
from pairbatch.models.ledger import QueryKind, SubmitKind
from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from pairbatch.services.fee_estimator import FeeEstimator
    from pairbatch.services.protocols import LedgerClientProtocol
    from pairbatch.services.retry_executor import RetryExecutor

logger = get_logger(__name__)


@dataclass(frozen=True)
class PreflightReport:
    """Balances observed before the batch starts."""

    identity: str
    native_balance: Decimal
    quote_balance: Decimal
    minted: Decimal = Decimal(0)


class Preflight:
    """Checks balances and tops up the quote stablecoin when it is empty."""

    def __init__(
        self,
        ledger: LedgerClientProtocol,
        fee_estimator: FeeEstimator,
        retry_executor: RetryExecutor,
        auto_mint: bool = True,
        mint_amount: Decimal = Decimal(1_000_000),
        confirmation_timeout: float = 120.0,
    ) -> None:
        self.ledger = ledger
        self.fees = fee_estimator
        self.retry = retry_executor
        self.auto_mint = auto_mint
        self.mint_amount = mint_amount
        self.confirmation_timeout = confirmation_timeout

    def run(self, identity: str) -> PreflightReport:
        """Read balances and mint quote tokens if needed.

        Raises:
            SetupError: the ledger could not be read or the mint failed.
        """
        try:
            native = self.ledger.query(QueryKind.NATIVE_BALANCE, {"owner": identity})
            quote = self.ledger.query(QueryKind.QUOTE_BALANCE, {"owner": identity})
        except Exception as exc:
            msg = f"Ledger unreachable during setup: {exc}"
            raise SetupError(msg) from exc

        logger.info("identity_balances", identity=identity, native=str(native), quote=str(quote))

        minted = Decimal(0)
        if quote == 0:
            if not self.auto_mint:
                logger.warning("quote_balance_empty", identity=identity)
            else:
                minted = self._mint(identity)
                quote = quote + minted

        return PreflightReport(
            identity=identity,
            native_balance=Decimal(native),
            quote_balance=Decimal(quote),
            minted=minted,
        )

    def _mint(self, identity: str) -> Decimal:
        logger.warning("quote_balance_empty_minting", identity=identity, amount=str(self.mint_amount))

        def mint() -> object:
            return self.ledger.submit(
                SubmitKind.MINT_QUOTE,
                {"to": identity, "amount": self.mint_amount},
                self.fees.estimate(OperationClass.APPROVAL),
                timeout=self.confirmation_timeout,
            )

        try:
            result = self.retry.execute(mint, name="mint quote")
        except Exception as exc:
            msg = f"Minting quote tokens failed: {exc}"
            raise SetupError(msg) from exc

        logger.info("quote_tokens_minted", amount=str(self.mint_amount), attempts=result.attempts)
        return self.mint_amount

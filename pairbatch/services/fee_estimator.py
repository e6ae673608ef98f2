"""Buffered gas pricing per operation class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pairbatch.core.fees import apply_fee_buffer, format_gwei, resolve_base_fee
from pairbatch.models.fee_settings import FeeSettings, OperationClass
from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from pairbatch.models.config import Config
    from pairbatch.services.protocols import LedgerClientProtocol

logger = get_logger(__name__)


class FeeEstimator:
    """Prices writes from the ledger's current fee snapshot plus a buffer."""

    def __init__(
        self,
        ledger: LedgerClientProtocol,
        floor_wei: int = 2_000_000_000,
        buffer_percent: int = 50,
        approval_gas_limit: int = 60_000,
        creation_gas_limit: int = 200_000,
    ) -> None:
        self.ledger = ledger
        self.floor_wei = floor_wei
        self.buffer_percent = buffer_percent
        self.gas_limits = {
            OperationClass.APPROVAL: approval_gas_limit,
            OperationClass.CREATION: creation_gas_limit,
        }

    @classmethod
    def from_config(cls, ledger: LedgerClientProtocol, config: Config) -> FeeEstimator:
        return cls(
            ledger,
            floor_wei=config.fee_floor_wei,
            buffer_percent=config.fee_buffer_percent,
            approval_gas_limit=config.approval_gas_limit,
            creation_gas_limit=config.creation_gas_limit,
        )

    def estimate(self, operation_class: OperationClass) -> FeeSettings:
        """Return fee settings for one write of ``operation_class``.

        A missing or non-positive snapshot falls back to the configured floor.
        """
        snapshot = self.ledger.get_fee_snapshot()
        base_fee = resolve_base_fee(snapshot, self.floor_wei)
        if base_fee != snapshot:
            logger.info(
                "fee_snapshot_unavailable",
                snapshot=snapshot,
                floor_gwei=format_gwei(self.floor_wei),
            )

        settings = FeeSettings(
            operation_class=operation_class,
            gas_price=apply_fee_buffer(base_fee, self.buffer_percent),
            gas_limit=self.gas_limits[OperationClass(operation_class)],
        )
        logger.debug(
            "fee_settings_estimated",
            operation_class=settings.operation_class.value,
            gas_price_gwei=format_gwei(settings.gas_price),
            gas_limit=settings.gas_limit,
        )
        return settings

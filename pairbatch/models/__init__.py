"""Pydantic data models for trading pair batch runs."""

from pairbatch.models.batch_result import BatchResult
from pairbatch.models.config import BackoffStrategy, Config
from pairbatch.models.deployment import DeployedContracts, Deployment
from pairbatch.models.fee_settings import FeeSettings, OperationClass
from pairbatch.models.ledger import (
    AssetInfo,
    OperationReceipt,
    QueryKind,
    SequenceNumbers,
    SubmitKind,
    TradingPairState,
)
from pairbatch.models.outcome import OperationOutcome, OutcomeStatus, SagaStep
from pairbatch.models.work_item import WorkItem

__all__ = [
    "AssetInfo",
    "BackoffStrategy",
    "BatchResult",
    "Config",
    "DeployedContracts",
    "Deployment",
    "FeeSettings",
    "OperationClass",
    "OperationOutcome",
    "OperationReceipt",
    "OutcomeStatus",
    "QueryKind",
    "SagaStep",
    "SequenceNumbers",
    "SubmitKind",
    "TradingPairState",
    "WorkItem",
]

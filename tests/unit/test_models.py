"""Unit tests for Pydantic models and configuration validators."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import SecretStr, ValidationError

from pairbatch.core.errors import ErrorKind
from pairbatch.models.batch_result import BatchResult
from pairbatch.models.config import BackoffStrategy, Config
from pairbatch.models.deployment import Deployment
from pairbatch.models.fee_settings import FeeSettings, OperationClass
from pairbatch.models.ledger import SequenceNumbers
from pairbatch.models.outcome import OperationOutcome, OutcomeStatus, SagaStep
from pairbatch.models.work_item import WorkItem

ASSET = "0x" + "1f" * 20


def _item_data(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "symbol": "DANGCEM",
        "asset_address": ASSET,
        "name": "Dangote Cement",
        "company_name": "Dangote Cement Plc",
        "quote_liquidity": "50000",
        "asset_liquidity": "1000",
        "fee_rate": 30,
    }
    data.update(overrides)
    return data


def _outcome_data(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "symbol": "DANGCEM",
        "asset_address": ASSET,
        "quote_liquidity": Decimal(50_000),
        "asset_liquidity": Decimal(1_000),
        "fee_rate": 30,
        "status": OutcomeStatus.SUCCEEDED,
        "attempts": 1,
    }
    data.update(overrides)
    return data


class TestWorkItem:
    """Tests for WorkItem validation."""

    def test_valid_item(self) -> None:
        item = WorkItem(**_item_data())
        assert item.quote_liquidity == Decimal(50_000)
        assert item.target_liquidity == Decimal(0)
        assert item.fee_percent == Decimal("0.3")

    @pytest.mark.parametrize("symbol", ["", "dangcem", "DANG-CEM", "A" * 21])
    def test_invalid_symbol_rejected(self, symbol: str) -> None:
        with pytest.raises(ValidationError, match="symbol"):
            WorkItem(**_item_data(symbol=symbol))

    @pytest.mark.parametrize("address", ["0x123", "1f" * 21, "0x" + "zz" * 20])
    def test_invalid_address_rejected(self, address: str) -> None:
        with pytest.raises(ValidationError, match="asset_address"):
            WorkItem(**_item_data(asset_address=address))

    @pytest.mark.parametrize("field", ["quote_liquidity", "asset_liquidity"])
    def test_non_positive_liquidity_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError, match="liquidity"):
            WorkItem(**_item_data(**{field: "0"}))

    @pytest.mark.parametrize("fee_rate", [-1, 1001])
    def test_fee_rate_bounds(self, fee_rate: int) -> None:
        with pytest.raises(ValidationError, match="fee_rate"):
            WorkItem(**_item_data(fee_rate=fee_rate))

    def test_negative_target_liquidity_rejected(self) -> None:
        with pytest.raises(ValidationError, match="target_liquidity"):
            WorkItem(**_item_data(target_liquidity="-1"))

    def test_item_is_frozen(self) -> None:
        item = WorkItem(**_item_data())
        with pytest.raises(ValidationError):
            item.symbol = "MTNN"  # type: ignore[misc]


class TestFeeSettings:
    """Tests for FeeSettings."""

    def test_max_cost(self) -> None:
        settings = FeeSettings(operation_class=OperationClass.CREATION, gas_price=3, gas_limit=200_000)
        assert settings.max_cost == 600_000

    @pytest.mark.parametrize(("gas_price", "gas_limit"), [(0, 60_000), (3, 0)])
    def test_non_positive_values_rejected(self, gas_price: int, gas_limit: int) -> None:
        with pytest.raises(ValidationError):
            FeeSettings(
                operation_class=OperationClass.APPROVAL, gas_price=gas_price, gas_limit=gas_limit
            )


class TestOperationOutcome:
    """Tests for the terminal outcome invariants."""

    def test_failed_requires_error_kind(self) -> None:
        with pytest.raises(ValidationError, match="error_kind"):
            OperationOutcome(**_outcome_data(status=OutcomeStatus.FAILED))

    def test_success_must_not_carry_error_kind(self) -> None:
        with pytest.raises(ValidationError, match="error_kind"):
            OperationOutcome(**_outcome_data(error_kind=ErrorKind.UNKNOWN))

    def test_negative_attempts_rejected(self) -> None:
        with pytest.raises(ValidationError, match="attempts"):
            OperationOutcome(**_outcome_data(attempts=-1))

    def test_skipped_counts_as_success(self) -> None:
        outcome = OperationOutcome(**_outcome_data(status=OutcomeStatus.SKIPPED_DUPLICATE))
        assert outcome.is_success is True

    def test_serializes_with_camel_case_aliases(self) -> None:
        outcome = OperationOutcome(
            **_outcome_data(
                status=OutcomeStatus.FAILED,
                error_kind=ErrorKind.EXECUTION_REVERTED,
                error_message="reverted",
                failed_step=SagaStep.CREATE_PAIR,
            )
        )
        dumped = outcome.model_dump(mode="json", by_alias=True)
        assert dumped["assetAddress"] == ASSET
        assert dumped["errorKind"] == "execution-reverted"
        assert dumped["failedStep"] == "create-pair"
        assert dumped["resourceCreated"] is False


class TestBatchResult:
    """Tests for derived batch counts."""

    def test_counts_derive_from_outcomes(self) -> None:
        result = BatchResult(network="sepolia", submitting_identity="0xabc")
        result.record(OperationOutcome(**_outcome_data()))
        result.record(OperationOutcome(**_outcome_data(status=OutcomeStatus.SKIPPED_DUPLICATE)))
        result.record(
            OperationOutcome(
                **_outcome_data(status=OutcomeStatus.FAILED, error_kind=ErrorKind.UNKNOWN)
            )
        )

        assert result.total_count == 3
        assert result.success_count == 2
        assert result.failure_count == 1
        assert result.skipped_count == 1
        assert result.success_count + result.failure_count == result.total_count
        assert len(result.succeeded) == 1
        assert len(result.failed) == 1

    def test_empty_batch(self) -> None:
        result = BatchResult(network="sepolia", submitting_identity="0xabc")
        assert (result.total_count, result.success_count, result.failure_count) == (0, 0, 0)

    def test_dump_uses_camel_case_and_round_trips(self) -> None:
        result = BatchResult(network="sepolia", chain_id=11155111, submitting_identity="0xabc")
        result.record(OperationOutcome(**_outcome_data()))

        dumped = result.model_dump(mode="json", by_alias=True)

        assert dumped["chainId"] == 11155111
        assert dumped["submittingIdentity"] == "0xabc"
        assert dumped["totalCount"] == 1
        assert dumped["successCount"] == 1
        assert dumped["failureCount"] == 0
        assert BatchResult.model_validate(dumped).total_count == 1


class TestDeployment:
    """Tests for deployment records."""

    def test_parses_deployment_file_shape(self) -> None:
        deployment = Deployment.model_validate(
            {
                "network": "sepolia",
                "chainId": 11155111,
                "contracts": {
                    "ngnStablecoin": "0x" + "01" * 20,
                    "stockNGNDEX": "0x" + "02" * 20,
                    "tradingPairManager": "0x" + "03" * 20,
                },
            }
        )

        assert deployment.chain_id == 11155111
        assert deployment.contracts.stock_ngn_dex == "0x" + "02" * 20
        assert deployment.contract_map() == {
            "ngnStablecoin": "0x" + "01" * 20,
            "stockNGNDEX": "0x" + "02" * 20,
            "tradingPairManager": "0x" + "03" * 20,
        }

    def test_invalid_contract_address_rejected(self) -> None:
        with pytest.raises(ValidationError, match="invalid contract address"):
            Deployment.model_validate(
                {
                    "network": "sepolia",
                    "chainId": 1,
                    "contracts": {"ngnStablecoin": "nope", "stockNGNDEX": "0x" + "02" * 20},
                }
            )


class TestSequenceNumbers:
    """Tests for pending count derivation."""

    def test_pending_count(self) -> None:
        numbers = SequenceNumbers(confirmed=5, including_pending=7)
        assert numbers.pending_count == 2
        assert numbers.has_pending is True

    def test_pending_count_never_negative(self) -> None:
        numbers = SequenceNumbers(confirmed=7, including_pending=5)
        assert numbers.pending_count == 0
        assert numbers.has_pending is False


class TestConfigValidators:
    """Tests for Config field validators, called directly."""

    def test_defaults(self) -> None:
        config = Config(_env_file=None)  # type: ignore[call-arg]
        assert config.max_retries == 3
        assert config.fee_buffer_percent == 50
        assert config.approval_gas_limit == 60_000
        assert config.creation_gas_limit == 200_000
        assert config.backoff_strategy is BackoffStrategy.FIXED
        assert config.transient_kinds == {
            ErrorKind.FEE_TOO_LOW_FOR_REPLACEMENT,
            ErrorKind.SEQUENCE_NUMBER_TOO_LOW,
            ErrorKind.OPERATION_ALREADY_SUBMITTED,
        }

    def test_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAIRBATCH_NETWORK", "hardhat")
        monkeypatch.setenv("PAIRBATCH_MAX_RETRIES", "5")
        config = Config(_env_file=None)  # type: ignore[call-arg]
        assert config.network == "hardhat"
        assert config.max_retries == 5

    def test_validate_network(self) -> None:
        assert Config.validate_network("bitfinity_testnet") == "bitfinity_testnet"
        with pytest.raises(ValueError, match="network"):
            Config.validate_network("Sepolia Main")

    def test_validate_private_key(self) -> None:
        key = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
        assert Config.validate_private_key(None) is None
        validated = Config.validate_private_key(SecretStr(f" 0x{key} "))
        assert validated is not None
        assert validated.get_secret_value() == f"0x{key}"
        with pytest.raises(ValueError, match="private_key"):
            Config.validate_private_key(SecretStr("0x1234"))

    def test_validate_log_level(self) -> None:
        assert Config.validate_log_level("debug") == "DEBUG"
        with pytest.raises(ValueError, match="log_level"):
            Config.validate_log_level("VERBOSE")

    @pytest.mark.parametrize("value", [0, 11])
    def test_validate_max_retries_bounds(self, value: int) -> None:
        with pytest.raises(ValueError, match="max_retries"):
            Config.validate_max_retries(value)

    def test_validate_interval(self) -> None:
        assert Config.validate_interval(0) == 0
        with pytest.raises(ValueError, match="negative"):
            Config.validate_interval(-0.5)

    def test_validate_fee_floor(self) -> None:
        with pytest.raises(ValueError, match="fee_floor_wei"):
            Config.validate_fee_floor(0)

    def test_validate_fee_buffer(self) -> None:
        assert Config.validate_fee_buffer(0) == 0
        with pytest.raises(ValueError, match="fee_buffer_percent"):
            Config.validate_fee_buffer(501)

    def test_validate_gas_limit(self) -> None:
        with pytest.raises(ValueError, match="21000"):
            Config.validate_gas_limit(20_999)

    def test_validate_timeouts(self) -> None:
        with pytest.raises(ValueError, match="timeouts"):
            Config.validate_positive_timeout(0)
        assert Config.validate_optional_timeout(None) is None
        with pytest.raises(ValueError, match="deadlines"):
            Config.validate_optional_timeout(-1)

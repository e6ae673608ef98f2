"""Application configuration model using pydantic-settings."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pairbatch.core.errors import TRANSIENT_KINDS, ErrorKind


class BackoffStrategy(StrEnum):
    """Delay schedule between retry attempts."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


class Config(BaseSettings):
    """Batch run configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PAIRBATCH_",
        case_sensitive=False,
        extra="ignore",
    )

    network: str = "sepolia"
    rpc_url: str | None = None
    private_key: SecretStr | None = None
    deployments_dir: str = "deployments"
    work_items_path: str = "data/work_items.json"
    results_dir: str = "deployments"
    log_level: str = "INFO"

    max_retries: int = 3
    retry_interval_seconds: float = 2.0
    max_retry_interval_seconds: float = 30.0
    backoff_strategy: BackoffStrategy = BackoffStrategy.FIXED
    transient_error_kinds: list[ErrorKind] = sorted(TRANSIENT_KINDS)

    fee_floor_wei: int = 2_000_000_000
    fee_buffer_percent: int = 50
    approval_gas_limit: int = 60_000
    creation_gas_limit: int = 200_000

    confirmation_timeout_seconds: float = 120.0
    step_timeout_seconds: float | None = 600.0
    batch_timeout_seconds: float | None = None
    request_timeout_seconds: float = 30.0

    auto_mint_quote: bool = True
    quote_mint_amount: int = 1_000_000

    @field_validator("network")
    @classmethod
    def validate_network(cls, value: str) -> str:
        """Network name must be a lowercase identifier."""
        if not re.fullmatch(r"[a-z0-9_\-]+", value):
            msg = "network must contain only lowercase letters, digits, '_' or '-'"
            raise ValueError(msg)
        return value

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, value: SecretStr | None) -> SecretStr | None:
        """Private key must be 32 bytes of hex, with or without 0x prefix."""
        if value is None:
            return value
        raw = value.get_secret_value().strip()
        if not re.fullmatch(r"(0x)?[0-9a-fA-F]{64}", raw):
            msg = "private_key must be a 64-character hex string"
            raise ValueError(msg)
        return SecretStr(raw)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, value: int) -> int:
        """Max retries must be between 1 and 10."""
        if value < 1 or value > 10:
            msg = "max_retries must be between 1 and 10"
            raise ValueError(msg)
        return value

    @field_validator("retry_interval_seconds", "max_retry_interval_seconds")
    @classmethod
    def validate_interval(cls, value: float) -> float:
        """Retry intervals must not be negative."""
        if value < 0:
            msg = "retry intervals must not be negative"
            raise ValueError(msg)
        return value

    @field_validator("fee_floor_wei")
    @classmethod
    def validate_fee_floor(cls, value: int) -> int:
        """Fee floor must be positive."""
        if value <= 0:
            msg = "fee_floor_wei must be greater than 0"
            raise ValueError(msg)
        return value

    @field_validator("fee_buffer_percent")
    @classmethod
    def validate_fee_buffer(cls, value: int) -> int:
        """Fee buffer must be between 0 and 500 percent."""
        if value < 0 or value > 500:
            msg = "fee_buffer_percent must be between 0 and 500"
            raise ValueError(msg)
        return value

    @field_validator("approval_gas_limit", "creation_gas_limit")
    @classmethod
    def validate_gas_limit(cls, value: int) -> int:
        """Gas limits must cover at least a plain transfer."""
        if value < 21_000:
            msg = "gas limits must be at least 21000"
            raise ValueError(msg)
        return value

    @field_validator("confirmation_timeout_seconds", "request_timeout_seconds")
    @classmethod
    def validate_positive_timeout(cls, value: float) -> float:
        """Timeouts must be positive."""
        if value <= 0:
            msg = "timeouts must be greater than 0"
            raise ValueError(msg)
        return value

    @field_validator("step_timeout_seconds", "batch_timeout_seconds")
    @classmethod
    def validate_optional_timeout(cls, value: float | None) -> float | None:
        """Optional deadlines must be positive when set."""
        if value is not None and value <= 0:
            msg = "deadlines must be greater than 0 when set"
            raise ValueError(msg)
        return value

    @property
    def transient_kinds(self) -> frozenset[ErrorKind]:
        """Retry allow-list as a frozenset."""
        return frozenset(self.transient_error_kinds)

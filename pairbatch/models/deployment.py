"""Deployment record model for the DEX contract system."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")


class DeployedContracts(BaseModel):
    """Contract addresses written by the DEX system deployment."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    ngn_stablecoin: str
    stock_ngn_dex: str = Field(alias="stockNGNDEX")
    trading_pair_manager: str | None = None
    stock_factory: str | None = None

    @field_validator("ngn_stablecoin", "stock_ngn_dex", "trading_pair_manager", "stock_factory")
    @classmethod
    def validate_address(cls, value: str | None) -> str | None:
        """Contract addresses must be 20-byte hex addresses."""
        if value is not None and not _ADDRESS_RE.fullmatch(value):
            msg = f"invalid contract address: {value!r}"
            raise ValueError(msg)
        return value


class Deployment(BaseModel):
    """Network and contract addresses a batch runs against."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    network: str
    chain_id: int
    contracts: DeployedContracts

    def contract_map(self) -> dict[str, str]:
        """Contract addresses keyed by their camelCase name, omitting unset ones."""
        return self.contracts.model_dump(by_alias=True, exclude_none=True)

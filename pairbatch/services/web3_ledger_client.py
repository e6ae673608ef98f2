"""Ledger client for the NGN stock DEX on an EVM JSON-RPC network."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from pairbatch.core.errors import (
    ErrorKind,
    LedgerError,
    PermanentLedgerError,
    classify_node_error,
    ledger_error,
)
from pairbatch.models.ledger import (
    AssetInfo,
    OperationReceipt,
    QueryKind,
    SequenceNumbers,
    SubmitKind,
    TradingPairState,
)
from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from pairbatch.models.fee_settings import FeeSettings

logger = get_logger(__name__)

DEFAULT_CONFIRMATION_TIMEOUT = 120.0

QUOTE_TOKEN_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "name": "mint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

ASSET_TOKEN_ABI: list[dict[str, Any]] = [
    QUOTE_TOKEN_ABI[0],
    {
        "inputs": [],
        "name": "getStockInfo",
        "outputs": [
            {
                "components": [
                    {"internalType": "string", "name": "symbol", "type": "string"},
                    {"internalType": "string", "name": "companyName", "type": "string"},
                    {"internalType": "string", "name": "sector", "type": "string"},
                    {"internalType": "uint256", "name": "totalShares", "type": "uint256"},
                    {"internalType": "uint256", "name": "marketCap", "type": "uint256"},
                    {"internalType": "bool", "name": "isActive", "type": "bool"},
                    {"internalType": "uint256", "name": "lastUpdated", "type": "uint256"},
                ],
                "internalType": "struct NigerianStockToken.StockInfo",
                "name": "",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

DEX_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "address", "name": "stockToken", "type": "address"},
            {"internalType": "uint256", "name": "initialNGNAmount", "type": "uint256"},
            {"internalType": "uint256", "name": "initialStockAmount", "type": "uint256"},
            {"internalType": "uint256", "name": "feeRate", "type": "uint256"},
        ],
        "name": "createTradingPair",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "stockToken", "type": "address"}],
        "name": "getTradingPair",
        "outputs": [
            {
                "components": [
                    {"internalType": "address", "name": "stockToken", "type": "address"},
                    {"internalType": "uint256", "name": "ngnReserve", "type": "uint256"},
                    {"internalType": "uint256", "name": "stockReserve", "type": "uint256"},
                    {"internalType": "uint256", "name": "totalLiquidity", "type": "uint256"},
                    {"internalType": "uint256", "name": "feeRate", "type": "uint256"},
                    {"internalType": "bool", "name": "isActive", "type": "bool"},
                    {"internalType": "uint256", "name": "lastUpdateTime", "type": "uint256"},
                    {"internalType": "uint256", "name": "priceImpactLimit", "type": "uint256"},
                ],
                "internalType": "struct StockNGNDEX.TradingPair",
                "name": "",
                "type": "tuple",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "stockToken", "type": "address"}],
        "name": "getCurrentPrice",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def _to_ledger_error(exc: Exception) -> LedgerError:
    """Translate a web3/transport exception into a typed ledger error."""
    if isinstance(exc, LedgerError):
        return exc
    if isinstance(exc, TimeExhausted):
        return PermanentLedgerError(ErrorKind.CONFIRMATION_TIMEOUT, str(exc))
    if isinstance(exc, requests.ConnectionError | requests.Timeout):
        return PermanentLedgerError(ErrorKind.UNREACHABLE, str(exc))
    if isinstance(exc, ContractLogicError):
        return PermanentLedgerError(ErrorKind.EXECUTION_REVERTED, str(exc))
    return ledger_error(classify_node_error(str(exc)), str(exc))


class Web3LedgerClient:
    """Signs and submits DEX writes from a single private key."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        quote_token_address: str,
        dex_address: str,
        chain_id: int | None = None,
        request_timeout: float = 30.0,
        w3: Web3 | None = None,
    ) -> None:
        self.w3 = w3 or Web3(
            Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        )
        self.account = Account.from_key(private_key)
        self.chain_id = chain_id
        self.quote_token = self.w3.eth.contract(
            address=Web3.to_checksum_address(quote_token_address), abi=QUOTE_TOKEN_ABI
        )
        self.dex = self.w3.eth.contract(
            address=Web3.to_checksum_address(dex_address), abi=DEX_ABI
        )

    @property
    def identity(self) -> str:
        """Address of the submitting account."""
        return self.account.address

    def connect(self) -> int:
        """Verify the RPC endpoint answers and return its chain id.

        Raises:
            LedgerError: the node is unreachable or on the wrong chain.
        """
        try:
            remote_chain_id = int(self.w3.eth.chain_id)
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise _to_ledger_error(exc) from exc
        if self.chain_id is not None and remote_chain_id != self.chain_id:
            msg = f"RPC chain id {remote_chain_id} does not match deployment chain id {self.chain_id}"
            raise PermanentLedgerError(ErrorKind.UNKNOWN, msg)
        self.chain_id = remote_chain_id
        return remote_chain_id

    def get_fee_snapshot(self) -> int | None:
        try:
            gas_price = self.w3.eth.gas_price
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise _to_ledger_error(exc) from exc
        return int(gas_price) if gas_price is not None else None

    def get_sequence_numbers(self, identity: str) -> SequenceNumbers:
        address = Web3.to_checksum_address(identity)
        try:
            confirmed = self.w3.eth.get_transaction_count(address, "latest")
            pending = self.w3.eth.get_transaction_count(address, "pending")
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise _to_ledger_error(exc) from exc
        return SequenceNumbers(confirmed=int(confirmed), including_pending=int(pending))

    def submit(
        self,
        kind: SubmitKind,
        params: dict[str, Any],
        fee_settings: FeeSettings,
        timeout: float | None = None,
    ) -> OperationReceipt:
        """Sign, send and wait for one write to be mined."""
        fn = self._build_function(SubmitKind(kind), params)
        try:
            tx = fn.build_transaction(
                {
                    "from": self.account.address,
                    "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
                    "chainId": self.chain_id or int(self.w3.eth.chain_id),
                    "gasPrice": fee_settings.gas_price,
                    "gas": fee_settings.gas_limit,
                }
            )
            signed = self.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.debug("transaction_sent", kind=str(kind), tx_hash=Web3.to_hex(tx_hash))
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=DEFAULT_CONFIRMATION_TIMEOUT if timeout is None else timeout
            )
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise _to_ledger_error(exc) from exc

        if int(receipt["status"]) != 1:
            msg = f"{kind} transaction {Web3.to_hex(tx_hash)} reverted"
            raise PermanentLedgerError(ErrorKind.EXECUTION_REVERTED, msg)

        return OperationReceipt(
            tx_hash=Web3.to_hex(tx_hash),
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"]),
            status=int(receipt["status"]),
        )

    def query(self, kind: QueryKind, params: dict[str, Any]) -> Any:
        kind = QueryKind(kind)
        try:
            if kind is QueryKind.TRADING_PAIR:
                return self._trading_pair(params["asset"])
            if kind is QueryKind.ASSET_INFO:
                return self._asset_info(params["asset"])
            if kind is QueryKind.CURRENT_PRICE:
                asset = Web3.to_checksum_address(params["asset"])
                return Web3.from_wei(self.dex.functions.getCurrentPrice(asset).call(), "ether")
            if kind is QueryKind.QUOTE_BALANCE:
                owner = Web3.to_checksum_address(params["owner"])
                return Web3.from_wei(self.quote_token.functions.balanceOf(owner).call(), "ether")
            owner = Web3.to_checksum_address(params["owner"])
            return Web3.from_wei(self.w3.eth.get_balance(owner), "ether")
        except (Web3Exception, ValueError, requests.RequestException) as exc:
            raise _to_ledger_error(exc) from exc

    def _trading_pair(self, asset_address: str) -> TradingPairState:
        asset = Web3.to_checksum_address(asset_address)
        try:
            pair = self.dex.functions.getTradingPair(asset).call()
        except ContractLogicError as exc:
            raise PermanentLedgerError(ErrorKind.RESOURCE_NOT_FOUND, str(exc)) from exc
        return TradingPairState(
            asset_address=asset,
            quote_reserve=Decimal(Web3.from_wei(pair[1], "ether")),
            asset_reserve=Decimal(Web3.from_wei(pair[2], "ether")),
            fee_rate=int(pair[4]),
            is_active=bool(pair[5]),
        )

    def _asset_info(self, asset_address: str) -> AssetInfo:
        asset = self.w3.eth.contract(
            address=Web3.to_checksum_address(asset_address), abi=ASSET_TOKEN_ABI
        )
        try:
            info = asset.functions.getStockInfo().call()
        except ContractLogicError as exc:
            msg = f"{asset_address} is not a stock token: {exc}"
            raise PermanentLedgerError(ErrorKind.RESOURCE_NOT_FOUND, msg) from exc
        return AssetInfo(symbol=info[0], company_name=info[1], sector=info[2], is_active=bool(info[5]))

    def _build_function(self, kind: SubmitKind, params: dict[str, Any]) -> Any:
        if kind is SubmitKind.APPROVE_QUOTE:
            return self.quote_token.functions.approve(
                self.dex.address, Web3.to_wei(params["amount"], "ether")
            )
        if kind is SubmitKind.APPROVE_ASSET:
            asset = self.w3.eth.contract(
                address=Web3.to_checksum_address(params["asset"]), abi=ASSET_TOKEN_ABI
            )
            return asset.functions.approve(self.dex.address, Web3.to_wei(params["amount"], "ether"))
        if kind is SubmitKind.CREATE_PAIR:
            return self.dex.functions.createTradingPair(
                Web3.to_checksum_address(params["asset"]),
                Web3.to_wei(params["quote_amount"], "ether"),
                Web3.to_wei(params["asset_amount"], "ether"),
                int(params["fee_rate"]),
            )
        return self.quote_token.functions.mint(
            Web3.to_checksum_address(params["to"]), Web3.to_wei(params["amount"], "ether")
        )

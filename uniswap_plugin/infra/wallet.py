"""
Wallet client abstraction

The plugin never touches keys directly. Every on-chain action goes
through a WalletClient, which the host agent supplies (custodial wallet,
smart wallet, local key...). Web3WalletClient is the bundled
implementation backed by a local private key and a JSON-RPC endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from web3 import Web3

from ..config import config as global_config
from ..errors import ConfigurationError, RpcError, TransactionError
from ..types import Chain, TxReceipt, TxStatus
from .evm_signer import EVMSigner, create_web3

logger = logging.getLogger(__name__)


@dataclass
class EVMTransaction:
    """
    Contract call to submit through a wallet client

    Either abi + function_name + args, or raw calldata in data.

    Attributes:
        to: Contract address
        abi: Contract ABI (list of JSON ABI entries)
        function_name: Function to call
        args: Positional arguments for the function
        value: Native value in wei
        data: Pre-encoded calldata (hex string)
        gas: Explicit gas limit (estimated when None)
    """
    to: str
    abi: Optional[List[Dict[str, Any]]] = None
    function_name: Optional[str] = None
    args: Sequence[Any] = field(default_factory=tuple)
    value: int = 0
    data: Optional[str] = None
    gas: Optional[int] = None

    @property
    def label(self) -> str:
        return self.function_name or "raw call"


@runtime_checkable
class WalletClient(Protocol):
    """
    Wallet interface the plugin relies on

    send_transaction returns a dict with at least a "hash" key.
    """

    def get_chain(self) -> Chain:
        ...

    def get_address(self) -> str:
        ...

    def send_transaction(self, transaction: EVMTransaction) -> Dict[str, Any]:
        ...

    def wait_for_transaction_receipt(self, tx_hash: str) -> TxReceipt:
        ...

    def read(self, address: str, abi: List[Dict[str, Any]], function_name: str, args: Sequence[Any] = ()) -> Any:
        ...


class Web3WalletClient:
    """
    WalletClient backed by a local key (EVMSigner) and web3.py

    Usage:
        wallet = Web3WalletClient.from_env()
        plugin = uniswap()
        tools = plugin.get_tools(wallet.get_chain())
    """

    def __init__(
        self,
        signer: EVMSigner,
        web3: Web3,
        chain_id: Optional[int] = None,
        receipt_timeout: Optional[int] = None,
    ):
        self._signer = signer
        self._web3 = web3
        self._chain_id = chain_id
        self._receipt_timeout = receipt_timeout or global_config.tx.confirmation_timeout

    @property
    def web3(self) -> Web3:
        return self._web3

    @property
    def endpoint(self) -> str:
        return getattr(self._web3.provider, "endpoint_uri", None) or "unknown"

    def get_chain(self) -> Chain:
        if self._chain_id is None:
            try:
                self._chain_id = self._web3.eth.chain_id
            except OSError as e:
                raise RpcError.connection_failed(self.endpoint, e) from e
        return Chain(type="evm", id=self._chain_id)

    def get_address(self) -> str:
        return self._signer.address

    def read(self, address: str, abi: List[Dict[str, Any]], function_name: str, args: Sequence[Any] = ()) -> Any:
        """Call a view function (from the wallet address, so owner-gated simulations work)"""
        contract = self._web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        fn = getattr(contract.functions, function_name)(*args)
        try:
            return fn.call({"from": self._signer.address})
        except OSError as e:
            raise RpcError.connection_failed(self.endpoint, e) from e

    def send_transaction(self, transaction: EVMTransaction) -> Dict[str, Any]:
        """
        Build, sign and broadcast a transaction.

        Returns:
            {"hash": "0x..."}

        Raises:
            TransactionError: If building or broadcasting fails
        """
        try:
            tx = self._build_transaction(transaction)
        except Exception as e:
            logger.error(f"Failed to build {transaction.label} for {transaction.to}: {e}")
            raise TransactionError.send_failed(transaction.label, str(e)) from e

        self._add_gas_price(tx)

        tx_hash = self._signer.send(self._web3, tx, transaction.label)
        logger.info(f"Sent {transaction.label} to {transaction.to}: {tx_hash}")
        return {"hash": tx_hash}

    def wait_for_transaction_receipt(self, tx_hash: str) -> TxReceipt:
        """
        Wait until the transaction is mined.

        Raises:
            TransactionError: If the transaction reverted or was not mined in time
        """
        try:
            receipt = self._web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        except Exception as e:
            raise TransactionError.confirmation_failed(tx_hash, e) from e

        if receipt["status"] != 1:
            raise TransactionError.reverted(tx_hash)

        return TxReceipt(
            tx_hash=tx_hash,
            status=TxStatus.SUCCESS,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )

    def _build_transaction(self, transaction: EVMTransaction) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "from": self._signer.address,
            "value": transaction.value,
            "chainId": self.get_chain().id,
        }

        if transaction.data is not None:
            tx = dict(params)
            tx["to"] = Web3.to_checksum_address(transaction.to)
            tx["data"] = transaction.data
        else:
            if transaction.abi is None or not transaction.function_name:
                raise ValueError("Transaction needs either data or abi + function_name")
            contract = self._web3.eth.contract(
                address=Web3.to_checksum_address(transaction.to),
                abi=transaction.abi,
            )
            if transaction.gas is not None:
                params["gas"] = transaction.gas
            fn = getattr(contract.functions, transaction.function_name)(*transaction.args)
            tx = fn.build_transaction(params)

        if transaction.gas is not None:
            tx["gas"] = transaction.gas
        else:
            estimate = tx.get("gas") or self._web3.eth.estimate_gas(tx)
            tx["gas"] = int(estimate * global_config.uniswap.gas_limit_multiplier)

        return tx

    def _add_gas_price(self, tx: Dict[str, Any]):
        """Add EIP-1559 fees with the configured priority fee

        build_transaction may fill fee fields itself; they are replaced here
        and any legacy gasPrice is dropped.
        """
        latest_block = self._web3.eth.get_block("latest")
        base_fee = latest_block.get("baseFeePerGas", 0)
        max_priority_fee = self._web3.to_wei(global_config.uniswap.priority_fee_gwei, "gwei")
        max_fee = int(base_fee * global_config.uniswap.base_fee_multiplier) + max_priority_fee
        tx["maxFeePerGas"] = max_fee
        tx["maxPriorityFeePerGas"] = max_priority_fee
        tx.pop("gasPrice", None)

    @classmethod
    def from_env(
        cls,
        rpc_url: Optional[str] = None,
        env_var: str = "EVM_PRIVATE_KEY",
        chain_id: Optional[int] = None,
    ) -> "Web3WalletClient":
        """
        Create a wallet client from EVM_PRIVATE_KEY and EVM_RPC_URL

        Raises:
            WalletError: If the private key is not set
            ConfigurationError: If no RPC URL is configured
        """
        rpc_url = rpc_url or global_config.uniswap.rpc_url
        if not rpc_url:
            raise ConfigurationError.missing("EVM_RPC_URL")

        signer = EVMSigner.from_env(env_var)
        web3 = create_web3(rpc_url, timeout=global_config.uniswap.timeout)
        return cls(signer, web3, chain_id=chain_id)

    def __repr__(self) -> str:
        return f"Web3WalletClient(address={self.get_address()}, chain_id={self._chain_id})"

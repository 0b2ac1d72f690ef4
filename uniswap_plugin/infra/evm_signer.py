"""
Local-key EVM signing for the bundled wallet client

The service sends dependent transactions back to back (approve then
mint, decreaseLiquidity then collect) without waiting for the pending
nonce to move, so nonces are reserved locally per address.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import HTTPProvider, Web3

from ..errors import TransactionError, WalletError

logger = logging.getLogger(__name__)

# Node rejections that mean the transaction never entered the mempool
_REJECTED_KEYWORDS = (
    "nonce too low",
    "replacement transaction",
    "insufficient funds",
    "gas too low",
    "intrinsic gas",
    "invalid sender",
    "execution reverted",
)


class NonceTracker:
    """
    Per-address nonce reservations

    The next nonce is max(pending count on chain, last reserved + 1), so
    transactions sent from elsewhere are picked up on the next reservation.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._next: Dict[str, int] = {}

    def reserve(self, web3: Web3, address: str) -> int:
        key = address.lower()
        with self._lock:
            chain_nonce = web3.eth.get_transaction_count(Web3.to_checksum_address(address), "pending")
            nonce = max(chain_nonce, self._next.get(key, 0))
            self._next[key] = nonce + 1
            logger.debug(f"Reserved nonce {nonce} for {key[:10]}... (chain={chain_nonce})")
            return nonce

    def release(self, address: str, nonce: int) -> bool:
        """
        Hand a rejected nonce back. Only the most recent reservation can be
        returned; anything older would leave a gap.
        """
        key = address.lower()
        with self._lock:
            if self._next.get(key) == nonce + 1:
                self._next[key] = nonce
                return True
            return False

    def reset(self, address: Optional[str] = None) -> None:
        with self._lock:
            if address is None:
                self._next.clear()
            else:
                self._next.pop(address.lower(), None)


_nonce_tracker = NonceTracker()


def get_nonce_tracker() -> NonceTracker:
    """Process-wide tracker shared by all signers"""
    return _nonce_tracker


class EVMSigner:
    """
    Signs and broadcasts transactions with a local private key

    Usage:
        signer = EVMSigner.from_env()
        tx_hash = signer.send(web3, tx_dict, "approve")
    """

    def __init__(self, account: LocalAccount, nonce_tracker: Optional[NonceTracker] = None):
        self._account = account
        self._nonces = nonce_tracker or _nonce_tracker

    @property
    def address(self) -> str:
        return self._account.address

    def send(self, web3: Web3, tx: Dict[str, Any], label: str = "transaction") -> str:
        """
        Sign and broadcast tx, filling in the nonce when absent.

        Returns:
            Transaction hash (0x-prefixed)

        Raises:
            TransactionError: If signing or broadcasting fails
        """
        reserved = None
        if "nonce" not in tx:
            reserved = self._nonces.reserve(web3, self.address)
            tx["nonce"] = reserved

        try:
            signed = self._account.sign_transaction(tx)
            tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            message = str(e)
            if reserved is not None and any(k in message.lower() for k in _REJECTED_KEYWORDS):
                self._nonces.release(self.address, reserved)
            logger.error(f"Failed to send {label} (nonce={tx.get('nonce')}): {message}")
            raise TransactionError.send_failed(label, message) from e

        return Web3.to_hex(tx_hash)

    @classmethod
    def from_private_key(cls, private_key: str) -> "EVMSigner":
        """Private key as hex, with or without 0x"""
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        return cls(Account.from_key(private_key))

    @classmethod
    def from_env(cls, env_var: str = "EVM_PRIVATE_KEY") -> "EVMSigner":
        """
        Raises:
            WalletError: If the variable is not set
        """
        private_key = os.getenv(env_var, "")
        if not private_key:
            raise WalletError.not_configured()
        return cls.from_private_key(private_key)

    def __repr__(self) -> str:
        return f"EVMSigner(address={self.address})"


def create_web3(rpc_url: str, timeout: float = 30) -> Web3:
    """Web3 over HTTP with a request timeout"""
    return Web3(HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

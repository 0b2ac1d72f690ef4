"""
Infrastructure layer for the Uniswap plugin

Provides:
- WalletClient: wallet interface the tools submit transactions through
- Web3WalletClient: local-key implementation using web3.py
- EVMSigner: EVM transaction signing with nonce management
- TTLCache: expiring in-memory cache for subgraph results
- CrossmintWalletAPI: smart wallet provisioning
- call_with_retry / CorrelationContext: retry and log tracing helpers
"""

from .cache import TTLCache
from .crossmint import CrossmintWalletAPI
from .evm_signer import EVMSigner, NonceTracker, create_web3, get_nonce_tracker
from .retry import CorrelationContext, call_with_retry, classify_error, get_correlation_id
from .wallet import EVMTransaction, WalletClient, Web3WalletClient

__all__ = [
    "TTLCache",
    "CrossmintWalletAPI",
    "EVMSigner",
    "NonceTracker",
    "create_web3",
    "get_nonce_tracker",
    "CorrelationContext",
    "call_with_retry",
    "classify_error",
    "get_correlation_id",
    "EVMTransaction",
    "WalletClient",
    "Web3WalletClient",
]

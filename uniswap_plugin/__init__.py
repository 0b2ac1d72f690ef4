"""
Uniswap Plugin - Uniswap V3 liquidity and swap tools for AI agents

Provides tools for:
- Adding, removing and collecting fees from V3 positions
- Exact-input and exact-output single-pool swaps (SwapRouter02)
- Pool and position lookups via the Uniswap V3 subgraph
- High-fee and newly created pool scans

Supported chains: Ethereum (1), Base (8453), Base Sepolia (84532)
"""

from .plugin import UniswapPlugin, uniswap
from .tools import Tool, get_tools
from .protocols.uniswap.service import UniswapService
from .queries import DexDataQuery
from .types import (
    Chain,
    Token,
    PoolInfo,
    Position,
    SwapResult,
    CollectFeesResult,
    TxReceipt,
    TxStatus,
)
from .errors import (
    UniswapPluginError,
    RpcError,
    SubgraphError,
    PoolUnavailable,
    PositionNotFound,
    TransactionError,
    WalletError,
    ConfigurationError,
    ParameterError,
    ErrorCode,
)

# Wallet infrastructure
from .infra.wallet import EVMTransaction, WalletClient, Web3WalletClient
from .infra.evm_signer import EVMSigner, create_web3

__all__ = [
    # Plugin
    "UniswapPlugin",
    "uniswap",
    "Tool",
    "get_tools",
    "UniswapService",
    "DexDataQuery",
    # Types
    "Chain",
    "Token",
    "PoolInfo",
    "Position",
    "SwapResult",
    "CollectFeesResult",
    "TxReceipt",
    "TxStatus",
    # Errors
    "UniswapPluginError",
    "RpcError",
    "SubgraphError",
    "PoolUnavailable",
    "PositionNotFound",
    "TransactionError",
    "WalletError",
    "ConfigurationError",
    "ParameterError",
    "ErrorCode",
    # Wallet
    "EVMTransaction",
    "WalletClient",
    "Web3WalletClient",
    "EVMSigner",
    "create_web3",
]

__version__ = "0.1.0"

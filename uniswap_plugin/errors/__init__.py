"""
Error definitions for the Uniswap plugin
"""

from .exceptions import (
    ErrorCode,
    UniswapPluginError,
    RpcError,
    SubgraphError,
    PoolUnavailable,
    PositionNotFound,
    TransactionError,
    WalletError,
    ConfigurationError,
    ParameterError,
)

__all__ = [
    "ErrorCode",
    "UniswapPluginError",
    "RpcError",
    "SubgraphError",
    "PoolUnavailable",
    "PositionNotFound",
    "TransactionError",
    "WalletError",
    "ConfigurationError",
    "ParameterError",
]

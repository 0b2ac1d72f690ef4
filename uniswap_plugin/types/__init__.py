"""
Type definitions for the Uniswap plugin
"""

from .common import Chain, Token, sort_tokens
from .pool import PoolInfo, fee_apr
from .position import Position
from .result import TxStatus, TxReceipt, SwapResult, CollectFeesResult

__all__ = [
    "Chain",
    "Token",
    "sort_tokens",
    "PoolInfo",
    "fee_apr",
    "Position",
    "TxStatus",
    "TxReceipt",
    "SwapResult",
    "CollectFeesResult",
]

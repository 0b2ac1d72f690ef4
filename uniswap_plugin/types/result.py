"""
Result type definitions for transactions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TxStatus(Enum):
    """Transaction status"""
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


@dataclass
class TxReceipt:
    """
    Summary of a mined transaction

    Attributes:
        tx_hash: Transaction hash (0x-prefixed)
        status: Transaction status
        block_number: Block the transaction was mined in
        gas_used: Gas consumed
    """
    tx_hash: str
    status: TxStatus
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == TxStatus.SUCCESS


@dataclass
class SwapResult:
    """
    Single-pool swap submission

    amount_in / amount_out echo the requested bounds in raw units:
    for exact input swaps amount_out is the minimum accepted,
    for exact output swaps amount_in is the maximum spent.
    """
    amount_in: str
    amount_out: str
    tx_hash: str

    def to_dict(self) -> dict:
        return {
            "amount_in": self.amount_in,
            "amount_out": self.amount_out,
            "tx_hash": self.tx_hash,
        }


@dataclass
class CollectFeesResult:
    """Fees collected from a position (raw units, simulated before sending)"""
    token_id: int
    tx_hash: str
    amount0: int = 0
    amount1: int = 0

    def to_dict(self) -> dict:
        return {
            "token_id": self.token_id,
            "tx_hash": self.tx_hash,
            "amount0": str(self.amount0),
            "amount1": str(self.amount1),
        }

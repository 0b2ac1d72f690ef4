"""
Position type definitions
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .common import Token
from .pool import _decimal


@dataclass
class Position:
    """
    Uniswap V3 LP position (NonfungiblePositionManager NFT) as indexed by the subgraph

    Token amounts are UI amounts (the subgraph stores them as BigDecimal).

    Attributes:
        id: Position token ID
        owner: Owner address
        liquidity: Current liquidity
        token0: Pool token0
        token1: Pool token1
        tick_lower: Lower tick of the range
        tick_upper: Upper tick of the range
        pool_address: Pool contract address
        fee: Pool fee tier
    """
    id: str
    owner: str
    liquidity: int
    token0: Token
    token1: Token
    tick_lower: int
    tick_upper: int
    deposited_token0: Decimal = Decimal(0)
    deposited_token1: Decimal = Decimal(0)
    withdrawn_token0: Decimal = Decimal(0)
    withdrawn_token1: Decimal = Decimal(0)
    collected_fees_token0: Decimal = Decimal(0)
    collected_fees_token1: Decimal = Decimal(0)
    pool_address: Optional[str] = None
    fee: Optional[int] = None

    def __repr__(self) -> str:
        return f"Position(id={self.id}, {self.token0.symbol}/{self.token1.symbol}, liquidity={self.liquidity})"

    @property
    def token_id(self) -> int:
        return int(self.id)

    @property
    def remaining_token0(self) -> Decimal:
        """Principal still in the position (deposited minus withdrawn)"""
        return max(self.deposited_token0 - self.withdrawn_token0, Decimal(0))

    @property
    def remaining_token1(self) -> Decimal:
        return max(self.deposited_token1 - self.withdrawn_token1, Decimal(0))

    @classmethod
    def from_subgraph(cls, data: dict, chain_id: Optional[int] = None) -> "Position":
        pool = data.get("pool") or {}
        return cls(
            id=str(data["id"]),
            owner=data.get("owner", ""),
            liquidity=int(data.get("liquidity") or 0),
            token0=Token.from_subgraph(data["token0"], chain_id),
            token1=Token.from_subgraph(data["token1"], chain_id),
            tick_lower=int(data["tickLower"]["tickIdx"]),
            tick_upper=int(data["tickUpper"]["tickIdx"]),
            deposited_token0=_decimal(data.get("depositedToken0")),
            deposited_token1=_decimal(data.get("depositedToken1")),
            withdrawn_token0=_decimal(data.get("withdrawnToken0")),
            withdrawn_token1=_decimal(data.get("withdrawnToken1")),
            collected_fees_token0=_decimal(data.get("collectedFeesToken0")),
            collected_fees_token1=_decimal(data.get("collectedFeesToken1")),
            pool_address=pool.get("id"),
            fee=int(pool["feeTier"]) if pool.get("feeTier") is not None else None,
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary"""
        return {
            "id": self.id,
            "owner": self.owner,
            "liquidity": str(self.liquidity),
            "token0": self.token0.to_dict(),
            "token1": self.token1.to_dict(),
            "deposited_token0": str(self.deposited_token0),
            "deposited_token1": str(self.deposited_token1),
            "withdrawn_token0": str(self.withdrawn_token0),
            "withdrawn_token1": str(self.withdrawn_token1),
            "collected_fees_token0": str(self.collected_fees_token0),
            "collected_fees_token1": str(self.collected_fees_token1),
            "tick_lower": self.tick_lower,
            "tick_upper": self.tick_upper,
            "pool_address": self.pool_address,
            "fee": self.fee,
        }

"""
Pool type definitions
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .common import Token


def _decimal(value) -> Decimal:
    if value in (None, ""):
        return Decimal(0)
    return Decimal(str(value))


def fee_apr(fees_usd: Decimal, volume_usd: Decimal) -> Decimal:
    """
    Annualised fee rate as a percentage of volume

    feeAPR = feesUSD * 365 / volumeUSD * 100, zero when there is no volume.
    """
    if volume_usd <= 0:
        return Decimal(0)
    return fees_usd * Decimal(365) / volume_usd * Decimal(100)


@dataclass
class PoolInfo:
    """
    Uniswap V3 pool snapshot from the subgraph

    Attributes:
        pool_address: Pool contract address
        token0: Lower-address token
        token1: Higher-address token
        fee: Fee tier in hundredths of a bip (500 = 0.05%)
        liquidity: In-range liquidity
        sqrt_price: Current sqrtPriceX96
        tick: Current tick (None for uninitialized pools)
        token0_price: Price of token0 in token1
        token1_price: Price of token1 in token0
        volume_usd: Lifetime volume in USD
        fees_usd: Lifetime fees in USD
        tvl_usd: Total value locked in USD
        tx_count: Number of swaps/mints/burns indexed
        created_at_timestamp: Pool creation time (unix seconds)
        fee_apr: Fee APR percentage (set by pool scans)
    """
    pool_address: str
    token0: Token
    token1: Token
    fee: int
    liquidity: int = 0
    sqrt_price: int = 0
    tick: Optional[int] = None
    token0_price: Decimal = Decimal(0)
    token1_price: Decimal = Decimal(0)
    volume_usd: Decimal = Decimal(0)
    fees_usd: Decimal = Decimal(0)
    tvl_usd: Decimal = Decimal(0)
    tx_count: int = 0
    created_at_timestamp: Optional[int] = None
    fee_apr: Optional[Decimal] = None

    def __str__(self) -> str:
        return f"{self.token0.symbol}/{self.token1.symbol} ({self.fee})"

    @property
    def symbol(self) -> str:
        return f"{self.token0.symbol}/{self.token1.symbol}"

    @property
    def fee_percent(self) -> Decimal:
        """Fee tier as a percentage (3000 -> 0.3)"""
        return Decimal(self.fee) / Decimal(10000)

    @classmethod
    def from_subgraph(cls, data: dict, chain_id: Optional[int] = None) -> "PoolInfo":
        from web3 import Web3

        tick = data.get("tick")
        created = data.get("createdAtTimestamp")
        return cls(
            pool_address=Web3.to_checksum_address(data["id"]),
            token0=Token.from_subgraph(data["token0"], chain_id),
            token1=Token.from_subgraph(data["token1"], chain_id),
            fee=int(data.get("feeTier") or 0),
            liquidity=int(data.get("liquidity") or 0),
            sqrt_price=int(data.get("sqrtPrice") or 0),
            tick=int(tick) if tick is not None else None,
            token0_price=_decimal(data.get("token0Price")),
            token1_price=_decimal(data.get("token1Price")),
            volume_usd=_decimal(data.get("volumeUSD")),
            fees_usd=_decimal(data.get("feesUSD")),
            tvl_usd=_decimal(data.get("totalValueLockedUSD")),
            tx_count=int(data.get("txCount") or 0),
            created_at_timestamp=int(created) if created is not None else None,
        )

    def with_fee_apr(self) -> "PoolInfo":
        self.fee_apr = fee_apr(self.fees_usd, self.volume_usd)
        return self

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary"""
        result = {
            "pool_address": self.pool_address,
            "token0": self.token0.to_dict(),
            "token1": self.token1.to_dict(),
            "fee": self.fee,
            "liquidity": str(self.liquidity),
            "sqrt_price": str(self.sqrt_price),
            "tick": self.tick,
            "token0_price": str(self.token0_price),
            "token1_price": str(self.token1_price),
            "volume_usd": str(self.volume_usd),
            "fees_usd": str(self.fees_usd),
            "tvl_usd": str(self.tvl_usd),
            "tx_count": self.tx_count,
        }
        if self.created_at_timestamp is not None:
            result["created_at_timestamp"] = self.created_at_timestamp
        if self.fee_apr is not None:
            result["fee_apr"] = str(self.fee_apr.quantize(Decimal("0.01")))
        return result

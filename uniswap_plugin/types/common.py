"""
Common type definitions
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union


@dataclass(frozen=True)
class Chain:
    """
    Chain the wallet client is connected to

    Attributes:
        type: Chain family ("evm")
        id: Numeric chain ID (None when the wallet does not report one)
    """
    type: str = "evm"
    id: Optional[int] = None


@dataclass(frozen=True)
class Token:
    """
    ERC20 token information

    Attributes:
        address: Token contract address (checksummed)
        decimals: Number of decimal places
        symbol: Token symbol (e.g., "WETH", "USDC")
        name: Full token name (optional)
        chain_id: Chain the token lives on (optional)
    """
    address: str
    decimals: int
    symbol: str = ""
    name: str = ""
    chain_id: Optional[int] = None

    def __str__(self) -> str:
        return self.symbol or self.address

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.address[:10]}...)"

    def sorts_before(self, other: "Token") -> bool:
        """Uniswap orders pool tokens by address"""
        return self.address.lower() < other.address.lower()

    def ui_amount(self, raw_amount: int) -> Decimal:
        """
        Convert raw amount to UI amount with full precision

        Args:
            raw_amount: Raw token amount (smallest units)

        Returns:
            UI amount as Decimal for precision
        """
        return Decimal(raw_amount) / Decimal(10 ** self.decimals)

    def raw_amount(self, ui_amount: Union[Decimal, float, int, str]) -> int:
        """
        Convert UI amount to raw amount

        Args:
            ui_amount: UI amount (can be Decimal, float, int, or str)

        Returns:
            Raw token amount (smallest units)
        """
        if not isinstance(ui_amount, Decimal):
            ui_amount = Decimal(str(ui_amount))
        return int(ui_amount * Decimal(10 ** self.decimals))

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
        }

    @classmethod
    def from_subgraph(cls, data: dict, chain_id: Optional[int] = None) -> "Token":
        """Build from a subgraph Token entity (id, symbol, name, decimals)"""
        from web3 import Web3

        return cls(
            address=Web3.to_checksum_address(data["id"]),
            decimals=int(data.get("decimals") or 18),
            symbol=data.get("symbol") or "",
            name=data.get("name") or "",
            chain_id=chain_id,
        )


def sort_tokens(token_a: Token, token_b: Token):
    """Return (token0, token1) in pool order"""
    if token_a.sorts_before(token_b):
        return token_a, token_b
    return token_b, token_a

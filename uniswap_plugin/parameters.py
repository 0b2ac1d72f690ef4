"""
Tool parameter schemas

Each model doubles as the JSON schema handed to the agent (camelCase
field names) and as the validator for the arguments it sends back.
Amounts are raw integer strings in the token's smallest unit.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from web3 import Web3

from .protocols.uniswap.constants import UNISWAP_FEE_TIERS, MIN_TICK, MAX_TICK, MAX_UINT128
from .protocols.uniswap.math import validate_tick_range


def _checksum(value: str) -> str:
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return Web3.to_checksum_address(value)


def _raw_amount(value) -> str:
    text = str(value).strip()
    if not text.isascii() or not text.isdecimal():
        raise ValueError(f"Amount must be a non-negative integer in the token's smallest unit, got {value!r}")
    return text


def _fee_tier(value: int) -> int:
    if value not in UNISWAP_FEE_TIERS:
        raise ValueError(f"Fee tier must be one of {UNISWAP_FEE_TIERS}")
    return value


class ToolParameters(BaseModel):
    """Base for all tool parameter models"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TokenParameter(ToolParameters):
    address: str = Field(..., description="Token contract address")
    decimals: int = Field(..., ge=0, le=255, description="Token decimals")
    symbol: str = Field("", description="Token symbol")
    name: str = Field("", description="Token name")

    @field_validator("address")
    @classmethod
    def check_address(cls, v: str) -> str:
        return _checksum(v)


class AddLiquidityParameters(ToolParameters):
    token0: TokenParameter = Field(..., description="First token of the pair")
    token1: TokenParameter = Field(..., description="Second token of the pair")
    fee: int = Field(..., description="Fee tier of the pool (500, 3000, 10000)")
    amount0_desired: str = Field(..., description="Amount of token0 to add, in its smallest unit")
    amount1_desired: str = Field(..., description="Amount of token1 to add, in its smallest unit")
    tick_lower: int = Field(..., ge=MIN_TICK, le=MAX_TICK, description="Lower tick of position range")
    tick_upper: int = Field(..., ge=MIN_TICK, le=MAX_TICK, description="Upper tick of position range")
    slippage_tolerance: int = Field(
        50, ge=0, le=10000, description="Slippage tolerance in bips (1 = 0.01%)"
    )

    check_fee = field_validator("fee")(_fee_tier)
    check_amounts = field_validator("amount0_desired", "amount1_desired", mode="before")(_raw_amount)

    @model_validator(mode="after")
    def check_range(self) -> "AddLiquidityParameters":
        if self.token0.address == self.token1.address:
            raise ValueError("token0 and token1 must differ")
        validate_tick_range(self.tick_lower, self.tick_upper, self.fee)
        return self


class RemoveLiquidityParameters(ToolParameters):
    token_id: int = Field(..., ge=0, description="The NFT token ID of the position")
    liquidity: str = Field(
        ...,
        description="Amount of liquidity to remove, or \"max\" (or MaxUint128) to remove all of it",
    )
    slippage_tolerance: float = Field(
        1, ge=0, le=100, description="Maximum allowed slippage percentage (0-100)"
    )

    @field_validator("liquidity", mode="before")
    @classmethod
    def check_liquidity(cls, v) -> str:
        text = str(v).strip()
        if text.lower() in ("max", "maxuint128"):
            return "max"
        text = _raw_amount(text)
        if int(text) == 0:
            raise ValueError("Liquidity to remove must be positive")
        return text

    @property
    def removes_all(self) -> bool:
        return self.liquidity == "max" or int(self.liquidity) >= MAX_UINT128


class CollectFeesParameters(ToolParameters):
    token_id: int = Field(..., ge=0, description="The NFT token ID of the position")


class GetPositionsParameters(ToolParameters):
    owner: Optional[str] = Field(None, description="Owner address (defaults to the connected wallet)")

    @field_validator("owner")
    @classmethod
    def check_owner(cls, v: Optional[str]) -> Optional[str]:
        return _checksum(v) if v is not None else None


class GetPoolInfoParameters(ToolParameters):
    token0_address: str = Field(..., description="Address of the first token in the pair")
    token1_address: str = Field(..., description="Address of the second token in the pair")
    fee: Optional[int] = Field(None, description="Optional fee tier; the deepest pool is used when omitted")

    check_addresses = field_validator("token0_address", "token1_address")(_checksum)

    @field_validator("fee")
    @classmethod
    def check_fee(cls, v: Optional[int]) -> Optional[int]:
        return _fee_tier(v) if v is not None else None


class _SwapParameters(ToolParameters):
    token_in: TokenParameter = Field(..., description="Token to sell")
    token_out: TokenParameter = Field(..., description="Token to buy")
    fee: int = Field(..., description="Fee tier of the pool (500, 3000, 10000)")
    sqrt_price_limit_x96: str = Field("0", description="Price limit for the trade (optional, 0 for none)")

    check_fee = field_validator("fee")(_fee_tier)
    check_price_limit = field_validator("sqrt_price_limit_x96", mode="before")(_raw_amount)

    @model_validator(mode="after")
    def check_pair(self):
        if self.token_in.address == self.token_out.address:
            raise ValueError("token_in and token_out must differ")
        return self


class SwapExactInputParameters(_SwapParameters):
    amount_in: str = Field(..., description="Exact amount of input tokens to swap")
    amount_out_minimum: str = Field(..., description="Minimum amount of output tokens to receive")

    check_amounts = field_validator("amount_in", "amount_out_minimum", mode="before")(_raw_amount)


class SwapExactOutputParameters(_SwapParameters):
    amount_out: str = Field(..., description="Exact amount of output tokens to receive")
    amount_in_maximum: str = Field(..., description="Maximum amount of input tokens to spend")

    check_amounts = field_validator("amount_out", "amount_in_maximum", mode="before")(_raw_amount)


class SwapAndAddLiquidityParameters(ToolParameters):
    token0_address: str = Field(..., description="The address of the first token in the pair")
    token1_address: str = Field(..., description="The address of the second token in the pair")
    amount0_desired: str = Field(..., description="The desired amount of token0 to add to the position in wei")
    amount1_desired: str = Field(..., description="The desired amount of token1 to add to the position in wei")
    tick_lower: int = Field(
        ..., ge=MIN_TICK, le=MAX_TICK,
        description="The lower tick of the position, must be a multiple of the pool's tickSpacing",
    )
    tick_upper: int = Field(
        ..., ge=MIN_TICK, le=MAX_TICK,
        description="The upper tick of the position, must be a multiple of the pool's tickSpacing",
    )
    slippage_tolerance: int = Field(
        ..., ge=0, le=10000,
        description="The maximum allowed slippage in bips (1 bip = 0.01%). Value between 0-10000",
    )

    check_addresses = field_validator("token0_address", "token1_address")(_checksum)
    check_amounts = field_validator("amount0_desired", "amount1_desired", mode="before")(_raw_amount)

    @model_validator(mode="after")
    def check_ticks(self) -> "SwapAndAddLiquidityParameters":
        if self.tick_lower >= self.tick_upper:
            raise ValueError("tick_lower must be below tick_upper")
        return self


class ScanPoolsParameters(ToolParameters):
    min_liquidity: float = Field(0, ge=0, description="Minimum liquidity (TVL) in USD")
    min_volume_24h: float = Field(0, ge=0, alias="minVolume24h", description="Minimum volume in USD")
    min_fee_apr: float = Field(0, ge=0, alias="minFeeAPR", description="Minimum fee APR percentage")
    token0: Optional[str] = Field(None, description="Optional: Filter by token0 address")
    token1: Optional[str] = Field(None, description="Optional: Filter by token1 address")

    @field_validator("token0", "token1")
    @classmethod
    def check_tokens(cls, v: Optional[str]) -> Optional[str]:
        return _checksum(v) if v is not None else None


class GetNewPoolsParameters(ToolParameters):
    limit: int = Field(20, ge=1, le=100, description="Number of pools to return")

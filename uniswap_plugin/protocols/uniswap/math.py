"""
Uniswap V3 price, tick, liquidity and slippage helpers

Tick-to-sqrt-price conversion uses Decimal, so amounts derived from it
are close to, but not bit-exact with, the on-chain TickMath results.
"""

import math
from decimal import Decimal, localcontext
from typing import Tuple

from .constants import MIN_TICK, MAX_TICK, TICK_SPACING_BY_FEE

Q96 = 2**96


def sqrt_price_x96_to_price(sqrt_price_x96: int, decimals0: int = 18, decimals1: int = 18) -> Decimal:
    """Price of token0 in token1 (UI units) from slot0.sqrtPriceX96"""
    sqrt_price = Decimal(sqrt_price_x96) / Decimal(Q96)
    raw_price = sqrt_price * sqrt_price
    return raw_price * Decimal(10 ** (decimals0 - decimals1))


def tick_spacing_for_fee(fee: int) -> int:
    if fee not in TICK_SPACING_BY_FEE:
        raise ValueError(f"Unsupported fee tier: {fee}")
    return TICK_SPACING_BY_FEE[fee]


def align_tick(tick: int, tick_spacing: int, round_up: bool = False) -> int:
    """Snap a tick to the spacing grid"""
    if round_up:
        return math.ceil(tick / tick_spacing) * tick_spacing
    return math.floor(tick / tick_spacing) * tick_spacing


def validate_tick_range(tick_lower: int, tick_upper: int, fee: int) -> Tuple[int, int]:
    """
    Check a tick range is usable for a pool with the given fee tier.

    Raises:
        ValueError: If the ticks are out of bounds, unordered or not on the spacing grid
    """
    if tick_lower >= tick_upper:
        raise ValueError(f"tick_lower ({tick_lower}) must be below tick_upper ({tick_upper})")
    if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
        raise ValueError(f"Ticks must be within [{MIN_TICK}, {MAX_TICK}]")

    spacing = tick_spacing_for_fee(fee)
    if tick_lower % spacing or tick_upper % spacing:
        raise ValueError(
            f"Ticks must be multiples of {spacing} for fee tier {fee} "
            f"(nearest: {align_tick(tick_lower, spacing)}, {align_tick(tick_upper, spacing, round_up=True)})"
        )
    return tick_lower, tick_upper


def apply_slippage_bps(amount: int, slippage_bps: int) -> int:
    """Minimum acceptable amount for a slippage tolerance in basis points"""
    if not 0 <= slippage_bps <= 10000:
        raise ValueError("slippage_bps must be between 0 and 10000")
    return amount * (10000 - slippage_bps) // 10000


def apply_slippage_percent(amount: Decimal, slippage_percent) -> Decimal:
    """Minimum acceptable amount for a slippage tolerance in percent (0-100)"""
    slippage = Decimal(str(slippage_percent))
    if not Decimal(0) <= slippage <= Decimal(100):
        raise ValueError("slippage percent must be between 0 and 100")
    return amount * (Decimal(100) - slippage) / Decimal(100)


def sqrt_ratio_at_tick(tick: int) -> int:
    """Approximate sqrtPriceX96 at a tick (sqrt(1.0001^tick) * 2^96)"""
    with localcontext() as ctx:
        ctx.prec = 60
        return int((Decimal("1.0001") ** tick).sqrt() * Decimal(Q96))


def liquidity_for_amounts(
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    amount0: int,
    amount1: int,
) -> int:
    """
    Liquidity minted for the given amounts at the current price.

    Below the range only token0 counts, above it only token1, inside it
    the scarcer side constrains.
    """
    sqrt_lower = sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = sqrt_ratio_at_tick(tick_upper)
    if sqrt_upper <= sqrt_lower:
        return 0

    def from_amount0(sqrt_a: int, sqrt_b: int) -> int:
        return amount0 * sqrt_a * sqrt_b // ((sqrt_b - sqrt_a) * Q96)

    def from_amount1(sqrt_a: int, sqrt_b: int) -> int:
        return amount1 * Q96 // (sqrt_b - sqrt_a)

    if sqrt_price_x96 <= sqrt_lower:
        return from_amount0(sqrt_lower, sqrt_upper)
    if sqrt_price_x96 >= sqrt_upper:
        return from_amount1(sqrt_lower, sqrt_upper)
    return min(
        from_amount0(sqrt_price_x96, sqrt_upper),
        from_amount1(sqrt_lower, sqrt_price_x96),
    )


def amounts_for_liquidity(
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
) -> Tuple[int, int]:
    """Token amounts (rounded down) backing a liquidity amount at the current price"""
    sqrt_lower = sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = sqrt_ratio_at_tick(tick_upper)

    if sqrt_price_x96 <= sqrt_lower:
        amount0 = liquidity * Q96 * (sqrt_upper - sqrt_lower) // (sqrt_upper * sqrt_lower)
        return amount0, 0
    if sqrt_price_x96 >= sqrt_upper:
        return 0, liquidity * (sqrt_upper - sqrt_lower) // Q96

    amount0 = liquidity * Q96 * (sqrt_upper - sqrt_price_x96) // (sqrt_upper * sqrt_price_x96)
    amount1 = liquidity * (sqrt_price_x96 - sqrt_lower) // Q96
    return amount0, amount1


def mint_amounts_with_slippage(
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    amount0_desired: int,
    amount1_desired: int,
    slippage_bps: int,
) -> Tuple[int, int]:
    """
    Minimum amounts for a mint.

    Slippage is applied to the amounts the pool will actually take at the
    current price, not to the desired amounts, so an off-ratio deposit
    does not fail the position manager's slippage check. Without a price
    the mins are zero.
    """
    if sqrt_price_x96 <= 0:
        return 0, 0
    liquidity = liquidity_for_amounts(sqrt_price_x96, tick_lower, tick_upper, amount0_desired, amount1_desired)
    expected0, expected1 = amounts_for_liquidity(sqrt_price_x96, tick_lower, tick_upper, liquidity)
    return (
        apply_slippage_bps(min(expected0, amount0_desired), slippage_bps),
        apply_slippage_bps(min(expected1, amount1_desired), slippage_bps),
    )

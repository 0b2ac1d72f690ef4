"""
Uniswap V3 protocol support

Contract addresses, ABIs, calldata encoding and tick math. The service
that drives the contracts lives in .service:

    from uniswap_plugin.protocols.uniswap.service import UniswapService

    service = UniswapService()
    tx_hash = service.add_liquidity(wallet, params)
"""

from .calldata import PositionManagerEncoder
from .constants import (
    CHAIN_NAMES,
    UNISWAP_FEE_TIERS,
    TICK_SPACING_BY_FEE,
    factory_address,
    position_manager_address,
    swap_router_address,
)

__all__ = [
    "PositionManagerEncoder",
    "CHAIN_NAMES",
    "UNISWAP_FEE_TIERS",
    "TICK_SPACING_BY_FEE",
    "factory_address",
    "position_manager_address",
    "swap_router_address",
]

"""
Uniswap plugin entry point

Usage:
    from uniswap_plugin import Chain, Web3WalletClient, uniswap

    plugin = uniswap()
    wallet = Web3WalletClient.from_env()

    tools = plugin.get_tools(wallet.get_chain())
    schemas = [tool.to_schema() for tool in tools]

    # Host framework dispatches a model tool call
    tx_hash = tools[0].invoke(wallet, {"token0": {...}, "token1": {...}, ...})
"""

import logging
from typing import List, Optional

from .config import Config, config as global_config
from .errors import ConfigurationError
from .protocols.uniswap.constants import chain_name
from .protocols.uniswap.service import UniswapService
from .queries import DexDataQuery
from .tools import Tool, get_tools
from .types import Chain

logger = logging.getLogger(__name__)


class UniswapPlugin:
    """
    Uniswap V3 tool provider for EVM wallets
    """

    name = "Uniswap"

    def __init__(self, config: Optional[Config] = None, dex_query: Optional[DexDataQuery] = None):
        self._config = config or global_config
        self._service = UniswapService(self._config, dex_query)

    @property
    def service(self) -> UniswapService:
        return self._service

    def supports_chain(self, chain: Chain) -> bool:
        return getattr(chain, "type", None) == "evm"

    def supports_smart_wallets(self) -> bool:
        return True

    def get_tools(self, chain: Chain) -> List[Tool]:
        """
        Tools for the given chain

        Raises:
            ConfigurationError: If the chain has no network ID
        """
        if not getattr(chain, "id", None):
            raise ConfigurationError.network_id_required()

        tools = get_tools(self._service)
        logger.info(f"Loaded {len(tools)} Uniswap tools for {chain_name(chain.id)}")
        return tools

    def close(self):
        self._service.close()

    def __repr__(self) -> str:
        return f"UniswapPlugin(service={self._service!r})"


def uniswap(config: Optional[Config] = None, dex_query: Optional[DexDataQuery] = None) -> UniswapPlugin:
    """Create the Uniswap plugin"""
    return UniswapPlugin(config, dex_query)

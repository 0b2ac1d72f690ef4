"""
Agent tool descriptors

Each Tool pairs a pydantic parameter model with a UniswapService call.
The host framework reads to_schema() to advertise the tool and calls
invoke() with the wallet client and the arguments the model produced.
Every tool returns a string: a transaction hash or a JSON document.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .errors import ParameterError
from .infra.retry import CorrelationContext
from .infra.wallet import WalletClient
from .parameters import (
    AddLiquidityParameters,
    CollectFeesParameters,
    GetNewPoolsParameters,
    GetPoolInfoParameters,
    GetPositionsParameters,
    RemoveLiquidityParameters,
    ScanPoolsParameters,
    SwapAndAddLiquidityParameters,
    SwapExactInputParameters,
    SwapExactOutputParameters,
)
from .protocols.uniswap.service import UniswapService

logger = logging.getLogger(__name__)

Handler = Callable[[WalletClient, BaseModel], str]


@dataclass(frozen=True)
class Tool:
    """
    A callable tool exposed to the agent

    Attributes:
        name: Tool name (snake_case, prefixed with "uniswap_")
        description: What the tool does, for the model
        parameters: Pydantic model validating the arguments
        handler: Function (wallet_client, params) -> str
    """
    name: str
    description: str
    parameters: Type[BaseModel]
    handler: Handler

    def to_schema(self) -> Dict[str, Any]:
        """OpenAI-style function schema"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.model_json_schema(by_alias=True),
            },
        }

    def invoke(self, wallet_client: WalletClient, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Validate arguments and run the tool.

        Raises:
            ParameterError: If the arguments do not match the parameter model
        """
        try:
            params = self.parameters.model_validate(arguments or {})
        except ValidationError as e:
            raise ParameterError.invalid(self.name, e) from e

        with CorrelationContext(self.name) as cid:
            logger.info(f"[{cid}] Running {self.name}")
            result = self.handler(wallet_client, params)
            logger.debug(f"[{cid}] {self.name} returned {result}")
            return result


def _to_json(value: Any) -> str:
    if isinstance(value, list):
        return json.dumps([item.to_dict() for item in value])
    return json.dumps(value.to_dict())


def get_tools(service: UniswapService) -> List[Tool]:
    """Build the Uniswap tool set around a service"""
    return [
        Tool(
            name="uniswap_add_liquidity",
            description=(
                "This tool adds liquidity to a Uniswap V3 pool by creating a new position "
                "or increasing an existing one"
            ),
            parameters=AddLiquidityParameters,
            handler=service.add_liquidity,
        ),
        Tool(
            name="uniswap_remove_liquidity",
            description=(
                "This tool removes liquidity from a Uniswap V3 position by specifying "
                "the position ID and amount to remove"
            ),
            parameters=RemoveLiquidityParameters,
            handler=service.remove_liquidity,
        ),
        Tool(
            name="uniswap_collect_fees",
            description="This tool collects accumulated fees from a Uniswap V3 position",
            parameters=CollectFeesParameters,
            handler=lambda wallet, params: service.collect_fees(wallet, params).tx_hash,
        ),
        Tool(
            name="uniswap_get_positions",
            description="This tool retrieves all Uniswap V3 positions owned by the current wallet",
            parameters=GetPositionsParameters,
            handler=lambda wallet, params: _to_json(service.get_positions(wallet, params)),
        ),
        Tool(
            name="uniswap_get_pool_info",
            description="This tool retrieves detailed information about a specific Uniswap V3 pool",
            parameters=GetPoolInfoParameters,
            handler=lambda wallet, params: _to_json(service.get_pool_info(wallet, params)),
        ),
        Tool(
            name="uniswap_swap_exact_input",
            description="This tool performs a token swap with an exact input amount on Uniswap V3",
            parameters=SwapExactInputParameters,
            handler=lambda wallet, params: service.swap_exact_input(wallet, params).tx_hash,
        ),
        Tool(
            name="uniswap_swap_exact_output",
            description="This tool performs a token swap with an exact output amount on Uniswap V3",
            parameters=SwapExactOutputParameters,
            handler=lambda wallet, params: service.swap_exact_output(wallet, params).tx_hash,
        ),
        Tool(
            name="uniswap_swap_and_add_liquidity",
            description=(
                "This tool performs a token swap and adds liquidity to a Uniswap V3 pool "
                "in a single transaction"
            ),
            parameters=SwapAndAddLiquidityParameters,
            handler=service.swap_and_add_liquidity,
        ),
        Tool(
            name="uniswap_scan_pools",
            description=(
                "This tool scans Uniswap V3 pools for high fee APR, filtered by minimum "
                "liquidity, 24h volume and fee APR"
            ),
            parameters=ScanPoolsParameters,
            handler=lambda wallet, params: _to_json(service.scan_pools(wallet, params)),
        ),
        Tool(
            name="uniswap_get_new_pools",
            description="This tool lists the most recently created Uniswap V3 pools",
            parameters=GetNewPoolsParameters,
            handler=lambda wallet, params: _to_json(service.get_new_pools(wallet, params)),
        ),
    ]

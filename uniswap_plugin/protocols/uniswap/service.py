"""
Uniswap V3 liquidity and swap service

Implements the operations behind the agent tools. Reads go to the
subgraph (DexDataQuery) or to contracts through the wallet client;
writes are contract calls submitted through the wallet client.

Amounts are raw integers in each token's smallest unit.
"""

import logging
import time
from decimal import Decimal
from typing import List, Optional, Tuple

from web3 import Web3

from ...config import Config, config as global_config
from ...errors import (
    ParameterError,
    PoolUnavailable,
    PositionNotFound,
    TransactionError,
    WalletError,
)
from ...infra.wallet import EVMTransaction, WalletClient
from ...parameters import (
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
    TokenParameter,
)
from ...queries import DexDataQuery
from ...types import CollectFeesResult, PoolInfo, Position, SwapResult, Token, sort_tokens
from .abi import (
    ERC20_ABI,
    SWAP_ROUTER_02_ABI,
    V3_FACTORY_ABI,
    V3_POOL_ABI,
    V3_POSITION_MANAGER_ABI,
)
from .calldata import PositionManagerEncoder
from .constants import (
    MAX_UINT128,
    MAX_UINT256,
    chain_name,
    factory_address,
    position_manager_address,
    swap_router_address,
)
from .math import (
    apply_slippage_percent,
    mint_amounts_with_slippage,
    sqrt_price_x96_to_price,
    validate_tick_range,
)

logger = logging.getLogger(__name__)


class UniswapService:
    """
    Uniswap V3 operations for a wallet client

    Every public method takes the wallet client first so one service can
    serve any number of wallets.

    Usage:
        service = UniswapService()
        wallet = Web3WalletClient.from_env()

        info = service.get_pool_info(wallet, GetPoolInfoParameters(token0_address=WETH, token1_address=USDC))
        tx_hash = service.swap_exact_input(wallet, SwapExactInputParameters(...))
    """

    def __init__(self, config: Optional[Config] = None, dex_query: Optional[DexDataQuery] = None):
        self._config = config or global_config
        self._dex_query = dex_query or DexDataQuery(self._config)

    @property
    def dex_query(self) -> DexDataQuery:
        return self._dex_query

    # =========================================================================
    # Helpers
    # =========================================================================

    def _chain_id(self, wallet_client: WalletClient, required: bool = True) -> int:
        chain = wallet_client.get_chain()
        chain_id = getattr(chain, "id", None)
        if not chain_id:
            if required:
                raise WalletError.chain_id_required()
            chain_id = self._config.uniswap.default_chain_id
            logger.warning(f"Wallet reported no chain ID, using default {chain_id}")
        return int(chain_id)

    def _deadline(self) -> int:
        return int(time.time()) + self._config.evm.tx_deadline_seconds

    @staticmethod
    def _token(param: TokenParameter, chain_id: int) -> Token:
        return Token(
            address=param.address,
            decimals=param.decimals,
            symbol=param.symbol,
            name=param.name,
            chain_id=chain_id,
        )

    @staticmethod
    def _send(wallet_client: WalletClient, transaction: EVMTransaction) -> str:
        result = wallet_client.send_transaction(transaction)
        tx_hash = result.get("hash") if isinstance(result, dict) else getattr(result, "hash", None)
        if not tx_hash:
            raise TransactionError.send_failed(transaction.label, "wallet returned no transaction hash")
        return tx_hash

    def _ensure_approval(
        self,
        wallet_client: WalletClient,
        token_address: str,
        amount: int,
        spender: str,
    ) -> Optional[str]:
        """Approve spender for amount if the current allowance is short. Returns the approve hash."""
        if amount <= 0:
            return None

        owner = wallet_client.get_address()
        allowance = wallet_client.read(token_address, ERC20_ABI, "allowance", [owner, spender])
        if allowance >= amount:
            return None

        approve_amount = amount if self._config.tx.exact_approvals else MAX_UINT256
        logger.info(f"Approving {token_address} for {spender} (allowance {allowance} < {amount})")

        try:
            tx_hash = self._send(wallet_client, EVMTransaction(
                to=token_address,
                abi=ERC20_ABI,
                function_name="approve",
                args=[spender, approve_amount],
                gas=self._config.evm.approve_gas_limit,
            ))
            wallet_client.wait_for_transaction_receipt(tx_hash)
        except TransactionError as e:
            raise TransactionError.approval_failed(token_address, e.message) from e

        return tx_hash

    def _get_pool_address(self, wallet_client: WalletClient, chain_id: int, token0: Token, token1: Token, fee: int) -> str:
        pool_address = wallet_client.read(
            factory_address(chain_id),
            V3_FACTORY_ABI,
            "getPool",
            [token0.address, token1.address, fee],
        )
        if not pool_address or int(pool_address, 16) == 0:
            raise PoolUnavailable.not_found(token0.address, token1.address, fee)
        return Web3.to_checksum_address(pool_address)

    def _require_pool(self, chain_id: int, token_a: str, token_b: str, fee: Optional[int] = None) -> PoolInfo:
        pool = self._dex_query.get_pool(chain_id, token_a, token_b, fee)
        if pool is None:
            raise PoolUnavailable.not_found(token_a, token_b, fee)
        return pool

    def _find_position(self, wallet_client: WalletClient, chain_id: int, token_id: int) -> Position:
        owner = wallet_client.get_address()
        positions = self._dex_query.get_positions_by_owner(chain_id, owner)
        for position in positions:
            if position.token_id == token_id:
                return position
        raise PositionNotFound.not_found(token_id)

    # =========================================================================
    # Liquidity
    # =========================================================================

    def add_liquidity(self, wallet_client: WalletClient, params: AddLiquidityParameters) -> str:
        """
        Mint a new position in an existing pool.

        Returns:
            Mint transaction hash

        Raises:
            PoolUnavailable: If the factory has no pool for the pair and fee
        """
        chain_id = self._chain_id(wallet_client, required=False)
        token_a = self._token(params.token0, chain_id)
        token_b = self._token(params.token1, chain_id)
        amount_a, amount_b = int(params.amount0_desired), int(params.amount1_desired)

        token0, token1 = sort_tokens(token_a, token_b)
        if token0 is token_a:
            amount0, amount1 = amount_a, amount_b
        else:
            amount0, amount1 = amount_b, amount_a

        pool_address = self._get_pool_address(wallet_client, chain_id, token0, token1, params.fee)
        slot0 = wallet_client.read(pool_address, V3_POOL_ABI, "slot0")
        pool_liquidity = wallet_client.read(pool_address, V3_POOL_ABI, "liquidity")
        sqrt_price_x96, current_tick = slot0[0], slot0[1]
        if sqrt_price_x96 == 0:
            raise PoolUnavailable.invalid_state(pool_address, "pool is not initialized")

        price = sqrt_price_x96_to_price(sqrt_price_x96, token0.decimals, token1.decimals)
        logger.info(
            f"Adding liquidity on {chain_name(chain_id)} pool {pool_address} "
            f"({token0}/{token1} fee={params.fee}): tick={current_tick} price={price:.8f} "
            f"liquidity={pool_liquidity} range=[{params.tick_lower}, {params.tick_upper}]"
        )

        amount0_min, amount1_min = mint_amounts_with_slippage(
            sqrt_price_x96,
            params.tick_lower,
            params.tick_upper,
            amount0,
            amount1,
            params.slippage_tolerance,
        )

        npm = position_manager_address(chain_id)
        self._ensure_approval(wallet_client, token0.address, amount0, npm)
        self._ensure_approval(wallet_client, token1.address, amount1, npm)

        mint_params = PositionManagerEncoder.encode_mint_params(
            token0.address,
            token1.address,
            params.fee,
            params.tick_lower,
            params.tick_upper,
            amount0,
            amount1,
            amount0_min,
            amount1_min,
            wallet_client.get_address(),
            self._deadline(),
        )

        tx_hash = self._send(wallet_client, EVMTransaction(
            to=npm,
            abi=V3_POSITION_MANAGER_ABI,
            function_name="mint",
            args=[mint_params],
            gas=self._config.evm.lp_gas_limit,
        ))
        logger.info(f"Mint submitted: {tx_hash}")
        return tx_hash

    def _resolve_liquidity(self, position: Position, params: RemoveLiquidityParameters) -> int:
        if position.liquidity <= 0:
            raise PositionNotFound.empty(position.id)
        if params.removes_all:
            return position.liquidity
        requested = int(params.liquidity)
        if requested > position.liquidity:
            logger.warning(
                f"Requested liquidity {requested} exceeds position {position.id} liquidity "
                f"{position.liquidity}, removing all"
            )
            return position.liquidity
        return requested

    def remove_liquidity(self, wallet_client: WalletClient, params: RemoveLiquidityParameters) -> str:
        """
        Decrease a position's liquidity and collect the released tokens.

        The minimums are the position's remaining principal scaled by the
        share of liquidity removed, less the slippage percentage.

        Returns:
            Collect transaction hash

        Raises:
            WalletError: If the wallet reports no chain ID
            PositionNotFound: If the wallet does not own the position
        """
        chain_id = self._chain_id(wallet_client)
        position = self._find_position(wallet_client, chain_id, params.token_id)
        liquidity = self._resolve_liquidity(position, params)

        share = Decimal(liquidity) / Decimal(position.liquidity)
        amount0_min = position.token0.raw_amount(
            apply_slippage_percent(position.remaining_token0 * share, params.slippage_tolerance)
        )
        amount1_min = position.token1.raw_amount(
            apply_slippage_percent(position.remaining_token1 * share, params.slippage_tolerance)
        )

        npm = position_manager_address(chain_id)
        logger.info(
            f"Removing liquidity {liquidity}/{position.liquidity} from position {position.id} "
            f"(min0={amount0_min}, min1={amount1_min})"
        )

        decrease_hash = self._send(wallet_client, EVMTransaction(
            to=npm,
            abi=V3_POSITION_MANAGER_ABI,
            function_name="decreaseLiquidity",
            args=[(params.token_id, liquidity, amount0_min, amount1_min, self._deadline())],
            gas=self._config.evm.lp_gas_limit,
        ))
        wallet_client.wait_for_transaction_receipt(decrease_hash)

        collect_hash = self._send(wallet_client, self._collect_transaction(wallet_client, npm, params.token_id))
        logger.info(f"Liquidity removed: decrease={decrease_hash} collect={collect_hash}")
        return collect_hash

    def _collect_transaction(self, wallet_client: WalletClient, npm: str, token_id: int) -> EVMTransaction:
        return EVMTransaction(
            to=npm,
            abi=V3_POSITION_MANAGER_ABI,
            function_name="collect",
            args=[(token_id, wallet_client.get_address(), MAX_UINT128, MAX_UINT128)],
            gas=self._config.evm.lp_gas_limit,
        )

    def collect_fees(self, wallet_client: WalletClient, params: CollectFeesParameters) -> CollectFeesResult:
        """
        Collect everything owed to a position.

        The owed amounts are read by simulating collect from the wallet
        address before the transaction is sent.
        """
        chain_id = self._chain_id(wallet_client)
        npm = position_manager_address(chain_id)
        transaction = self._collect_transaction(wallet_client, npm, params.token_id)

        amount0, amount1 = wallet_client.read(npm, V3_POSITION_MANAGER_ABI, "collect", transaction.args)
        logger.info(f"Collecting fees for position {params.token_id}: amount0={amount0} amount1={amount1}")

        tx_hash = self._send(wallet_client, transaction)
        return CollectFeesResult(token_id=params.token_id, tx_hash=tx_hash, amount0=amount0, amount1=amount1)

    def swap_and_add_liquidity(self, wallet_client: WalletClient, params: SwapAndAddLiquidityParameters) -> str:
        """
        Mint a position in the subgraph's pool for the pair through a
        single position manager multicall.

        Returns:
            Multicall transaction hash
        """
        chain_id = self._chain_id(wallet_client)
        pool = self._require_pool(chain_id, params.token0_address, params.token1_address)
        try:
            validate_tick_range(params.tick_lower, params.tick_upper, pool.fee)
        except ValueError as e:
            raise ParameterError.invalid_ticks(params.tick_lower, params.tick_upper, pool.fee, e) from e

        # Pool tokens are address-sorted; map the caller's amounts onto them
        if pool.token0.address.lower() == params.token0_address.lower():
            amount0, amount1 = int(params.amount0_desired), int(params.amount1_desired)
        else:
            amount0, amount1 = int(params.amount1_desired), int(params.amount0_desired)

        amount0_min, amount1_min = mint_amounts_with_slippage(
            pool.sqrt_price,
            params.tick_lower,
            params.tick_upper,
            amount0,
            amount1,
            params.slippage_tolerance,
        )

        npm = position_manager_address(chain_id)
        self._ensure_approval(wallet_client, pool.token0.address, amount0, npm)
        self._ensure_approval(wallet_client, pool.token1.address, amount1, npm)

        mint_params = PositionManagerEncoder.encode_mint_params(
            pool.token0.address,
            pool.token1.address,
            pool.fee,
            params.tick_lower,
            params.tick_upper,
            amount0,
            amount1,
            amount0_min,
            amount1_min,
            wallet_client.get_address(),
            self._deadline(),
        )

        logger.info(f"Adding liquidity to {pool.pool_address} ({pool.symbol}) via multicall")
        return self._send(wallet_client, EVMTransaction(
            to=npm,
            data=PositionManagerEncoder.build_add_call_parameters(mint_params),
            value=0,
            gas=self._config.evm.lp_gas_limit,
        ))

    # =========================================================================
    # Reads
    # =========================================================================

    def get_positions(self, wallet_client: WalletClient, params: Optional[GetPositionsParameters] = None) -> List[Position]:
        """Positions owned by the wallet (or the given owner)"""
        chain_id = self._chain_id(wallet_client)
        owner = params.owner if params and params.owner else wallet_client.get_address()
        positions = self._dex_query.get_positions_by_owner(chain_id, owner)
        logger.info(f"Found {len(positions)} positions for {owner}")
        return positions

    def get_pool_info(self, wallet_client: WalletClient, params: GetPoolInfoParameters) -> PoolInfo:
        """
        Raises:
            PoolUnavailable: If the subgraph has no pool for the pair
        """
        chain_id = self._chain_id(wallet_client)
        return self._require_pool(chain_id, params.token0_address, params.token1_address, params.fee)

    def scan_pools(self, wallet_client: WalletClient, params: ScanPoolsParameters) -> List[PoolInfo]:
        """High-fee pools above the liquidity, volume and fee APR floors, best APR first"""
        chain_id = self._chain_id(wallet_client)
        token0, token1 = params.token0, params.token1
        if token0 and token1:
            # Pool token order is by address
            token0, token1 = sort_tokens(Token(token0, 18), Token(token1, 18))
            token0, token1 = token0.address, token1.address

        pools = self._dex_query.get_high_fee_pools(
            chain_id,
            min_liquidity=params.min_liquidity,
            min_volume=params.min_volume_24h,
            token0=token0,
            token1=token1,
        )
        min_apr = Decimal(str(params.min_fee_apr))
        matching = [p for p in pools if p.fee_apr is not None and p.fee_apr >= min_apr]
        return sorted(matching, key=lambda p: p.fee_apr, reverse=True)

    def get_new_pools(self, wallet_client: WalletClient, params: GetNewPoolsParameters) -> List[PoolInfo]:
        chain_id = self._chain_id(wallet_client)
        return self._dex_query.get_new_pools(chain_id, first=params.limit)

    # =========================================================================
    # Swaps
    # =========================================================================

    def _swap(
        self,
        wallet_client: WalletClient,
        token_in: TokenParameter,
        token_out: TokenParameter,
        fee: int,
        function_name: str,
        amount: int,
        limit: int,
        sqrt_price_limit_x96: int,
    ) -> str:
        chain_id = self._chain_id(wallet_client)
        self._require_pool(chain_id, token_in.address, token_out.address, fee)

        router = swap_router_address(chain_id)
        spend = amount if function_name == "exactInputSingle" else limit
        self._ensure_approval(wallet_client, token_in.address, spend, router)

        swap_params = (
            token_in.address,
            token_out.address,
            fee,
            wallet_client.get_address(),
            amount,
            limit,
            sqrt_price_limit_x96,
        )
        tx_hash = self._send(wallet_client, EVMTransaction(
            to=router,
            abi=SWAP_ROUTER_02_ABI,
            function_name=function_name,
            args=[swap_params],
            gas=self._config.evm.swap_gas_limit,
        ))
        logger.info(
            f"{function_name} {token_in.symbol or token_in.address} -> "
            f"{token_out.symbol or token_out.address} (fee={fee}): {tx_hash}"
        )
        return tx_hash

    def swap_exact_input(self, wallet_client: WalletClient, params: SwapExactInputParameters) -> SwapResult:
        """
        Sell exactly amount_in of token_in for at least amount_out_minimum of token_out.

        Raises:
            WalletError: If the wallet reports no chain ID
            PoolUnavailable: If the subgraph has no pool for the pair and fee
        """
        tx_hash = self._swap(
            wallet_client,
            params.token_in,
            params.token_out,
            params.fee,
            "exactInputSingle",
            int(params.amount_in),
            int(params.amount_out_minimum),
            int(params.sqrt_price_limit_x96),
        )
        return SwapResult(amount_in=params.amount_in, amount_out=params.amount_out_minimum, tx_hash=tx_hash)

    def swap_exact_output(self, wallet_client: WalletClient, params: SwapExactOutputParameters) -> SwapResult:
        """
        Buy exactly amount_out of token_out spending at most amount_in_maximum of token_in.
        """
        tx_hash = self._swap(
            wallet_client,
            params.token_in,
            params.token_out,
            params.fee,
            "exactOutputSingle",
            int(params.amount_out),
            int(params.amount_in_maximum),
            int(params.sqrt_price_limit_x96),
        )
        return SwapResult(amount_in=params.amount_in_maximum, amount_out=params.amount_out, tx_hash=tx_hash)

    def close(self):
        self._dex_query.close()

    def __repr__(self) -> str:
        return f"UniswapService(subgraph={self._dex_query.url})"

"""
Uniswap V3 subgraph client

Read-side data for the tools: pool snapshots, pool scans and the wallet's
positions. Scan results are cached for a few minutes.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import httpx

from ..config import Config, config as global_config
from ..errors import SubgraphError
from ..infra.cache import TTLCache
from ..infra.retry import call_with_retry
from ..types import PoolInfo, Position
from . import graphql

logger = logging.getLogger(__name__)

HIGH_FEE_POOLS_PAGE_SIZE = 50


class DexDataQuery:
    """
    Uniswap V3 subgraph query client

    Usage:
        query = DexDataQuery()
        pool = query.get_pool(8453, "0x4200...0006", "0x8335...2913")
        pools = query.get_high_fee_pools(8453, min_liquidity=100_000, min_volume=1_000_000)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        cache: Optional[TTLCache] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            config: Plugin configuration (global config if None)
            cache: Result cache (a fresh TTLCache using the configured TTL if None)
            client: HTTP client to reuse (created lazily if None)
        """
        self._config = config or global_config
        subgraph = self._config.subgraph
        self._url = subgraph.url
        self._cache = cache or TTLCache(
            ttl_seconds=subgraph.cache_ttl_seconds,
            max_size=subgraph.cache_max_size,
        )
        self._client = client
        self._owns_client = client is None
        self._client_lock = threading.Lock()

    @property
    def url(self) -> str:
        return self._url

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client (thread-safe)"""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    headers = {"Content-Type": "application/json"}
                    if self._config.subgraph.api_key:
                        headers["Authorization"] = f"Bearer {self._config.subgraph.api_key}"
                    self._client = httpx.Client(
                        timeout=self._config.subgraph.timeout,
                        headers=headers,
                    )
        return self._client

    def _post(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        client = self._get_client()
        try:
            response = client.post(self._url, json={"query": query, "variables": variables})
        except httpx.TimeoutException as e:
            raise SubgraphError.request_failed(self._url, e) from e
        except httpx.RequestError as e:
            raise SubgraphError.request_failed(self._url, e) from e

        if response.status_code >= 400:
            raise SubgraphError.http_error(self._url, response.status_code, response.text)

        try:
            body = response.json()
        except ValueError as e:
            raise SubgraphError.request_failed(self._url, e) from e

        if body.get("errors"):
            raise SubgraphError.query_failed(body["errors"])

        data = body.get("data")
        if data is None:
            raise SubgraphError.empty_response()
        return data

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None, operation: str = "query") -> Dict[str, Any]:
        """
        Run a GraphQL query and return its data section.

        Raises:
            SubgraphError: On HTTP errors, GraphQL errors or a missing data field
        """
        variables = variables or {}
        logger.debug(f"Subgraph {operation}: {variables}")
        return call_with_retry(
            lambda: self._post(query, variables),
            f"subgraph:{operation}",
            max_retries=self._config.subgraph.max_retries,
            retry_delay=self._config.subgraph.retry_delay,
        )

    # =========================================================================
    # Pool scans (cached)
    # =========================================================================

    def get_high_fee_pools(
        self,
        chain_id: int,
        min_liquidity: float = 0,
        min_volume: float = 0,
        token0: Optional[str] = None,
        token1: Optional[str] = None,
    ) -> List[PoolInfo]:
        """
        Pools above the TVL and volume floors, ordered by fees earned

        Each result carries its fee APR.
        """
        token0 = token0.lower() if token0 else None
        token1 = token1.lower() if token1 else None
        cache_key = f"high-fee-pools-{chain_id}-{min_liquidity}-{min_volume}-{token0}-{token1}"

        def fetch() -> List[PoolInfo]:
            variables: Dict[str, Any] = {
                "minVolume": str(min_volume),
                "minLiquidity": str(min_liquidity),
                "first": HIGH_FEE_POOLS_PAGE_SIZE,
            }
            if token0:
                variables["token0"] = token0
            if token1:
                variables["token1"] = token1

            query = graphql.build_high_fee_pools_query(bool(token0), bool(token1))
            data = self.execute(query, variables, "HighFeePools")
            return [PoolInfo.from_subgraph(p, chain_id).with_fee_apr() for p in data.get("pools") or []]

        return self._cache.get_or_set(cache_key, fetch)

    def get_new_pools(self, chain_id: int, first: int = 20) -> List[PoolInfo]:
        """Most recently created pools"""
        cache_key = f"new-pools-{chain_id}-{first}"

        def fetch() -> List[PoolInfo]:
            data = self.execute(graphql.NEW_POOLS_QUERY, {"first": first}, "NewPools")
            return [PoolInfo.from_subgraph(p, chain_id).with_fee_apr() for p in data.get("pools") or []]

        return self._cache.get_or_set(cache_key, fetch)

    # =========================================================================
    # Live lookups
    # =========================================================================

    def get_positions_by_owner(self, chain_id: int, owner: str, first: int = 100) -> List[Position]:
        """Positions held by an address (the subgraph stores owners lowercased)"""
        data = self.execute(
            graphql.POSITIONS_BY_OWNER_QUERY,
            {"owner": owner.lower(), "first": first},
            "PositionsByOwner",
        )
        return [Position.from_subgraph(p, chain_id) for p in data.get("positions") or []]

    def get_pool(
        self,
        chain_id: int,
        token_a: str,
        token_b: str,
        fee: Optional[int] = None,
    ) -> Optional[PoolInfo]:
        """
        Pool for a token pair, in either order

        Without a fee tier the deepest pool for the pair is returned.
        Returns None when the subgraph has no such pool.
        """
        token0, token1 = graphql.order_token_addresses(token_a, token_b)
        variables: Dict[str, Any] = {"token0": token0, "token1": token1}
        if fee is not None:
            variables["feeTier"] = str(fee)

        data = self.execute(graphql.build_pool_by_tokens_query(fee is not None), variables, "PoolByTokens")
        pools = data.get("pools") or []
        if not pools:
            return None
        return PoolInfo.from_subgraph(pools[0], chain_id)

    def get_pool_by_id(self, chain_id: int, pool_id: str) -> Optional[PoolInfo]:
        """Pool by contract address, None when unknown"""
        data = self.execute(graphql.POOL_BY_ID_QUERY, {"poolId": pool_id.lower()}, "PoolById")
        pool = data.get("pool")
        if not pool:
            return None
        return PoolInfo.from_subgraph(pool, chain_id)

    def close(self):
        """Close the HTTP client if this instance created it"""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "DexDataQuery":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"DexDataQuery(url={self._url})"

"""
GraphQL documents for the Uniswap V3 subgraph
"""


TOKEN_FIELDS = """
    id
    symbol
    name
    decimals
"""

POOL_FIELDS = f"""
    id
    token0 {{{TOKEN_FIELDS}}}
    token1 {{{TOKEN_FIELDS}}}
    feeTier
    liquidity
    sqrtPrice
    tick
    token0Price
    token1Price
    volumeUSD
    feesUSD
    totalValueLockedUSD
    txCount
    createdAtTimestamp
"""

NEW_POOLS_QUERY = f"""
query NewPools($first: Int!) {{
  pools(orderBy: createdAtTimestamp, orderDirection: desc, first: $first) {{{POOL_FIELDS}}}
}}
"""

POSITIONS_BY_OWNER_QUERY = f"""
query PositionsByOwner($owner: String!, $first: Int!) {{
  positions(where: {{ owner: $owner }}, first: $first) {{
    id
    owner
    liquidity
    depositedToken0
    depositedToken1
    withdrawnToken0
    withdrawnToken1
    collectedFeesToken0
    collectedFeesToken1
    feeGrowthInside0LastX128
    feeGrowthInside1LastX128
    token0 {{{TOKEN_FIELDS}}}
    token1 {{{TOKEN_FIELDS}}}
    pool {{
      id
      feeTier
    }}
    tickLower {{
      tickIdx
    }}
    tickUpper {{
      tickIdx
    }}
  }}
}}
"""

POOL_BY_ID_QUERY = f"""
query PoolById($poolId: ID!) {{
  pool(id: $poolId) {{{POOL_FIELDS}}}
}}
"""


def build_high_fee_pools_query(with_token0: bool = False, with_token1: bool = False) -> str:
    """
    Pools above a volume and TVL floor, highest fees first

    Token filters are only added when the caller restricts the pair, so the
    query never matches against a null token id.
    """
    variables = ["$minVolume: BigDecimal!", "$minLiquidity: BigDecimal!", "$first: Int!"]
    filters = ["volumeUSD_gt: $minVolume", "totalValueLockedUSD_gt: $minLiquidity"]
    if with_token0:
        variables.append("$token0: String!")
        filters.append("token0: $token0")
    if with_token1:
        variables.append("$token1: String!")
        filters.append("token1: $token1")

    return (
        f"query HighFeePools({', '.join(variables)}) {{\n"
        f"  pools(where: {{ {', '.join(filters)} }}, orderBy: feesUSD, orderDirection: desc, first: $first) "
        f"{{{POOL_FIELDS}}}\n"
        f"}}\n"
    )


def build_pool_by_tokens_query(with_fee: bool = False) -> str:
    """Deepest pool for an ordered token pair, optionally pinned to a fee tier"""
    variables = ["$token0: String!", "$token1: String!"]
    filters = ["token0: $token0", "token1: $token1"]
    if with_fee:
        variables.append("$feeTier: BigInt!")
        filters.append("feeTier: $feeTier")

    return (
        f"query PoolByTokens({', '.join(variables)}) {{\n"
        f"  pools(where: {{ {', '.join(filters)} }}, orderBy: liquidity, orderDirection: desc, first: 1) "
        f"{{{POOL_FIELDS}}}\n"
        f"}}\n"
    )


def order_token_addresses(token_a: str, token_b: str):
    """Lowercase addresses in pool order (the subgraph stores ids lowercased)"""
    a, b = token_a.lower(), token_b.lower()
    return (a, b) if a < b else (b, a)

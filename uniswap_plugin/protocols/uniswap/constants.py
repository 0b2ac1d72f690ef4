"""
Uniswap V3 Contract Addresses and Constants

Addresses for the V3 factory, NonfungiblePositionManager and SwapRouter02.
Chains without an entry fall back to the Ethereum Mainnet deployment.
"""

# =========================================================================
# Uniswap V3 Contracts
# =========================================================================

# Uniswap V3 Factory address
UNISWAP_V3_FACTORY_ADDRESSES = {
    1: "0x1F98431c8aD98523631AE4a59f267346ea31F984",       # Ethereum Mainnet
    8453: "0x33128a8fC17869897dcE68Ed026d694621f6FDfD",    # Base
    84532: "0x4752ba5DBc23f44D87826276BF6Fd6b1C372aD24",   # Base Sepolia
}

# Uniswap V3 NonfungiblePositionManager address
UNISWAP_V3_POSITION_MANAGER_ADDRESSES = {
    1: "0xC36442b4a4522E871399CD717aBDD847Ab11FE88",       # Ethereum Mainnet
    8453: "0x03a520b32C04BF3bEEf7BEb72E919cf822Ed34f1",    # Base
    84532: "0x27F971cb582BF9E50F397e4d29a5C7A34f11faA2",   # Base Sepolia
}

# SwapRouter02 (exactInputSingle / exactOutputSingle without deadline)
UNISWAP_V3_SWAP_ROUTER_ADDRESSES = {
    1: "0x68b3465833fb72A70ecDF485E0e4C7bD8665Fc45",       # Ethereum Mainnet
    8453: "0x2626664c2603336E57B271c5C0b26F421741e481",    # Base
    84532: "0x94cC0AaC535CCDB3C01d6787D6413C739ae12bc4",   # Base Sepolia
}

# Chain names
CHAIN_NAMES = {
    1: "Ethereum",
    8453: "Base",
    84532: "Base Sepolia",
}

# =========================================================================
# Common Constants
# =========================================================================

# Fee tiers (in hundredths of a bip, i.e., 1e-6)
# 100 = 0.01%, 500 = 0.05%, 3000 = 0.30%, 10000 = 1%
UNISWAP_FEE_TIERS = [100, 500, 3000, 10000]

# Tick spacing for each fee tier
TICK_SPACING_BY_FEE = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

MIN_TICK = -887272
MAX_TICK = 887272

MAX_UINT128 = 2**128 - 1
MAX_UINT256 = 2**256 - 1

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def factory_address(chain_id: int) -> str:
    return UNISWAP_V3_FACTORY_ADDRESSES.get(chain_id, UNISWAP_V3_FACTORY_ADDRESSES[1])


def position_manager_address(chain_id: int) -> str:
    return UNISWAP_V3_POSITION_MANAGER_ADDRESSES.get(chain_id, UNISWAP_V3_POSITION_MANAGER_ADDRESSES[1])


def swap_router_address(chain_id: int) -> str:
    return UNISWAP_V3_SWAP_ROUTER_ADDRESSES.get(chain_id, UNISWAP_V3_SWAP_ROUTER_ADDRESSES[1])


def chain_name(chain_id: int) -> str:
    return CHAIN_NAMES.get(chain_id, f"Chain-{chain_id}")

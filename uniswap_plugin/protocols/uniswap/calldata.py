"""
Calldata encoding for NonfungiblePositionManager batches

Used where the call has to be sent as raw data (multicall), so that the
wallet client does not need a contract object for the inner calls.
"""

from typing import List

from eth_abi import encode
from web3 import Web3

MINT_PARAMS_TYPE = "(address,address,uint24,int24,int24,uint256,uint256,uint256,uint256,address,uint256)"


def function_selector(signature: str) -> bytes:
    """First four bytes of keccak256(signature)"""
    return bytes(Web3.keccak(text=signature)[:4])


MINT_SELECTOR = function_selector(f"mint({MINT_PARAMS_TYPE})")
MULTICALL_SELECTOR = function_selector("multicall(bytes[])")


class PositionManagerEncoder:
    """
    Encodes NonfungiblePositionManager calls

    multicall(bytes[]) executes each inner call against the manager in a
    single transaction and reverts all of them if one fails.
    """

    @staticmethod
    def encode_mint_params(
        token0: str,
        token1: str,
        fee: int,
        tick_lower: int,
        tick_upper: int,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int,
        amount1_min: int,
        recipient: str,
        deadline: int,
    ) -> tuple:
        """Create MintParams tuple"""
        return (
            Web3.to_checksum_address(token0),
            Web3.to_checksum_address(token1),
            fee,
            tick_lower,
            tick_upper,
            amount0_desired,
            amount1_desired,
            amount0_min,
            amount1_min,
            Web3.to_checksum_address(recipient),
            deadline,
        )

    @staticmethod
    def encode_mint(mint_params: tuple) -> bytes:
        """Encode a full mint(MintParams) call"""
        return MINT_SELECTOR + encode([MINT_PARAMS_TYPE], [mint_params])

    @staticmethod
    def encode_multicall(calls: List[bytes]) -> bytes:
        """Encode multicall(bytes[]) wrapping the given calls"""
        return MULTICALL_SELECTOR + encode(["bytes[]"], [calls])

    @classmethod
    def build_add_call_parameters(cls, mint_params: tuple) -> str:
        """Hex calldata minting a new position through multicall"""
        return Web3.to_hex(cls.encode_multicall([cls.encode_mint(mint_params)]))

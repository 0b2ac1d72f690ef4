"""
Shared configuration and fixtures for live integration tests.

These tests hit a real RPC endpoint and the Uniswap V3 subgraph. They only
read state; nothing is signed or sent.

Environment Variables:
    EVM_PRIVATE_KEY: Hex private key of the wallet (required)
    EVM_RPC_URL: JSON-RPC endpoint (required)
    UNISWAP_SUBGRAPH_URL: Subgraph for the same chain (optional, Base by default)
    SUBGRAPH_API_KEY: Gateway key when the subgraph requires one (optional)
"""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

# Load .env file
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env_or_fail(key: str) -> str:
    """Get required environment variable or raise error"""
    value = os.getenv(key)
    if not value:
        raise EnvironmentError(
            f"Missing required environment variable: {key}\n"
            f"Please set {key} in your .env file or environment."
        )
    return value


def skip_if_no_config():
    """Check if required config is available, return skip message if not"""
    try:
        get_env_or_fail("EVM_PRIVATE_KEY")
        get_env_or_fail("EVM_RPC_URL")
        return None
    except EnvironmentError as e:
        return str(e)


@pytest.fixture(scope="module")
def wallet():
    """Web3WalletClient from the environment"""
    skip_msg = skip_if_no_config()
    if skip_msg:
        pytest.skip(skip_msg)

    from uniswap_plugin import Web3WalletClient

    return Web3WalletClient.from_env()


@pytest.fixture(scope="module")
def plugin():
    """Plugin with a fresh subgraph client, closed after the module"""
    from uniswap_plugin import uniswap

    plugin = uniswap()
    yield plugin
    plugin.close()


@pytest.fixture(scope="module")
def tools(plugin, wallet):
    """Tools by name for the wallet's chain"""
    return {tool.name: tool for tool in plugin.get_tools(wallet.get_chain())}

#!/usr/bin/env python3
"""
Create a Crossmint EVM smart wallet for the agent

The admin signer is SIGNER_WALLET_ADDRESS, or the address derived from
SIGNER_WALLET_SECRET_KEY. Needs CROSSMINT_STAGING_API_KEY.

Usage:
    python scripts/create_smart_wallet.py
    python scripts/create_smart_wallet.py --signer 0xYourAdminAddress
"""

import argparse
import json
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from uniswap_plugin.config import setup_logging
from uniswap_plugin.errors import UniswapPluginError
from uniswap_plugin.infra.crossmint import CrossmintWalletAPI, signer_address_from_key


def resolve_signer(cli_signer: str = None) -> str:
    if cli_signer:
        return cli_signer
    address = os.getenv("SIGNER_WALLET_ADDRESS")
    if address:
        return address
    secret = os.getenv("SIGNER_WALLET_SECRET_KEY")
    if secret:
        return signer_address_from_key(secret)
    raise SystemExit("Set SIGNER_WALLET_ADDRESS or SIGNER_WALLET_SECRET_KEY, or pass --signer")


def main():
    parser = argparse.ArgumentParser(description="Create a Crossmint EVM smart wallet")
    parser.add_argument("--signer", help="Admin signer address (defaults to the env signer)")
    parser.add_argument("--base-url", help="Crossmint API base URL")
    args = parser.parse_args()

    setup_logging()
    signer = resolve_signer(args.signer)

    try:
        api = CrossmintWalletAPI(base_url=args.base_url)
    except UniswapPluginError as e:
        print(f"Failed to create wallet: {e}")
        return 1

    try:
        wallet = api.create_smart_wallet(signer)
    except UniswapPluginError as e:
        print(f"Failed to create wallet: {e}")
        return 1
    finally:
        api.close()

    print(f"Created wallet: {wallet.get('address')}")
    print(f"Details: {json.dumps(wallet, indent=2)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

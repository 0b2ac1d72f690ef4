"""
Crossmint wallet API client

Creates EVM smart wallets administered by a local keypair. The plugin
declares smart wallet support; this is how one is provisioned for it.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from eth_account import Account

from ..config import Config, config as global_config
from ..errors import ConfigurationError, WalletError

logger = logging.getLogger(__name__)


class CrossmintWalletAPI:
    """
    Crossmint wallets API (v1-alpha2)

    Usage:
        api = CrossmintWalletAPI()
        wallet = api.create_smart_wallet("0xAdminSignerAddress")
        print(wallet["address"])

    Note:
        Requires CROSSMINT_STAGING_API_KEY. CROSSMINT_BASE_URL selects the
        environment (staging by default).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        config: Optional[Config] = None,
        client: Optional[httpx.Client] = None,
    ):
        cfg = (config or global_config).crossmint
        self._api_key = api_key or cfg.api_key
        self._base_url = (base_url or cfg.base_url).rstrip("/")
        self._timeout = cfg.timeout
        self._client = client

        if not self._api_key:
            raise ConfigurationError.missing("CROSSMINT_STAGING_API_KEY")

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._timeout,
                headers={
                    "X-API-KEY": self._api_key,
                    "Content-Type": "application/json",
                },
            )
        return self._client

    def create_smart_wallet(self, signer_address: str) -> Dict[str, Any]:
        """
        Create an EVM smart wallet with signer_address as admin signer

        Returns:
            Wallet record from the API (includes "address")

        Raises:
            WalletError: If the API rejects the request
        """
        body = {
            "type": "evm-smart-wallet",
            "config": {
                "adminSigner": {
                    "type": "evm-keypair",
                    "address": signer_address,
                },
            },
        }
        url = f"{self._base_url}/api/v1-alpha2/wallets"
        logger.info(f"Creating smart wallet for signer {signer_address}")

        response = self._get_client().post(url, json=body)
        if response.status_code >= 400:
            raise WalletError.creation_failed(response.status_code, response.text)

        data = response.json()
        logger.info(f"Created smart wallet {data.get('address')}")
        return data

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None


def signer_address_from_key(private_key: str) -> str:
    """Address for a hex private key (with or without 0x)"""
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return Account.from_key(private_key).address

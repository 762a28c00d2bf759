"""
ClientFactory - Creates and caches chain RPC clients and the custody provider.

Built once from configuration and shared by the bot and the API.
"""

import logging
from typing import Dict, List, Optional

from televault.core.chains import Chain, chain_from_config_key
from televault.core.config_loader import load_secret
from televault.core.custody import CustodyProvider
from televault.core.custody_client import HttpCustodyProvider
from televault.core.local_custody import LocalCustodyProvider
from televault.core.rpc import ChainRpcClient, EvmRpcClient, SolanaRpcClient

logger = logging.getLogger(__name__)


class ClientFactory:
    """
    Factory for chain clients.

    Responsibilities:
    1. Create one RPC client per configured chain
    2. Create the configured custody provider
    3. Cache and close them
    """

    def __init__(self, config: dict):
        """
        Initialize client factory.

        Args:
            config: Validated application configuration (see load_config)
        """
        self.config = config
        self._rpc_cache: Dict[Chain, ChainRpcClient] = {}
        self._custody: Optional[CustodyProvider] = None

    @property
    def supported_chains(self) -> List[Chain]:
        """Chains configured for this deployment, in configuration order."""
        return [chain_from_config_key(key) for key in self.config['chains']]

    @property
    def namespace(self) -> str:
        return self.config['custody']['namespace']

    def get_rpc_client(self, chain: Chain) -> ChainRpcClient:
        """
        Get or create the RPC client for a chain.

        Raises:
            ValueError: If the chain is not configured
        """
        chain = Chain(chain)
        if chain in self._rpc_cache:
            return self._rpc_cache[chain]

        chain_config = None
        for key, value in self.config['chains'].items():
            if chain_from_config_key(key) is chain:
                chain_config = value
                break
        if chain_config is None:
            raise ValueError(f"Chain {chain} is not configured")

        if chain is Chain.EVM:
            client = EvmRpcClient(
                rpc_url=chain_config['rpc_url'],
                chain_id=chain_config['chain_id'],
                proxy=chain_config.get('proxy'),
                verify_ssl=chain_config.get('verify_ssl', True)
            )
        elif chain is Chain.SOLANA:
            client = SolanaRpcClient(
                rpc_url=chain_config['rpc_url'],
                commitment=chain_config.get('commitment', 'confirmed')
            )
        else:
            raise ValueError(f"No RPC client available for chain {chain}")

        logger.info(f"RPC client created for {chain}: {chain_config['rpc_url']}")
        self._rpc_cache[chain] = client
        return client

    def get_rpc_clients(self) -> Dict[Chain, ChainRpcClient]:
        return {chain: self.get_rpc_client(chain) for chain in self.supported_chains}

    def get_custody_provider(self) -> CustodyProvider:
        """
        Get or create the configured custody provider.

        Raises:
            ValueError: If the custody API key is not set
        """
        if self._custody is not None:
            return self._custody

        custody_config = self.config['custody']
        provider = custody_config['provider']

        if provider == 'http':
            api_key = load_secret(custody_config['api_key_env'], "custody API key")
            self._custody = HttpCustodyProvider(
                base_url=custody_config['base_url'],
                api_key=api_key,
                timeout=custody_config.get('timeout', 30)
            )
        else:
            logger.warning("Using local custody provider; keys are held in plaintext by this process")
            self._custody = LocalCustodyProvider(self.get_rpc_clients())

        logger.info(f"Custody provider initialized: {provider}")
        return self._custody

    def close(self) -> None:
        """Close all cached clients."""
        for client in self._rpc_cache.values():
            try:
                client.close()
            except Exception as e:
                logger.warning(f"Error closing RPC client: {e}")
        self._rpc_cache.clear()

        if self._custody is not None:
            try:
                self._custody.close()
            except Exception as e:
                logger.warning(f"Error closing custody provider: {e}")
            self._custody = None

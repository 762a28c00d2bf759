"""
Read-side chain RPC clients.

Each client returns balances in the chain's smallest unit and raises
RpcError on any failure. The signing side of the local custody
provider reuses the underlying web3 / solana-py clients.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import requests
from web3 import Web3
from solana.rpc.api import Client as SolanaClient
from solana.rpc.commitment import Commitment
from solders.pubkey import Pubkey

from televault.core.chains import Chain
from televault.core.exceptions import RpcError

logger = logging.getLogger(__name__)


class ChainRpcClient(ABC):
    """Balance queries for one chain."""

    chain: Chain

    @abstractmethod
    def get_balance(self, address: str) -> int:
        """
        Get native balance of an address.

        Args:
            address: Address in the chain's native format

        Returns:
            Balance in smallest units

        Raises:
            RpcError: If the query failed
        """
        pass

    def close(self) -> None:
        pass


class EvmRpcClient(ChainRpcClient):
    """EVM JSON-RPC client built on web3.py."""

    chain = Chain.EVM

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        proxy: Optional[str] = None,
        verify_ssl: bool = True
    ):
        """
        Initialize Web3 client with proxy and SSL configuration.

        Args:
            rpc_url: JSON-RPC endpoint
            chain_id: EIP-155 chain id used when signing
            proxy: HTTP proxy URL (falls back to EVM_RPC_PROXY env var)
            verify_ssl: Whether to verify SSL certificates
        """
        self.rpc_url = rpc_url
        self.chain_id = chain_id

        proxy = proxy or os.environ.get('EVM_RPC_PROXY')

        self._session = requests.Session()
        self._session.verify = verify_ssl
        request_kwargs = {'timeout': 60 if proxy else 30}

        if proxy:
            self._session.proxies = {
                'http': proxy,
                'https': proxy
            }
            logger.info(f"Using proxy for EVM RPC: {proxy} (SSL verify: {verify_ssl})")

        provider = Web3.HTTPProvider(rpc_url, request_kwargs=request_kwargs, session=self._session)
        self.web3 = Web3(provider)

    def get_balance(self, address: str) -> int:
        try:
            return int(self.web3.eth.get_balance(Web3.to_checksum_address(address)))
        except Exception as e:
            raise RpcError(f"EVM balance query failed for {address}: {e}") from e

    def close(self) -> None:
        self._session.close()


class SolanaRpcClient(ChainRpcClient):
    """Solana JSON-RPC client built on solana-py."""

    chain = Chain.SOLANA

    def __init__(self, rpc_url: str, commitment: str = "confirmed"):
        """
        Args:
            rpc_url: Solana RPC endpoint
            commitment: Commitment level for reads and sends
        """
        self.rpc_url = rpc_url
        self.commitment = Commitment(commitment)
        self.client = SolanaClient(rpc_url, commitment=self.commitment)

    def get_balance(self, address: str) -> int:
        try:
            response = self.client.get_balance(Pubkey.from_string(address))
            return int(response.value)
        except Exception as e:
            raise RpcError(f"Solana balance query failed for {address}: {e}") from e

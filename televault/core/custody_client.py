"""
HTTP custody provider client.

Talks to a REST custody service that pregenerates wallets and signs
with the user's key share:

    POST {base_url}/wallets       {"identifier", "chain"}            -> {"address", "key_share"}
    POST {base_url}/transactions  {"key_share", "chain", "to", "amount"} -> {"transaction_id"}
"""

import logging
from typing import Any, Dict, Optional

import httpx

from televault.core.chains import Chain
from televault.core.custody import ChainAccount, CustodyProvider
from televault.core.exceptions import CustodyError

logger = logging.getLogger(__name__)


class HttpCustodyProvider(CustodyProvider):
    """Custody provider backed by a REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Custody API base URL
            api_key: API key sent as X-API-Key
            timeout: Request timeout in seconds
            http_client: Pre-built httpx.Client (tests inject one with a mock transport)
        """
        self.base_url = base_url.rstrip('/')
        self._client = http_client or httpx.Client(timeout=timeout)
        self._headers = {"X-API-Key": api_key}

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.post(url, json=payload, headers=self._headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise CustodyError(
                f"Custody request {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise CustodyError(f"Custody request {path} failed: {e}") from e
        except ValueError as e:
            raise CustodyError(f"Custody response for {path} is not valid JSON") from e

    def create_chain_account(self, identifier: str, chain: Chain) -> ChainAccount:
        data = self._post("/wallets", {"identifier": identifier, "chain": Chain(chain).value})

        address = data.get("address")
        key_share = data.get("key_share")
        if not address or not key_share:
            raise CustodyError(f"Custody response for {chain} wallet is missing address or key share")

        logger.info(
            "Custody wallet created",
            extra={"chain": str(chain), "address": address}
        )
        return ChainAccount(address=address, key_share_handle=key_share)

    def sign_and_broadcast(
        self,
        key_share_handle: str,
        chain: Chain,
        destination: str,
        amount_smallest: int
    ) -> str:
        data = self._post("/transactions", {
            "key_share": key_share_handle,
            "chain": Chain(chain).value,
            "to": destination,
            # Strings keep wei amounts exact in JSON
            "amount": str(amount_smallest),
        })

        tx_id = data.get("transaction_id")
        if not tx_id:
            raise CustodyError(f"Custody response for {chain} transaction is missing transaction_id")
        return tx_id

    def close(self) -> None:
        self._client.close()

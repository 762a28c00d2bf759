"""
Balance aggregation across chains.

Each bound chain is queried independently; a failing chain is reported
as a failed result next to the successful ones instead of failing the
whole query.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from televault.core.chains import Chain, get_chain_spec
from televault.core.rpc import ChainRpcClient
from televault.models.account import Account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceResult:
    """Outcome of a balance query for one chain."""

    chain: Chain
    address: str
    balance: Optional[Decimal] = None
    """Balance in the human-readable unit (ETH, SOL). Unrounded."""
    error: Optional[str] = None
    """Error tag (exception class name) when the query failed."""
    detail: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class BalanceAggregator:
    """Queries native balances for every chain bound on an account."""

    def __init__(self, rpc_clients: Dict[Chain, ChainRpcClient]):
        """
        Args:
            rpc_clients: RPC client per chain
        """
        self.rpc_clients = rpc_clients

    def get_balances(self, account: Account) -> Dict[Chain, BalanceResult]:
        """
        Get balances for all chains bound on an account.

        Args:
            account: Account to query

        Returns:
            Mapping of chain to BalanceResult. Never raises for a single
            chain's failure.
        """
        results: Dict[Chain, BalanceResult] = {}
        for chain, binding in account.chains.items():
            results[chain] = self.get_balance(chain, binding.address)
        return results

    def get_balance(self, chain: Chain, address: str) -> BalanceResult:
        """Query one chain, converting failures into a failed BalanceResult."""
        chain = Chain(chain)
        client = self.rpc_clients.get(chain)
        if client is None:
            return BalanceResult(
                chain=chain,
                address=address,
                error="ChainNotConfigured",
                detail=f"No RPC client configured for {chain}"
            )

        try:
            raw = client.get_balance(address)
            balance = get_chain_spec(chain).to_human(raw)
            logger.info(f"Balance for {address} on {chain}: {balance}")
            return BalanceResult(chain=chain, address=address, balance=balance)
        except Exception as e:
            logger.warning(
                f"Failed to fetch {chain} balance for {address}: {e}",
                extra={"chain": str(chain), "address": address}
            )
            return BalanceResult(
                chain=chain,
                address=address,
                error=type(e).__name__,
                detail=str(e)
            )

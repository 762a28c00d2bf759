"""
Transaction execution.

Converts the human-readable amount to smallest units and hands the
transfer to the custody provider with the binding's key-share handle.
"""

import logging
from decimal import Decimal

from televault.core.chains import Chain, get_chain_spec
from televault.core.custody import CustodyProvider
from televault.core.exceptions import AccountMissing, ExecutionFailed
from televault.models.account import Account

logger = logging.getLogger(__name__)


class TransactionExecutor:
    """Dispatches native transfers to the custody provider."""

    def __init__(self, custody: CustodyProvider):
        self.custody = custody

    def execute(self, account: Account, chain: Chain, destination: str, amount: Decimal) -> str:
        """
        Send a native transfer from an account.

        Args:
            account: Sending account
            chain: Chain to send on
            destination: Validated recipient address
            amount: Amount in the human-readable unit (ETH, SOL), > 0

        Returns:
            Transaction identifier

        Raises:
            AccountMissing: If the account has no binding for the chain
            ExecutionFailed: If signing or broadcasting failed
        """
        chain = Chain(chain)
        spec = get_chain_spec(chain)

        binding = account.binding(chain)
        if binding is None:
            raise AccountMissing(f"Account {account.chat_identity} has no {chain} binding")

        amount_smallest = spec.to_smallest(amount)
        if amount_smallest <= 0:
            raise ExecutionFailed(f"Amount {amount} {spec.symbol} is below one smallest unit")

        try:
            tx_id = self.custody.sign_and_broadcast(
                binding.key_share_handle,
                chain,
                destination,
                amount_smallest
            )
        except Exception as e:
            logger.error(
                f"Transaction failed on {chain}: {e}",
                extra={
                    "chat_identity": account.chat_identity,
                    "chain": str(chain),
                    "destination": destination
                },
                exc_info=True
            )
            raise ExecutionFailed(f"{chain} transfer failed: {e}") from e

        if not tx_id:
            raise ExecutionFailed(f"{chain} transfer returned no transaction id")

        logger.info(
            f"Transaction Hash: {tx_id}",
            extra={
                "chat_identity": account.chat_identity,
                "chain": str(chain),
                "destination": destination,
                "transaction_id": tx_id
            }
        )
        return tx_id

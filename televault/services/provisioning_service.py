"""
Account provisioning.

Maps a chat identity to a multi-chain account exactly once. A new
account is only written after the custody provider created a chain
account on every supported chain; a failure on any chain leaves no
trace in the store, so provisioning can simply be retried.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from televault.core.chains import Chain
from televault.core.custody import ChainAccount, CustodyProvider, identity_key
from televault.core.exceptions import CustodyError, IdentityMissing, ProvisioningFailed
from televault.models.account import Account
from televault.services.account_store import AccountStore

logger = logging.getLogger(__name__)


class AccountProvisioner:
    """Idempotent get-or-create of accounts."""

    def __init__(
        self,
        store: AccountStore,
        custody: CustodyProvider,
        namespace: str,
        chains: Iterable[Chain] = (Chain.EVM, Chain.SOLANA)
    ):
        """
        Args:
            store: Account store
            custody: Custody provider creating chain accounts
            namespace: Identity namespace appended to chat identities
            chains: Chains every new account is provisioned on
        """
        self.store = store
        self.custody = custody
        self.namespace = namespace
        self.chains: List[Chain] = [Chain(c) for c in chains]

    def provision(self, chat_identity: Optional[str], display_name: Optional[str] = None) -> Account:
        """
        Return the account for a chat identity, creating it if needed.

        Raises:
            IdentityMissing: If no chat identity was given
            ProvisioningFailed: If the custody provider failed on any chain
        """
        account, _ = self.provision_with_status(chat_identity, display_name)
        return account

    def provision_with_status(
        self,
        chat_identity: Optional[str],
        display_name: Optional[str] = None
    ) -> Tuple[Account, bool]:
        """
        Same as provision, also reporting whether the account was created now.

        Returns:
            Tuple of (account, created)
        """
        if chat_identity is None or not str(chat_identity).strip():
            raise IdentityMissing("No chat identity available")
        chat_identity = str(chat_identity).strip()

        existing = self.store.find_by_identity(chat_identity)
        if existing is not None:
            logger.info("Account already provisioned", extra={"chat_identity": chat_identity})
            return existing, False

        bindings = self._create_bindings(chat_identity)
        return self.store.insert_if_absent(chat_identity, display_name or chat_identity, bindings)

    def _create_bindings(self, chat_identity: str) -> Dict[Chain, ChainAccount]:
        identifier = identity_key(chat_identity, self.namespace)
        bindings: Dict[Chain, ChainAccount] = {}

        for chain in self.chains:
            try:
                chain_account = self.custody.create_chain_account(identifier, chain)
                if not chain_account.address or not chain_account.key_share_handle:
                    raise CustodyError(f"Custody provider returned an incomplete {chain} account")
                bindings[chain] = chain_account
            except Exception as e:
                logger.error(
                    f"Failed to create {chain} account: {e}",
                    extra={"chat_identity": chat_identity, "chain": str(chain)},
                    exc_info=True
                )
                raise ProvisioningFailed([chain]) from e

        return bindings

"""
Durable account store.

Looks up accounts by chat identity and inserts new accounts together
with all of their chain bindings in a single transaction. The unique
constraint on chat_identity is the sole guard against duplicate
registration; a conflicting insert returns the account that won.
"""

import logging
from typing import Dict, Optional, Tuple

from peewee import IntegrityError, DoesNotExist

from televault.core.chains import Chain
from televault.core.custody import ChainAccount
from televault.core.models import db
from televault.models.account import Account, ChainBinding

logger = logging.getLogger(__name__)


class AccountStore:
    """
    Persistence operations for Account and ChainBinding records.

    Thread-safe: Database operations use peewee connection handling.
    """

    def find_by_identity(self, chat_identity: str) -> Optional[Account]:
        """
        Retrieve an account by chat identity.

        Args:
            chat_identity: Telegram user ID as string

        Returns:
            Account if found, None otherwise
        """
        try:
            return Account.get(Account.chat_identity == str(chat_identity))
        except DoesNotExist:
            return None

    def insert_if_absent(
        self,
        chat_identity: str,
        display_name: str,
        bindings: Dict[Chain, ChainAccount]
    ) -> Tuple[Account, bool]:
        """
        Insert an account with its chain bindings unless one already exists.

        Args:
            chat_identity: Telegram user ID as string
            display_name: Informational display name
            bindings: Created chain account per chain

        Returns:
            Tuple of (account, created). created is False when another
            registration for the same identity committed first.

        Raises:
            IntegrityError: If a conflict occurred but no existing account
                could be found (e.g. a binding constraint failed)
        """
        chat_identity = str(chat_identity)
        try:
            with db.atomic():
                account = Account.create(
                    chat_identity=chat_identity,
                    display_name=(display_name or chat_identity)[:100]
                )
                for chain, chain_account in bindings.items():
                    ChainBinding.create(
                        account=account,
                        chain=Chain(chain).value,
                        address=chain_account.address,
                        key_share_handle=chain_account.key_share_handle
                    )

            logger.info(
                "Created account",
                extra={
                    "chat_identity": chat_identity,
                    "chains": [str(c) for c in bindings]
                }
            )
            return account, True

        except IntegrityError:
            existing = self.find_by_identity(chat_identity)
            if existing is None:
                raise
            logger.warning(
                "Account already exists, returning existing record",
                extra={"chat_identity": chat_identity}
            )
            return existing, False

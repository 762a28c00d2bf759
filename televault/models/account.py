"""
Account records for Telegram bot users.

One Account per chat identity; one ChainBinding per (Account, chain).
Key shares are opaque custody material and are never rendered by
``__repr__`` or exposed through ``public_addresses``.
"""

from datetime import datetime
from typing import Dict, Optional

from peewee import (
    Model,
    CharField,
    TextField,
    DateTimeField,
    ForeignKeyField,
)

from televault.core.chains import Chain
from televault.core.models import db


class Account(Model):
    """
    Multi-chain account owned by a single chat identity.
    """

    chat_identity = CharField(max_length=64, unique=True, index=True)
    """
    Telegram user ID as a string.
    Unique constraint enforces one account per user, including under
    concurrent registration attempts.
    """

    display_name = CharField(max_length=100)
    """Telegram username at registration time. Informational only."""

    created_at = DateTimeField(default=datetime.now)

    class Meta:
        database = db
        table_name = 'accounts'

    @property
    def chains(self) -> Dict[Chain, "ChainBinding"]:
        """Tagged mapping of chain -> binding for every bound chain."""
        return {Chain(binding.chain): binding for binding in self.bindings}

    def binding(self, chain: Chain) -> Optional["ChainBinding"]:
        """Return the binding for a chain, or None if that chain was never provisioned."""
        return self.chains.get(Chain(chain))

    def public_addresses(self) -> Dict[Chain, str]:
        return {chain: binding.address for chain, binding in self.chains.items()}

    def __repr__(self):
        return f"<Account chat_identity={self.chat_identity!r} chains={sorted(str(c) for c in self.chains)}>"


class ChainBinding(Model):
    """
    Address and key-share handle giving an Account capability on one chain.

    Immutable after creation.
    """

    account = ForeignKeyField(Account, backref='bindings', on_delete='CASCADE')

    chain = CharField(max_length=16)
    """Chain tag (Chain enum value)."""

    address = CharField(max_length=64)
    """Public address in the chain's native format."""

    key_share_handle = TextField()
    """
    Opaque credential material from the custody provider.
    Only passed back to the custody provider when signing.
    """

    created_at = DateTimeField(default=datetime.now)

    class Meta:
        database = db
        table_name = 'chain_bindings'
        indexes = (
            (('account', 'chain'), True),  # One binding per chain
        )

    def __repr__(self):
        return f"<ChainBinding chain={self.chain} address={self.address}>"

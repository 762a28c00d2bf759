"""
Custody provider abstraction.

The custody provider creates chain accounts, holds the provider side of
the key material, and signs and broadcasts transactions given the
user's key-share handle. Services depend only on this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from televault.core.chains import Chain


@dataclass(frozen=True)
class ChainAccount:
    """A freshly created chain account returned by the custody provider."""

    address: str
    key_share_handle: str = field(repr=False)


def identity_key(chat_identity: str, namespace: str) -> str:
    """
    Build the custody-side identifier for a chat identity.

    The namespace keeps identifiers of different deployments apart, e.g.
    ``identity_key("1001", "televault.local") == "1001@televault.local"``.
    """
    return f"{chat_identity}@{namespace}"


class CustodyProvider(ABC):
    """
    Abstract base class for custody providers.

    Implementations must fail loudly: any error raises CustodyError, and a
    transaction id is only returned after the transaction was broadcast.
    """

    @abstractmethod
    def create_chain_account(self, identifier: str, chain: Chain) -> ChainAccount:
        """
        Create a custodial account on a chain.

        Args:
            identifier: Namespaced identity key (see identity_key)
            chain: Chain to create the account on

        Returns:
            ChainAccount with public address and key-share handle

        Raises:
            CustodyError: If creation failed
        """
        pass

    @abstractmethod
    def sign_and_broadcast(
        self,
        key_share_handle: str,
        chain: Chain,
        destination: str,
        amount_smallest: int
    ) -> str:
        """
        Sign a native transfer and broadcast it.

        Args:
            key_share_handle: Key-share handle from the chain binding
            chain: Chain to transact on
            destination: Recipient address
            amount_smallest: Amount in smallest units (wei, lamports)

        Returns:
            Transaction identifier (hash or signature)

        Raises:
            CustodyError: If signing or broadcasting failed
        """
        pass

    def close(self) -> None:
        """Release any held connections."""
        pass

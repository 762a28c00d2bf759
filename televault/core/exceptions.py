"""
Error taxonomy.

Every error raised by the services carries a `user_message` that the
presentation layers (bot, API) can show verbatim.
"""

from typing import Iterable, List, Optional


class TeleVaultError(Exception):
    """Base class for errors surfaced to users."""

    user_message = "An error occurred. Please try again."

    def __init__(self, message: Optional[str] = None, user_message: Optional[str] = None):
        super().__init__(message or user_message or self.user_message)
        if user_message:
            self.user_message = user_message


class IdentityMissing(TeleVaultError):
    """No chat identity could be resolved for the request."""

    user_message = "An error occurred. Please try again."


class ProvisioningFailed(TeleVaultError):
    """The custody provider failed to create one or more chain accounts.

    Nothing was persisted, so the request can be retried.
    """

    user_message = "😓 Failed to create an account. Please try again."

    def __init__(self, failed_chains: Iterable = (), message: Optional[str] = None):
        self.failed_chains: List = list(failed_chains)
        names = ", ".join(str(c) for c in self.failed_chains) or "unknown"
        super().__init__(message or f"Provisioning failed for chain(s): {names}")


class ValidationFailed(TeleVaultError):
    """User input (address or amount) was rejected."""

    def __init__(self, message: str):
        super().__init__(message, user_message=message)


class AccountMissing(TeleVaultError):
    """No account (or no binding for the requested chain) exists."""

    user_message = "No account found for this user. Please register first with /start."


class ExecutionFailed(TeleVaultError):
    """Signing or broadcasting a transaction failed."""

    user_message = "🚨 Failed to send transaction. Please try again."


class CustodyError(Exception):
    """Custody provider request failed."""
    pass


class RpcError(Exception):
    """Chain RPC request failed."""
    pass

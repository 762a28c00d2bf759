"""
Services layer for TeleVault.

This layer provides the account, balance and transaction services used
by the presentation layers (Telegram Bot, API).
"""

from televault.services.account_store import AccountStore
from televault.services.provisioning_service import AccountProvisioner
from televault.services.balance_service import BalanceAggregator, BalanceResult
from televault.services.transaction_service import TransactionExecutor

__all__ = [
    'AccountStore',
    'AccountProvisioner',
    'BalanceAggregator',
    'BalanceResult',
    'TransactionExecutor',
]

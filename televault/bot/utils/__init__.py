"""
Bot utilities.

Message formatting helpers shared by the Telegram handlers.
"""

from .formatting import format_amount, format_balances, format_wallets, format_receipt

__all__ = ["format_amount", "format_balances", "format_wallets", "format_receipt"]

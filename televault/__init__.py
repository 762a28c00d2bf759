"""
TeleVault: custodial multi-chain wallets for Telegram users.

Provides two interfaces over the same services:
- Bot: Telegram bot for registration, balances and guided transfers
- API: read-only FastAPI server for accounts and balances
"""

__version__ = "0.1.0"

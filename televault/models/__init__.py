"""
Database models for televault.

This package contains the persistent account records that bind a
Telegram user to custodial wallets on each supported chain.
"""

from .account import Account, ChainBinding

MODELS = [Account, ChainBinding]

__all__ = ["Account", "ChainBinding", "MODELS"]

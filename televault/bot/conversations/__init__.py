"""
Telegram bot conversation handlers.

This package contains multi-step conversation flows for the Telegram bot,
such as the guided transfer.
"""

from .transfer import create_transfer_conversation

__all__ = ["create_transfer_conversation"]

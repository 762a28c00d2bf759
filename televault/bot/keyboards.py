"""
Telegram keyboard layouts.
"""

from typing import Iterable

from telegram import ForceReply, InlineKeyboardButton, InlineKeyboardMarkup

from televault.core.chains import Chain, get_chain_spec

CHAIN_CALLBACK_PREFIX = "send_chain_"


def get_chain_choice_keyboard(chains: Iterable[Chain]) -> InlineKeyboardMarkup:
    """
    Get keyboard for choosing which chain to send on.

    Args:
        chains: Chains the user has wallets on

    Returns:
        Inline keyboard markup, one button per chain plus cancel
    """
    keyboard = []
    for chain in chains:
        spec = get_chain_spec(chain)
        keyboard.append([
            InlineKeyboardButton(
                f"💳 Send {spec.symbol} ({spec.name})",
                callback_data=f"{CHAIN_CALLBACK_PREFIX}{Chain(chain).value}"
            )
        ])
    keyboard.append([InlineKeyboardButton("❌ Cancel", callback_data="send_cancel")])
    return InlineKeyboardMarkup(keyboard)


def get_force_reply() -> ForceReply:
    """Ask the client to open a reply to the prompt."""
    return ForceReply(selective=True)


def parse_chain_callback(data: str) -> Chain:
    """
    Extract the chain from chain-choice callback data.

    Raises:
        ValueError: If the data is not a chain-choice callback
    """
    if not data or not data.startswith(CHAIN_CALLBACK_PREFIX):
        raise ValueError(f"Not a chain choice: {data}")
    return Chain(data[len(CHAIN_CALLBACK_PREFIX):])

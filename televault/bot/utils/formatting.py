"""
Message formatting for the Telegram bot.

Rounding happens here and only here: balances are kept unrounded by the
services and rounded to the chain's display places when rendered.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from televault.core.chains import Chain, get_chain_spec
from televault.services.balance_service import BalanceResult


def format_amount(chain: Chain, amount: Decimal) -> str:
    """
    Render an amount in the chain's display precision.

    >>> format_amount(Chain.SOLANA, Decimal("1.23456789"))
    '1.2346'
    """
    spec = get_chain_spec(chain)
    if spec.display_places is not None:
        quantum = Decimal(1).scaleb(-spec.display_places)
        amount = Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)
        return f"{amount:f}"
    return f"{Decimal(amount).normalize():f}"


def format_wallets(addresses: Dict[Chain, str]) -> str:
    lines = ["*Your Wallets*", ""]
    for chain, address in addresses.items():
        spec = get_chain_spec(chain)
        lines.append(f"👜 *{spec.name} Address:* `{address}`")
    return "\n".join(lines)


def format_balances(results: Dict[Chain, BalanceResult]) -> str:
    """One line per chain; failed chains are shown as unavailable."""
    lines = []
    for chain, result in results.items():
        spec = get_chain_spec(chain)
        if result.success:
            lines.append(f"💰 *{spec.name} Balance:* `{format_amount(chain, result.balance)} {spec.symbol}`")
        else:
            lines.append(f"⚠️ *{spec.name} Balance:* unavailable right now")
    return "\n".join(lines)


def format_receipt(chain: Chain, amount: Decimal, destination: str, tx_id: str) -> str:
    spec = get_chain_spec(chain)
    return (
        f"✅ Successfully sent `{Decimal(amount):f} {spec.symbol}` to `{destination}`.\n\n"
        f"Transaction Hash: `{tx_id}`"
    )

"""
Supported blockchains.

Chains form a closed set: each member of `Chain` has a `ChainSpec`
describing its native asset and units. Code that varies per chain
looks the chain up here instead of branching on parallel fields.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from enum import Enum
from typing import Dict, Optional


class Chain(str, Enum):
    """Chain tag as stored on chain bindings."""

    EVM = "EVM"
    SOLANA = "SOLANA"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ChainSpec:
    """Static properties of a chain's native asset."""

    chain: Chain
    symbol: str
    name: str
    decimals: int
    config_key: str
    display_places: Optional[int] = None
    """Places shown to users. None shows the full converted value."""
    max_smallest: int = 2 ** 256 - 1
    """Largest transferable amount in smallest units (uint256 on EVM, u64 on Solana)."""

    @property
    def unit(self) -> int:
        """Number of smallest units in one whole coin."""
        return 10 ** self.decimals

    @property
    def max_amount(self) -> Decimal:
        """Largest transferable amount in the human-readable unit."""
        return self.to_human(self.max_smallest)

    def to_human(self, amount_smallest: int) -> Decimal:
        """Convert smallest units (wei, lamports) to the human-readable unit."""
        return Decimal(int(amount_smallest)) / Decimal(self.unit)

    def to_smallest(self, amount: Decimal) -> int:
        """Convert a human-readable amount to smallest units, truncating dust."""
        scaled = Decimal(amount) * Decimal(self.unit)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))


CHAIN_SPECS: Dict[Chain, ChainSpec] = {
    Chain.EVM: ChainSpec(
        chain=Chain.EVM,
        symbol="ETH",
        name="Ethereum",
        decimals=18,
        config_key="evm",
    ),
    Chain.SOLANA: ChainSpec(
        chain=Chain.SOLANA,
        symbol="SOL",
        name="Solana",
        decimals=9,
        config_key="solana",
        display_places=4,
        max_smallest=2 ** 64 - 1,
    ),
}


def get_chain_spec(chain: Chain) -> ChainSpec:
    return CHAIN_SPECS[Chain(chain)]


def chain_from_config_key(key: str) -> Chain:
    """
    Resolve a configuration section key ("evm", "solana") to a Chain.

    Raises:
        ValueError: If no chain uses this key
    """
    for spec in CHAIN_SPECS.values():
        if spec.config_key == key.lower():
            return spec.chain
    raise ValueError(f"Unknown chain '{key}'. Supported: {', '.join(s.config_key for s in CHAIN_SPECS.values())}")

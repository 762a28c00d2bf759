"""
Destination address validation per chain.

EVM addresses are checked syntactically (0x + 40 hex digits, any case).
Solana addresses must decode to a public key that lies on the ed25519
curve; program-derived (off-curve) addresses are rejected because they
cannot sign and are not wallet destinations.
"""

import re

from solders.pubkey import Pubkey

from televault.core.chains import Chain, get_chain_spec
from televault.core.exceptions import ValidationFailed

EVM_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_evm_address(address: str) -> bool:
    """Return True if address is 0x followed by exactly 40 hex digits."""
    if not isinstance(address, str):
        return False
    return EVM_ADDRESS_PATTERN.match(address) is not None


def is_valid_solana_address(address: str) -> bool:
    """Return True if address is a base58 public key on the ed25519 curve."""
    if not isinstance(address, str) or not address:
        return False
    try:
        pubkey = Pubkey.from_string(address)
    except (ValueError, TypeError):
        return False
    return pubkey.is_on_curve()


_VALIDATORS = {
    Chain.EVM: is_valid_evm_address,
    Chain.SOLANA: is_valid_solana_address,
}


def is_valid_address(chain: Chain, address: str) -> bool:
    return _VALIDATORS[Chain(chain)](address)


def validate_address(chain: Chain, address: str) -> str:
    """
    Validate a destination address for a chain.

    Args:
        chain: Target chain
        address: Candidate address as typed by the user

    Returns:
        The address with surrounding whitespace removed

    Raises:
        ValidationFailed: If the address is malformed or off-curve
    """
    candidate = (address or "").strip()
    if not is_valid_address(chain, candidate):
        spec = get_chain_spec(chain)
        raise ValidationFailed(
            f"Invalid {spec.name} address. Please provide a valid address."
        )
    return candidate

"""Tests for per-chain address validation."""

import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from televault.core.address_validator import (
    is_valid_evm_address,
    is_valid_solana_address,
    validate_address,
)
from televault.core.chains import Chain
from televault.core.exceptions import ValidationFailed

SYSTEM_PROGRAM = Pubkey.from_string("11111111111111111111111111111111")


class EvmAddressTest(unittest.TestCase):
    def test_accepts_40_hex_digits_with_prefix(self):
        for address in (
            "0xABCDEF0123456789ABCDEF0123456789ABCDEF01",
            "0xabcdef0123456789abcdef0123456789abcdef01",
            "0xAb5801a7D398351b8bE11C439e05C5B3259aeC9B",
            "0x" + "0" * 40,
        ):
            self.assertTrue(is_valid_evm_address(address), address)

    def test_rejects_malformed(self):
        for address in (
            "ABCDEF0123456789ABCDEF0123456789ABCDEF01",     # missing 0x
            "0xABCDEF0123456789ABCDEF0123456789ABCDEF0",    # 39 digits
            "0xABCDEF0123456789ABCDEF0123456789ABCDEF012",  # 41 digits
            "0xGBCDEF0123456789ABCDEF0123456789ABCDEF01",   # non-hex
            "0XABCDEF0123456789ABCDEF0123456789ABCDEF01",   # uppercase prefix
            "",
            "0x",
        ):
            self.assertFalse(is_valid_evm_address(address), address)

    def test_rejects_non_strings(self):
        self.assertFalse(is_valid_evm_address(None))
        self.assertFalse(is_valid_evm_address(12345))


class SolanaAddressTest(unittest.TestCase):
    def test_accepts_wallet_pubkeys(self):
        for _ in range(5):
            self.assertTrue(is_valid_solana_address(str(Keypair().pubkey())))

    def test_rejects_off_curve_program_address(self):
        pda, _bump = Pubkey.find_program_address([b"televault"], SYSTEM_PROGRAM)
        self.assertFalse(pda.is_on_curve())
        self.assertFalse(is_valid_solana_address(str(pda)))

    def test_rejects_malformed(self):
        for address in ("", "not-base58!", "0OIl0OIl", "abc", "0xABCDEF0123456789ABCDEF0123456789ABCDEF01"):
            self.assertFalse(is_valid_solana_address(address), address)


class ValidateAddressTest(unittest.TestCase):
    def test_strips_whitespace(self):
        self.assertEqual(
            validate_address(Chain.EVM, "  0xABCDEF0123456789ABCDEF0123456789ABCDEF01\n"),
            "0xABCDEF0123456789ABCDEF0123456789ABCDEF01"
        )

    def test_off_curve_and_malformed_raise_same_error(self):
        pda, _ = Pubkey.find_program_address([b"seed"], SYSTEM_PROGRAM)
        with self.assertRaises(ValidationFailed) as off_curve:
            validate_address(Chain.SOLANA, str(pda))
        with self.assertRaises(ValidationFailed) as malformed:
            validate_address(Chain.SOLANA, "garbage")
        self.assertEqual(off_curve.exception.user_message, malformed.exception.user_message)
        self.assertIn("Solana", malformed.exception.user_message)

    def test_evm_address_is_not_a_solana_address(self):
        with self.assertRaises(ValidationFailed):
            validate_address(Chain.SOLANA, "0xABCDEF0123456789ABCDEF0123456789ABCDEF01")


if __name__ == "__main__":
    unittest.main()

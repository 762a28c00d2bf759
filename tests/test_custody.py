"""Tests for the HTTP and local custody providers."""

import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import httpx
from eth_account import Account as EthAccount
from solders.keypair import Keypair

from televault.core.address_validator import is_valid_evm_address, is_valid_solana_address
from televault.core.chains import Chain
from televault.core.custody_client import HttpCustodyProvider
from televault.core.exceptions import CustodyError
from televault.core.local_custody import LocalCustodyProvider

BASE_URL = "https://custody.test/api/v1"


def make_provider(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpCustodyProvider(BASE_URL, api_key="test-key", http_client=client)


class HttpCustodyProviderTest(unittest.TestCase):
    def test_create_chain_account(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"address": "0xabc", "key_share": "share-1"})

        provider = make_provider(handler)
        account = provider.create_chain_account("1001@test.com", Chain.EVM)

        self.assertEqual(account.address, "0xabc")
        self.assertEqual(account.key_share_handle, "share-1")
        self.assertEqual(str(requests[0].url), f"{BASE_URL}/wallets")
        self.assertEqual(requests[0].headers["X-API-Key"], "test-key")
        self.assertEqual(
            json.loads(requests[0].content),
            {"identifier": "1001@test.com", "chain": "EVM"}
        )

    def test_sign_and_broadcast_sends_amount_as_string(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"transaction_id": "5xSig"})

        provider = make_provider(handler)
        tx_id = provider.sign_and_broadcast("share-1", Chain.SOLANA, "dest", 1_250_000_000)

        self.assertEqual(tx_id, "5xSig")
        self.assertEqual(bodies[0], {
            "key_share": "share-1",
            "chain": "SOLANA",
            "to": "dest",
            "amount": "1250000000",
        })

    def test_http_error_status(self):
        provider = make_provider(lambda request: httpx.Response(500, text="internal error"))

        with self.assertRaises(CustodyError) as ctx:
            provider.create_chain_account("1001@test.com", Chain.EVM)
        self.assertIn("500", str(ctx.exception))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)
        with self.assertRaises(CustodyError):
            provider.sign_and_broadcast("share-1", Chain.EVM, "0xdest", 1)

    def test_invalid_json(self):
        provider = make_provider(lambda request: httpx.Response(200, text="not json"))

        with self.assertRaises(CustodyError):
            provider.create_chain_account("1001@test.com", Chain.EVM)

    def test_incomplete_wallet_response(self):
        provider = make_provider(lambda request: httpx.Response(200, json={"address": "0xabc"}))

        with self.assertRaises(CustodyError):
            provider.create_chain_account("1001@test.com", Chain.EVM)

    def test_missing_transaction_id(self):
        provider = make_provider(lambda request: httpx.Response(200, json={}))

        with self.assertRaises(CustodyError):
            provider.sign_and_broadcast("share-1", Chain.EVM, "0xdest", 1)

    def test_base_url_trailing_slash(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"transaction_id": "0x1"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        provider = HttpCustodyProvider(BASE_URL + "/", api_key="k", http_client=client)
        provider.sign_and_broadcast("share", Chain.EVM, "0xdest", 1)

        self.assertEqual(urls, [f"{BASE_URL}/transactions"])


class LocalCustodyProviderTest(unittest.TestCase):
    def setUp(self):
        self.provider = LocalCustodyProvider(rpc_clients={})

    def test_creates_evm_account(self):
        account = self.provider.create_chain_account("1001@test.com", Chain.EVM)

        self.assertTrue(is_valid_evm_address(account.address))
        self.assertEqual(EthAccount.from_key(account.key_share_handle).address, account.address)

    def test_creates_solana_account(self):
        account = self.provider.create_chain_account("1001@test.com", Chain.SOLANA)

        self.assertTrue(is_valid_solana_address(account.address))
        restored = Keypair.from_base58_string(account.key_share_handle)
        self.assertEqual(str(restored.pubkey()), account.address)

    def test_accounts_are_distinct(self):
        first = self.provider.create_chain_account("1001@test.com", Chain.SOLANA)
        second = self.provider.create_chain_account("1002@test.com", Chain.SOLANA)
        self.assertNotEqual(first.address, second.address)

    def test_send_without_rpc_client(self):
        with self.assertRaises(CustodyError):
            self.provider.sign_and_broadcast("share", Chain.EVM, "0xdest", 1)


if __name__ == "__main__":
    unittest.main()

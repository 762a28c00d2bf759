"""Fake collaborators shared by the test modules."""

from typing import Dict, List, Optional

from peewee import SqliteDatabase

from televault.core.chains import Chain
from televault.core.custody import ChainAccount, CustodyProvider
from televault.core.exceptions import CustodyError
from televault.core.models import db
from televault.models import MODELS

EVM_ADDRESS = "0xABCDEF0123456789ABCDEF0123456789ABCDEF01"
SOLANA_ADDRESS = "vines1vzrYbzLMRdu58ou5XTby4qAqVRLmqo36NKPTg"


def bind_test_database() -> SqliteDatabase:
    """Bind the model proxy to a fresh in-memory SQLite database."""
    test_db = SqliteDatabase(':memory:', pragmas={'foreign_keys': 1})
    db.initialize(test_db)
    test_db.connect()
    test_db.create_tables(MODELS)
    return test_db


def release_test_database(test_db: SqliteDatabase) -> None:
    test_db.drop_tables(MODELS)
    test_db.close()


class FakeCustody(CustodyProvider):
    def __init__(self, fail_on=(), tx_id="0xdeadbeef", fail_send=False):
        self.fail_on = set(fail_on)
        self.tx_id = tx_id
        self.fail_send = fail_send
        self.created: List[tuple] = []
        self.sent: List[tuple] = []

    def create_chain_account(self, identifier, chain):
        self.created.append((identifier, chain))
        if chain in self.fail_on:
            raise CustodyError(f"{chain} wallet creation failed")
        address = EVM_ADDRESS if chain is Chain.EVM else SOLANA_ADDRESS
        return ChainAccount(address=address, key_share_handle=f"share-{chain.value}-{identifier}")

    def sign_and_broadcast(self, key_share_handle, chain, destination, amount_smallest):
        self.sent.append((key_share_handle, chain, destination, amount_smallest))
        if self.fail_send:
            raise CustodyError("insufficient funds for gas * price + value")
        return self.tx_id


class FakeRpc:
    def __init__(self, balance: int = 0, error: Optional[Exception] = None):
        self.balance = balance
        self.error = error
        self.calls: List[str] = []

    def get_balance(self, address):
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.balance


class FakeBinding:
    def __init__(self, chain: Chain, address: str, key_share_handle: str = "share"):
        self.chain = chain.value
        self.address = address
        self.key_share_handle = key_share_handle


class FakeAccount:
    """Stands in for models.Account where no database is needed."""

    def __init__(self, chat_identity="1001", display_name="alice", bindings: Optional[Dict[Chain, FakeBinding]] = None):
        self.chat_identity = chat_identity
        self.display_name = display_name
        self.created_at = None
        if bindings is None:
            bindings = {
                Chain.EVM: FakeBinding(Chain.EVM, EVM_ADDRESS, "evm-share"),
                Chain.SOLANA: FakeBinding(Chain.SOLANA, SOLANA_ADDRESS, "sol-share"),
            }
        self._bindings = bindings

    @property
    def chains(self):
        return dict(self._bindings)

    def binding(self, chain):
        return self._bindings.get(Chain(chain))

    def public_addresses(self):
        return {chain: b.address for chain, b in self._bindings.items()}


class FakeStore:
    def __init__(self, accounts=None):
        self.accounts = {a.chat_identity: a for a in (accounts or [])}
        self.lookups: List[str] = []

    def find_by_identity(self, chat_identity):
        self.lookups.append(chat_identity)
        return self.accounts.get(str(chat_identity))


class FakeExecutor:
    def __init__(self, tx_id="0xabc123", error: Optional[Exception] = None):
        self.tx_id = tx_id
        self.error = error
        self.calls: List[tuple] = []

    def execute(self, account, chain, destination, amount):
        self.calls.append((account, chain, destination, amount))
        if self.error is not None:
            raise self.error
        return self.tx_id

"""
Local custody provider for development and testing networks.

Keys are generated in-process and the key-share handle is the full
serialized secret, so this provider offers no key splitting. Use the
HTTP custody provider in production.
"""

import logging
from typing import Dict

from eth_account import Account as EthAccount
from web3 import Web3
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from televault.core.chains import Chain
from televault.core.custody import ChainAccount, CustodyProvider
from televault.core.exceptions import CustodyError
from televault.core.rpc import ChainRpcClient, EvmRpcClient, SolanaRpcClient

logger = logging.getLogger(__name__)

# Plain value transfer
EVM_TRANSFER_GAS = 21000


class LocalCustodyProvider(CustodyProvider):
    """Generates keys locally and signs through the chain RPC clients."""

    def __init__(self, rpc_clients: Dict[Chain, ChainRpcClient]):
        """
        Args:
            rpc_clients: RPC client per chain, used for broadcasting
        """
        self.rpc_clients = rpc_clients

    def create_chain_account(self, identifier: str, chain: Chain) -> ChainAccount:
        chain = Chain(chain)
        try:
            if chain is Chain.EVM:
                account = EthAccount.create()
                created = ChainAccount(address=account.address, key_share_handle=Web3.to_hex(account.key))
            elif chain is Chain.SOLANA:
                keypair = Keypair()
                created = ChainAccount(address=str(keypair.pubkey()), key_share_handle=str(keypair))
            else:
                raise CustodyError(f"Unsupported chain: {chain}")
        except CustodyError:
            raise
        except Exception as e:
            raise CustodyError(f"Failed to generate {chain} key for {identifier}: {e}") from e

        logger.info(
            "Generated local wallet",
            extra={"identifier": identifier, "chain": str(chain), "address": created.address}
        )
        return created

    def sign_and_broadcast(
        self,
        key_share_handle: str,
        chain: Chain,
        destination: str,
        amount_smallest: int
    ) -> str:
        chain = Chain(chain)
        rpc = self.rpc_clients.get(chain)
        if rpc is None:
            raise CustodyError(f"No RPC client configured for {chain}")

        try:
            if chain is Chain.EVM:
                return self._send_evm(rpc, key_share_handle, destination, amount_smallest)
            if chain is Chain.SOLANA:
                return self._send_solana(rpc, key_share_handle, destination, amount_smallest)
        except CustodyError:
            raise
        except Exception as e:
            raise CustodyError(f"{chain} transfer failed: {e}") from e

        raise CustodyError(f"Unsupported chain: {chain}")

    @staticmethod
    def _send_evm(rpc: EvmRpcClient, private_key: str, destination: str, amount_wei: int) -> str:
        w3 = rpc.web3
        sender = EthAccount.from_key(private_key).address

        txn = {
            'to': Web3.to_checksum_address(destination),
            'value': amount_wei,
            'nonce': w3.eth.get_transaction_count(sender),
            'gas': EVM_TRANSFER_GAS,
            'gasPrice': w3.eth.gas_price,
            'chainId': rpc.chain_id,
        }

        signed_txn = w3.eth.account.sign_transaction(txn, private_key=private_key)
        tx_hash = w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        return Web3.to_hex(tx_hash)

    @staticmethod
    def _send_solana(rpc: SolanaRpcClient, secret: str, destination: str, lamports: int) -> str:
        keypair = Keypair.from_base58_string(secret)
        instruction = transfer(TransferParams(
            from_pubkey=keypair.pubkey(),
            to_pubkey=Pubkey.from_string(destination),
            lamports=lamports,
        ))

        blockhash = rpc.client.get_latest_blockhash().value.blockhash
        message = MessageV0.try_compile(keypair.pubkey(), [instruction], [], blockhash)
        txn = VersionedTransaction(message, [keypair])

        response = rpc.client.send_transaction(txn)
        return str(response.value)

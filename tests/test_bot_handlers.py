"""Tests for the Telegram handlers, with mocked updates."""

import sys
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from telegram.ext import ConversationHandler

from televault.bot.conversations.transfer import (
    AWAITING_AMOUNT,
    chain_choice_callback,
    receive_transfer_input,
)
from televault.bot.handlers.wallet_handler import WELCOME_TEXT, start_command
from televault.bot.utils.formatting import format_receipt
from televault.core.chains import Chain
from televault.core.exceptions import ExecutionFailed
from televault.core.transfer_session import TransferStateMachine
from televault.models.account import Account, ChainBinding
from televault.services.account_store import AccountStore
from televault.services.balance_service import BalanceAggregator
from televault.services.provisioning_service import AccountProvisioner

from fakes import (
    FakeAccount,
    FakeCustody,
    FakeExecutor,
    FakeRpc,
    FakeStore,
    bind_test_database,
    release_test_database,
)

DESTINATION = "0xABCDEF0123456789ABCDEF0123456789ABCDEF01"


def make_update(text=None, user_id=1001, username="alice"):
    """Build an Update stand-in whose replies return an editable message."""
    progress = MagicMock()
    progress.edit_text = AsyncMock()

    update = MagicMock()
    update.effective_user.id = user_id
    update.effective_user.username = username
    update.message.text = text
    update.message.reply_text = AsyncMock(return_value=progress)
    update.effective_message = update.message
    return update, progress


def make_context(**bot_data):
    context = MagicMock()
    context.bot_data = bot_data
    return context


def replies(update):
    return [c.args[0] for c in update.message.reply_text.call_args_list]


class ReceiveTransferInputTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.account = FakeAccount()
        self.executor = FakeExecutor(tx_id="0xabc123")
        self.machine = TransferStateMachine(FakeStore([self.account]), self.executor)
        self.context = make_context(transfer_machine=self.machine)

    async def test_address_prompts_for_amount(self):
        self.machine.start("1001", Chain.EVM)
        update, _ = make_update(DESTINATION)

        state = await receive_transfer_input(update, self.context)

        self.assertEqual(state, AWAITING_AMOUNT)
        self.assertEqual(replies(update), ["How much ETH would you like to send?"])

    async def test_successful_transfer_edits_progress_with_receipt(self):
        self.machine.start("1001", Chain.EVM)
        self.machine.resume("1001", DESTINATION)
        update, progress = make_update("0.05")

        state = await receive_transfer_input(update, self.context)

        self.assertEqual(state, ConversationHandler.END)
        self.assertEqual(replies(update), [f"♻️ Sending 0.05 ETH to {DESTINATION}..."])
        self.assertEqual(len(self.executor.calls), 1)
        progress.edit_text.assert_awaited_once_with(
            format_receipt(Chain.EVM, Decimal("0.05"), DESTINATION, "0xabc123"),
            parse_mode="Markdown"
        )
        self.assertIsNone(self.machine.get_session("1001"))

    async def test_failed_transfer_edits_progress_with_error(self):
        self.executor.error = ExecutionFailed("EVM transfer failed: nonce too low")
        self.machine.start("1001", Chain.EVM)
        self.machine.resume("1001", DESTINATION)
        update, progress = make_update("0.05")

        state = await receive_transfer_input(update, self.context)

        self.assertEqual(state, ConversationHandler.END)
        progress.edit_text.assert_awaited_once_with(
            "🚨 Failed to send transaction. Please try again."
        )

    async def test_invalid_amount_replies_and_ends(self):
        self.machine.start("1001", Chain.EVM)
        self.machine.resume("1001", DESTINATION)
        update, progress = make_update("1e999999")

        state = await receive_transfer_input(update, self.context)

        self.assertEqual(state, ConversationHandler.END)
        self.assertEqual(
            replies(update),
            ["🚨 Invalid amount. Please provide a valid amount of ETH to send."]
        )
        progress.edit_text.assert_not_awaited()
        self.assertEqual(self.executor.calls, [])

    async def test_unexpected_error_cancels_session(self):
        self.machine.start("1001", Chain.EVM)
        update, _ = make_update(DESTINATION)

        with patch.object(self.machine, "resume", side_effect=RuntimeError("boom")):
            state = await receive_transfer_input(update, self.context)

        self.assertEqual(state, ConversationHandler.END)
        self.assertIsNone(self.machine.get_session("1001"))
        self.assertEqual(replies(update), ["🚨 Failed to send transaction. Please try again."])

    async def test_no_session(self):
        update, _ = make_update(DESTINATION)

        state = await receive_transfer_input(update, self.context)

        self.assertEqual(state, ConversationHandler.END)
        self.assertEqual(replies(update), ["No transfer in progress. Use /send to start one."])


class ChainChoiceCallbackTest(unittest.IsolatedAsyncioTestCase):
    async def test_bad_callback_reports_fixed_message(self):
        machine = TransferStateMachine(FakeStore([FakeAccount()]), FakeExecutor())
        update = MagicMock()
        update.callback_query.data = "send_chain_BITCOIN"
        update.callback_query.answer = AsyncMock()
        update.callback_query.edit_message_text = AsyncMock()

        state = await chain_choice_callback(update, make_context(transfer_machine=machine))

        self.assertEqual(state, ConversationHandler.END)
        update.callback_query.edit_message_text.assert_awaited_once_with(
            "An error occurred. Please try again with /send."
        )


class StartCommandTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.test_db = bind_test_database()
        self.store = AccountStore()
        self.custody = FakeCustody()
        self.aggregator = BalanceAggregator({
            Chain.EVM: FakeRpc(balance=0),
            Chain.SOLANA: FakeRpc(balance=0),
        })

    def tearDown(self):
        release_test_database(self.test_db)

    def make_context(self, store=None):
        return make_context(
            account_store=store or self.store,
            provisioner=AccountProvisioner(self.store, self.custody, namespace="test.com"),
            balance_aggregator=self.aggregator,
        )

    async def test_new_user_gets_wallets(self):
        update, progress = make_update("/start")

        await start_command(update, self.make_context())

        self.assertEqual(replies(update)[0], WELCOME_TEXT)
        progress.edit_text.assert_awaited_once_with(
            "*🎉 Your Ethereum and Solana wallets have been created!*",
            parse_mode="Markdown"
        )
        account = self.store.find_by_identity("1001")
        self.assertEqual(account.display_name, "alice")
        self.assertEqual(set(account.chains), {Chain.EVM, Chain.SOLANA})
        self.assertTrue(any("Ethereum Address" in text for text in replies(update)))

    async def test_registered_user_is_not_provisioned_again(self):
        update, _ = make_update("/start")
        await start_command(update, self.make_context())
        custody_calls = len(self.custody.created)

        update, progress = make_update("/start")
        await start_command(update, self.make_context())

        self.assertIn("🚨 Looks like you are already registered!", replies(update))
        progress.edit_text.assert_not_awaited()
        self.assertEqual(len(self.custody.created), custody_calls)
        self.assertEqual(Account.select().count(), 1)

    async def test_provisioning_failure_is_reported(self):
        self.custody.fail_on = {Chain.SOLANA}
        update, progress = make_update("/start")

        await start_command(update, self.make_context())

        progress.edit_text.assert_awaited_once_with("😓 Failed to create an account. Please try again.")
        self.assertEqual(Account.select().count(), 0)
        self.assertEqual(ChainBinding.select().count(), 0)

    async def test_unexpected_error_is_reported_not_raised(self):
        store = MagicMock()
        store.find_by_identity.side_effect = RuntimeError("database is locked")
        update, _ = make_update("/start")

        await start_command(update, self.make_context(store=store))

        self.assertEqual(
            replies(update)[-1],
            "An error occurred while creating your account. Please try again."
        )


if __name__ == "__main__":
    unittest.main()

"""
Guided transfer conversation handler for Telegram bot.

Thin adapter between python-telegram-bot's ConversationHandler and
TransferStateMachine:
1. /send (choose chain), /sendeth or /sendsol starts a session
2. Every text message is fed to the machine, which validates the
   destination address, then the amount
3. On a valid amount a progress message is posted, the transfer is
   executed, and the progress message is edited with the outcome
"""

import logging
from typing import Optional

from telegram import Update
from telegram.ext import (
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    TypeHandler,
    filters
)

from televault.bot.keyboards import (
    get_chain_choice_keyboard,
    get_force_reply,
    parse_chain_callback,
)
from televault.bot.utils.formatting import format_receipt
from televault.core.chains import Chain
from televault.core.transfer_session import StepResult, TransferState, TransferStateMachine

logger = logging.getLogger(__name__)

# Conversation states
CHOOSE_CHAIN = 0
AWAITING_ADDRESS = 1
AWAITING_AMOUNT = 2

_CONVERSATION_STATES = {
    TransferState.AWAITING_ADDRESS: AWAITING_ADDRESS,
    TransferState.AWAITING_AMOUNT: AWAITING_AMOUNT,
}


def _machine(context: ContextTypes.DEFAULT_TYPE) -> Optional[TransferStateMachine]:
    return context.bot_data.get('transfer_machine')


def _chat_identity(update: Update) -> Optional[str]:
    user = update.effective_user
    return str(user.id) if user else None


def _next_state(result: StepResult) -> int:
    return _CONVERSATION_STATES.get(result.state, ConversationHandler.END)


async def send_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """
    Handle /send command - let the user pick a chain.

    Users bound to a single chain skip the choice.

    Returns:
        ConversationHandler state (CHOOSE_CHAIN, AWAITING_ADDRESS) or END.
    """
    machine = _machine(context)
    store = context.bot_data.get('account_store')

    if not machine or not store:
        await update.message.reply_text(
            "Service temporarily unavailable. Please try again later."
        )
        return ConversationHandler.END

    chat_identity = _chat_identity(update)
    if not chat_identity:
        await update.message.reply_text("An error occurred. Please try again.")
        return ConversationHandler.END

    try:
        account = store.find_by_identity(chat_identity)
        if not account:
            await update.message.reply_text(
                "No account found for this user. Please register first with /start."
            )
            return ConversationHandler.END

        chains = list(account.chains)
        if len(chains) == 1:
            return await _begin(update, chat_identity, chains[0], machine)

        await update.message.reply_text(
            "💳 Which asset would you like to send?",
            reply_markup=get_chain_choice_keyboard(chains)
        )
        return CHOOSE_CHAIN

    except Exception as e:
        logger.error(f"Error in send_command: {e}", exc_info=True)
        await update.message.reply_text("An error occurred. Please try again later.")
        return ConversationHandler.END


async def send_eth_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /sendeth command - guided ETH transfer."""
    return await _begin_from_command(update, context, Chain.EVM)


async def send_sol_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /sendsol command - guided SOL transfer."""
    return await _begin_from_command(update, context, Chain.SOLANA)


async def _begin_from_command(update: Update, context: ContextTypes.DEFAULT_TYPE, chain: Chain) -> int:
    machine = _machine(context)
    if not machine:
        await update.message.reply_text(
            "Service temporarily unavailable. Please try again later."
        )
        return ConversationHandler.END

    chat_identity = _chat_identity(update)
    if not chat_identity:
        await update.message.reply_text("An error occurred. Please try again.")
        return ConversationHandler.END

    try:
        return await _begin(update, chat_identity, chain, machine)
    except Exception as e:
        logger.error(f"Error starting {chain} transfer: {e}", exc_info=True)
        await update.message.reply_text("An error occurred. Please try again later.")
        return ConversationHandler.END


async def _begin(update: Update, chat_identity: str, chain: Chain, machine: TransferStateMachine) -> int:
    result = machine.start(chat_identity, chain)
    reply_markup = get_force_reply() if result.state is TransferState.AWAITING_ADDRESS else None
    await update.effective_message.reply_text(result.message, reply_markup=reply_markup)
    return _next_state(result)


async def chain_choice_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """
    Handle the chain choice.

    Callback data: "send_chain_<CHAIN>" or "send_cancel"

    Returns:
        ConversationHandler state (AWAITING_ADDRESS or END).
    """
    query = update.callback_query
    await query.answer()

    machine = _machine(context)
    if not machine:
        await query.edit_message_text(
            "Service temporarily unavailable. Please try again later."
        )
        return ConversationHandler.END

    if query.data == "send_cancel":
        await query.edit_message_text("Transfer cancelled.")
        return ConversationHandler.END

    try:
        chain = parse_chain_callback(query.data)
        result = machine.start(str(query.from_user.id), chain)

        await query.edit_message_text(f"Sending on {chain.value}.")
        reply_markup = get_force_reply() if result.state is TransferState.AWAITING_ADDRESS else None
        await query.message.reply_text(result.message, reply_markup=reply_markup)
        return _next_state(result)

    except Exception as e:
        logger.error(f"Error in chain_choice_callback: {e}", exc_info=True)
        await query.edit_message_text("An error occurred. Please try again with /send.")
        return ConversationHandler.END


async def receive_transfer_input(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """
    Feed a text message to the user's transfer session.

    Returns:
        ConversationHandler state (AWAITING_AMOUNT or END).
    """
    machine = _machine(context)
    if not machine:
        await update.message.reply_text(
            "Service temporarily unavailable. Please try again later."
        )
        return ConversationHandler.END

    chat_identity = _chat_identity(update)

    try:
        result = machine.resume(chat_identity, update.message.text)
        if result is None:
            await update.message.reply_text(
                "No transfer in progress. Use /send to start one."
            )
            return ConversationHandler.END

        if result.state is TransferState.EXECUTING:
            progress = await update.message.reply_text(result.message)
            final = machine.execute(chat_identity)
            if final is None:
                await progress.edit_text("🚨 Failed to send transaction. Please try again.")
            elif final.state is TransferState.COMPLETED:
                session = final.session
                await progress.edit_text(
                    format_receipt(session.chain, session.amount, session.destination_address, final.transaction_id),
                    parse_mode="Markdown"
                )
            else:
                await progress.edit_text(final.message)
            return ConversationHandler.END

        reply_markup = get_force_reply() if result.state is TransferState.AWAITING_AMOUNT else None
        await update.message.reply_text(result.message, reply_markup=reply_markup)
        return _next_state(result)

    except Exception as e:
        logger.error(f"Error handling transfer input: {e}", exc_info=True)
        machine.cancel(chat_identity)
        await update.message.reply_text(
            "🚨 Failed to send transaction. Please try again."
        )
        return ConversationHandler.END


async def cancel_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """
    Handle /cancel command during a transfer.

    Returns:
        ConversationHandler.END
    """
    machine = _machine(context)
    if machine:
        machine.cancel(_chat_identity(update))

    await update.message.reply_text(
        "Transfer cancelled.\n\n"
        "Use /send to start again."
    )
    return ConversationHandler.END


async def conversation_timeout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Drop the session when the transport expires the conversation."""
    machine = _machine(context)
    chat_identity = _chat_identity(update)
    if machine and chat_identity and machine.cancel(chat_identity):
        logger.info(f"Transfer conversation timed out for user {chat_identity}")


# ConversationHandler configuration
def create_transfer_conversation(conversation_timeout_seconds: Optional[float] = None) -> ConversationHandler:
    """
    Create and configure the guided transfer conversation handler.

    Args:
        conversation_timeout_seconds: Idle expiry, None for no expiry.

    Returns:
        ConversationHandler for guided transfers.
    """
    text_input = MessageHandler(filters.TEXT & ~filters.COMMAND, receive_transfer_input)

    return ConversationHandler(
        entry_points=[
            CommandHandler("send", send_command),
            CommandHandler("sendeth", send_eth_command),
            CommandHandler("sendsol", send_sol_command),
        ],
        states={
            CHOOSE_CHAIN: [
                CallbackQueryHandler(chain_choice_callback, pattern="^send_(chain_[A-Z]+|cancel)$")
            ],
            AWAITING_ADDRESS: [text_input],
            AWAITING_AMOUNT: [text_input],
            ConversationHandler.TIMEOUT: [TypeHandler(Update, conversation_timeout)],
        },
        fallbacks=[CommandHandler("cancel", cancel_conversation)],
        conversation_timeout=conversation_timeout_seconds,
        allow_reentry=True
    )

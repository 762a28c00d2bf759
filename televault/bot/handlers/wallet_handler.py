"""
Account handlers for Telegram bot.

Handles account-related commands:
- /start: Register the user and create wallets on every chain
- /wallet: Display wallet addresses and balances
- /fund: Display deposit QR codes
"""

import logging
import qrcode
from io import BytesIO
from telegram import LinkPreviewOptions, Update
from telegram.ext import ContextTypes

from televault.core.chains import get_chain_spec
from televault.core.exceptions import TeleVaultError
from televault.bot.utils.formatting import format_balances, format_wallets

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Welcome! This bot securely generates, stores, and manages "
    "your Ethereum and Solana wallets 💫"
)


def _chat_identity(update: Update):
    user = update.effective_user
    return str(user.id) if user else None


async def send_wallet_overview(update: Update, context: ContextTypes.DEFAULT_TYPE, account) -> None:
    """
    Reply with the account's addresses, then its balances.

    Balances are queried per chain; a failing chain does not hide the others.
    """
    await update.message.reply_text(
        format_wallets(account.public_addresses()),
        parse_mode="Markdown",
        link_preview_options=LinkPreviewOptions(is_disabled=True)
    )

    aggregator = context.bot_data.get('balance_aggregator')
    if not aggregator:
        return

    results = aggregator.get_balances(account)
    if results:
        await update.message.reply_text(format_balances(results), parse_mode="Markdown")


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /start command - register the user.

    Existing users get their wallets re-displayed. New users get one
    wallet per supported chain, created all at once or not at all.

    Args:
        update: Telegram update containing command.
        context: Bot context with bot_data (services).

    Returns:
        None
    """
    provisioner = context.bot_data.get('provisioner')
    store = context.bot_data.get('account_store')

    if not provisioner or not store:
        await update.message.reply_text(
            "⚠️ Service temporarily unavailable. Try again later."
        )
        return

    await update.message.reply_text(WELCOME_TEXT)

    chat_identity = _chat_identity(update)
    user = update.effective_user
    display_name = (user.username if user and user.username else None) or chat_identity

    try:
        existing = store.find_by_identity(chat_identity) if chat_identity else None
        if existing:
            await update.message.reply_text("🚨 Looks like you are already registered!")
            await send_wallet_overview(update, context, existing)
            return

        progress = await update.message.reply_text(
            "♻️ Generating your wallets...(this may take a few seconds)"
        )

        try:
            account, created = provisioner.provision_with_status(chat_identity, display_name)
        except TeleVaultError as e:
            logger.warning(f"Provisioning failed for user {chat_identity}: {e}")
            await progress.edit_text(e.user_message)
            return

        if created:
            await progress.edit_text(
                "*🎉 Your Ethereum and Solana wallets have been created!*",
                parse_mode="Markdown"
            )
        else:
            await progress.edit_text("🚨 Looks like you are already registered!")

        await send_wallet_overview(update, context, account)

    except TeleVaultError as e:
        await update.message.reply_text(e.user_message)

    except Exception as e:
        logger.error(f"Error in start_command: {e}", exc_info=True)
        await update.message.reply_text(
            "An error occurred while creating your account. Please try again."
        )


async def wallet_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /wallet command - display addresses and balances.

    Args:
        update: Telegram update containing command.
        context: Bot context.

    Returns:
        None
    """
    store = context.bot_data.get('account_store')

    if not store:
        await update.message.reply_text(
            "⚠️ Service temporarily unavailable. Try again later."
        )
        return

    chat_identity = _chat_identity(update)
    if not chat_identity:
        await update.message.reply_text("An error occurred. Please try again.")
        return

    try:
        account = store.find_by_identity(chat_identity)
        if not account:
            await update.message.reply_text(
                "No account found for this user. Please register with /start first."
            )
            return

        await send_wallet_overview(update, context, account)

    except Exception as e:
        logger.error(f"Error in wallet_command: {e}", exc_info=True)
        await update.message.reply_text(
            "An error occurred while fetching your wallet balances."
        )


async def fund_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /fund command - display deposit QR codes.

    Sends one QR code per chain with the deposit address.

    Args:
        update: Telegram update containing command.
        context: Bot context.

    Returns:
        None
    """
    store = context.bot_data.get('account_store')

    if not store:
        await update.message.reply_text(
            "⚠️ Service temporarily unavailable. Try again later."
        )
        return

    chat_identity = _chat_identity(update)

    try:
        account = store.find_by_identity(chat_identity) if chat_identity else None
        if not account:
            await update.message.reply_text(
                "No account found for this user. Please register with /start first."
            )
            return

        for chain, address in account.public_addresses().items():
            spec = get_chain_spec(chain)

            qr = qrcode.make(address)
            buffer = BytesIO()
            qr.save(buffer, format='PNG')
            buffer.seek(0)

            await update.message.reply_photo(
                photo=buffer,
                caption=f"💰 *Fund Your {spec.name} Wallet*\n\n"
                        f"Send {spec.symbol} to:\n"
                        f"`{address}`\n\n"
                        f"⚠️ Only send {spec.symbol} on the {spec.name} network to this address.",
                parse_mode="Markdown"
            )

    except Exception as e:
        logger.error(f"Error in fund_command: {e}", exc_info=True)
        await update.message.reply_text(
            "❌ An error occurred generating QR code. Please try again later."
        )

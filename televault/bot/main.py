"""
Telegram Bot application entry point.

Run with: python -m televault.bot.main
"""

import logging
from telegram import BotCommand, Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes
)

from televault.core.config_loader import load_config, load_secret
from televault.core.client_factory import ClientFactory
from televault.core.logger import setup_logger_from_config
from televault.core.models import init_database
from televault.core.transfer_session import TransferStateMachine
from televault.services.account_store import AccountStore
from televault.services.provisioning_service import AccountProvisioner
from televault.services.balance_service import BalanceAggregator
from televault.services.transaction_service import TransactionExecutor
from televault.bot.conversations.transfer import cancel_conversation, create_transfer_conversation
from televault.bot.handlers.wallet_handler import (
    start_command,
    wallet_command,
    fund_command
)

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand("start", "Start the bot and generate your wallets 🏦"),
    BotCommand("wallet", "Fetch your wallet details 🤑"),
    BotCommand("fund", "Show deposit addresses as QR codes"),
    BotCommand("send", "Send ETH or SOL to any other wallet 💳"),
    BotCommand("cancel", "Cancel the transfer in progress"),
    BotCommand("help", "Show available commands"),
]


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /help command.

    Args:
        update: Telegram update
        context: Bot context
    """
    help_text = (
        "ℹ️ *Help*\n\n"
        "*Wallet Commands:*\n"
        "/start - Register and generate your wallets\n"
        "/wallet - View addresses and balances\n"
        "/fund - Get deposit QR codes\n\n"
        "*Transfer Commands:*\n"
        "/send - Send ETH or SOL\n"
        "/sendeth - Send ETH\n"
        "/sendsol - Send SOL\n"
        "/cancel - Cancel the transfer in progress\n\n"
        "*Other Commands:*\n"
        "/help - Show this help message\n"
    )
    await update.message.reply_text(help_text, parse_mode="Markdown")


async def _register_commands(application: Application) -> None:
    await application.bot.set_my_commands(BOT_COMMANDS)


def build_services(client_factory: ClientFactory) -> dict:
    """
    Wire services from the configured clients.

    Returns:
        Mapping of bot_data key -> service
    """
    store = AccountStore()
    custody = client_factory.get_custody_provider()
    executor = TransactionExecutor(custody)

    return {
        'account_store': store,
        'provisioner': AccountProvisioner(
            store=store,
            custody=custody,
            namespace=client_factory.namespace,
            chains=client_factory.supported_chains
        ),
        'balance_aggregator': BalanceAggregator(client_factory.get_rpc_clients()),
        'transfer_machine': TransferStateMachine(store=store, executor=executor),
    }


def main():
    """Run the Telegram bot."""
    client_factory = None
    try:
        config = load_config()
        setup_logger_from_config(config)

        bot_token = load_secret(config['telegram']['token_env'], "Telegram bot token")

        init_database(config['database']['url'])

        client_factory = ClientFactory(config)

        application = (
            Application.builder()
            .token(bot_token)
            .post_init(_register_commands)
            .build()
        )

        application.bot_data.update(build_services(client_factory))

        # Conversation handlers first for priority
        application.add_handler(create_transfer_conversation(
            config['telegram'].get('conversation_timeout')
        ))

        application.add_handler(CommandHandler("start", start_command))
        application.add_handler(CommandHandler("wallet", wallet_command))
        application.add_handler(CommandHandler("fund", fund_command))
        application.add_handler(CommandHandler("help", help_command))
        application.add_handler(CommandHandler("cancel", cancel_conversation))

        logger.info("Starting Telegram bot...")
        application.run_polling(allowed_updates=Update.ALL_TYPES)

    except Exception as e:
        logger.error(f"Failed to start Telegram bot: {e}", exc_info=True)
        raise

    finally:
        if client_factory is not None:
            client_factory.close()


if __name__ == "__main__":
    main()

"""
FastAPI dependency injection.

Provides shared dependencies for API routes.
"""

from typing import Optional
import logging

from televault.core.config_loader import load_config
from televault.core.client_factory import ClientFactory
from televault.core.logger import setup_logger_from_config
from televault.core.models import init_database
from televault.services.account_store import AccountStore
from televault.services.balance_service import BalanceAggregator

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
_client_factory: Optional[ClientFactory] = None
_account_store: Optional[AccountStore] = None
_balance_aggregator: Optional[BalanceAggregator] = None


def initialize_services():
    """
    Initialize all services on application startup.

    This should be called once when the FastAPI app starts.
    """
    global _client_factory, _account_store, _balance_aggregator

    config = load_config()
    setup_logger_from_config(config)
    logger.info("Configuration loaded")

    init_database(config['database']['url'])

    _client_factory = ClientFactory(config)
    logger.info("ClientFactory initialized")

    _account_store = AccountStore()
    _balance_aggregator = BalanceAggregator(_client_factory.get_rpc_clients())

    logger.info("All services initialized successfully")


def get_client_factory() -> ClientFactory:
    """Get client factory instance."""
    if _client_factory is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _client_factory


def get_account_store() -> AccountStore:
    """Get account store instance."""
    if _account_store is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _account_store


def get_balance_aggregator() -> BalanceAggregator:
    """Get balance aggregator instance."""
    if _balance_aggregator is None:
        raise RuntimeError("Services not initialized. Call initialize_services() first.")
    return _balance_aggregator

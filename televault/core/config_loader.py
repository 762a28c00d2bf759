"""Configuration loading utilities."""

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

from televault.core.chains import Chain, chain_from_config_key

logger = logging.getLogger(__name__)

CUSTODY_PROVIDERS = ('http', 'local')
SOLANA_COMMITMENTS = ('processed', 'confirmed', 'finalized')


def load_config(path: str = "config/config.yaml") -> dict:
    """
    Load YAML configuration file from specified path and return as dictionary.

    Args:
        path: Configuration file path (default: config/config.yaml)

    Returns:
        Validated configuration dictionary with defaults applied

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        ValueError: If configuration file is empty or invalid
    """
    # __file__ is televault/core/config_loader.py, project root is 3 levels up
    root_dir = Path(__file__).parent.parent.parent
    env_path = root_dir / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded .env file: {env_path}")
    else:
        logger.info("Note: .env file not found, will use system environment variables")

    config_path = Path(path)

    # If path is not absolute, try to find from project root
    if not config_path.is_absolute():
        config_path = root_dir / path

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file does not exist: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if not config:
        raise ValueError(f"Configuration file is empty or has invalid format: {path}")

    return validate_config(config)


def validate_config(config: dict) -> dict:
    """
    Validate every section and fill in defaults.

    Args:
        config: Raw configuration dictionary

    Returns:
        The same dictionary, validated

    Raises:
        ValueError: Configuration validation failed
    """
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a mapping")

    config['telegram'] = _validate_telegram(config.get('telegram') or {})
    config['database'] = _validate_database(config.get('database') or {})
    config['custody'] = _validate_custody(config.get('custody'))
    config['chains'] = _validate_chains(config.get('chains'))
    config.setdefault('logging', {})
    return config


def _validate_telegram(telegram: dict) -> dict:
    telegram.setdefault('token_env', 'TELEGRAM_BOT_TOKEN')
    timeout = telegram.setdefault('conversation_timeout', None)
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ValueError(
            f"telegram.conversation_timeout must be a positive number of seconds or null, current value: {timeout}"
        )
    return telegram


def _validate_database(database: dict) -> dict:
    # Environment variable wins over the file
    env_url = os.environ.get('DATABASE_URL')
    if env_url:
        database['url'] = env_url
    database.setdefault('url', 'sqlite:///televault.db')
    return database


def _validate_custody(custody) -> dict:
    """
    Validate custody provider configuration.

    Raises:
        ValueError: Configuration validation failed
    """
    if not isinstance(custody, dict):
        raise ValueError("Missing 'custody' configuration section")

    provider = custody.get('provider', 'http')
    if provider not in CUSTODY_PROVIDERS:
        raise ValueError(
            f"custody.provider must be one of {', '.join(CUSTODY_PROVIDERS)}, current value: {provider}"
        )
    custody['provider'] = provider

    namespace = custody.get('namespace')
    if not namespace or not isinstance(namespace, str):
        raise ValueError("custody.namespace must be a non-empty string")

    if provider == 'http':
        if not custody.get('base_url'):
            raise ValueError("custody.base_url is required for the http custody provider")
        custody.setdefault('api_key_env', 'CUSTODY_API_KEY')
        custody.setdefault('timeout', 30)

    return custody


def _validate_chains(chains) -> dict:
    """
    Validate per-chain RPC configuration.

    Raises:
        ValueError: Configuration validation failed
    """
    if not chains or not isinstance(chains, dict):
        raise ValueError("At least one chain must be configured under 'chains'")

    validated = {}
    for key, chain_config in chains.items():
        chain = chain_from_config_key(key)

        if not isinstance(chain_config, dict):
            raise ValueError(f"Chain config '{key}' must be a dictionary")
        if not chain_config.get('rpc_url'):
            raise ValueError(f"Chain config '{key}' missing required field: rpc_url")

        if chain is Chain.EVM:
            chain_id = chain_config.get('chain_id')
            if not isinstance(chain_id, int) or chain_id <= 0:
                raise ValueError(f"Chain config '{key}' chain_id must be a positive integer, current value: {chain_id}")
            chain_config.setdefault('verify_ssl', True)
            chain_config.setdefault('proxy', None)
        elif chain is Chain.SOLANA:
            commitment = chain_config.setdefault('commitment', 'confirmed')
            if commitment not in SOLANA_COMMITMENTS:
                raise ValueError(
                    f"Chain config '{key}' commitment must be one of {', '.join(SOLANA_COMMITMENTS)}, "
                    f"current value: {commitment}"
                )

        validated[key.lower()] = chain_config

    return validated


def load_secret(env_var: str, what: str) -> str:
    """
    Load a secret from the environment.

    Args:
        env_var: Environment variable name
        what: Human-readable description for the error message

    Returns:
        Secret value

    Raises:
        ValueError: Variable not set
    """
    value = os.environ.get(env_var)
    if not value:
        raise ValueError(f"Environment variable '{env_var}' not set, cannot load {what}")
    return value

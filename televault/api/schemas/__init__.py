"""Pydantic schemas for API requests and responses."""

from televault.api.schemas.account_schemas import (
    ChainAddress,
    AccountResponse,
    ChainBalance,
    BalancesResponse,
)

__all__ = [
    'ChainAddress',
    'AccountResponse',
    'ChainBalance',
    'BalancesResponse',
]

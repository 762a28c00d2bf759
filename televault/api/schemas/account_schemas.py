"""
Pydantic schemas for account-related API responses.

Responses carry public data only; key shares are never serialized.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class ChainAddress(BaseModel):
    """Public address of one chain binding."""

    chain: str = Field(..., description="Chain tag (EVM or SOLANA)")
    symbol: str = Field(..., description="Native asset symbol")
    address: str = Field(..., description="Public address")


class AccountResponse(BaseModel):
    """Response schema for an account."""

    chat_identity: str = Field(..., description="Telegram user ID")
    display_name: str = Field(..., description="Telegram username at registration")
    created_at: Optional[datetime] = Field(None, description="Registration time")
    chains: List[ChainAddress] = Field(default_factory=list, description="Bound chains")


class ChainBalance(BaseModel):
    """Balance of one chain; failed queries have success=False and balance=None."""

    chain: str = Field(..., description="Chain tag (EVM or SOLANA)")
    symbol: str = Field(..., description="Native asset symbol")
    address: str = Field(..., description="Queried address")
    balance: Optional[str] = Field(None, description="Balance in the native unit, as a decimal string")
    success: bool = Field(..., description="Whether the query succeeded")
    error: Optional[str] = Field(None, description="Error tag if the query failed")


class BalancesResponse(BaseModel):
    """Response schema for an account's balances."""

    chat_identity: str
    balances: List[ChainBalance]

"""
Account endpoints.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from televault.core.chains import get_chain_spec
from televault.services.account_store import AccountStore
from televault.services.balance_service import BalanceAggregator
from televault.api.dependencies import get_account_store, get_balance_aggregator
from televault.api.schemas.account_schemas import (
    AccountResponse,
    BalancesResponse,
    ChainAddress,
    ChainBalance,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _get_account_or_404(store: AccountStore, chat_identity: str):
    try:
        account = store.find_by_identity(chat_identity)
    except Exception as e:
        logger.error(f"Failed to look up account {chat_identity}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    if account is None:
        raise HTTPException(status_code=404, detail=f"No account for {chat_identity}")
    return account


@router.get("/{chat_identity}", response_model=AccountResponse)
async def get_account(
    chat_identity: str,
    store: AccountStore = Depends(get_account_store)
) -> AccountResponse:
    """
    Get an account's public information.

    Args:
        chat_identity: Telegram user ID

    Returns:
        Account with public addresses per chain
    """
    account = _get_account_or_404(store, chat_identity)

    return AccountResponse(
        chat_identity=account.chat_identity,
        display_name=account.display_name,
        created_at=account.created_at,
        chains=[
            ChainAddress(chain=chain.value, symbol=get_chain_spec(chain).symbol, address=address)
            for chain, address in account.public_addresses().items()
        ]
    )


@router.get("/{chat_identity}/balances", response_model=BalancesResponse)
async def get_account_balances(
    chat_identity: str,
    store: AccountStore = Depends(get_account_store),
    aggregator: BalanceAggregator = Depends(get_balance_aggregator)
) -> BalancesResponse:
    """
    Get native balances for every chain of an account.

    A chain whose query fails is reported with success=False; the other
    chains are still returned.

    Args:
        chat_identity: Telegram user ID

    Returns:
        Balance per chain
    """
    account = _get_account_or_404(store, chat_identity)
    results = aggregator.get_balances(account)

    return BalancesResponse(
        chat_identity=account.chat_identity,
        balances=[
            ChainBalance(
                chain=chain.value,
                symbol=get_chain_spec(chain).symbol,
                address=result.address,
                balance=f"{result.balance:f}" if result.success else None,
                success=result.success,
                error=result.error
            )
            for chain, result in results.items()
        ]
    )

"""
Guided transfer state machine.

A transfer is collected over several chat messages:

    start -> AWAITING_ADDRESS -> AWAITING_AMOUNT -> EXECUTING -> COMPLETED
                   |                   |               |
                   +-------------------+---------------+--> ABORTED

The machine never blocks waiting for input. Each session is an explicit
state value kept in a registry keyed by chat identity; `resume` feeds it
the next inbound message. Only the TransferSession fields are kept, and
only in memory; terminal sessions are dropped from the registry.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, DecimalException, InvalidOperation
from enum import Enum
from typing import Dict, Optional

from televault.core.address_validator import validate_address
from televault.core.chains import Chain, get_chain_spec
from televault.core.exceptions import (
    AccountMissing,
    ExecutionFailed,
    TeleVaultError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)


class TransferState(str, Enum):
    AWAITING_ADDRESS = "AwaitingAddress"
    AWAITING_AMOUNT = "AwaitingAmount"
    EXECUTING = "Executing"
    COMPLETED = "Completed"
    ABORTED = "Aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.COMPLETED, TransferState.ABORTED)


@dataclass
class TransferSession:
    """One in-flight guided transfer."""

    chat_identity: str
    chain: Chain
    state: TransferState = TransferState.AWAITING_ADDRESS
    destination_address: Optional[str] = None
    amount: Optional[Decimal] = None
    started_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class StepResult:
    """What a step produced: the new state and the message to show the user."""

    state: TransferState
    message: str
    session: Optional[TransferSession] = None
    transaction_id: Optional[str] = None
    error: Optional[TeleVaultError] = None


class TransferSessionRegistry:
    """In-memory active sessions, at most one per chat identity."""

    def __init__(self):
        self._sessions: Dict[str, TransferSession] = {}

    def get(self, chat_identity: str) -> Optional[TransferSession]:
        return self._sessions.get(str(chat_identity))

    def put(self, session: TransferSession) -> None:
        previous = self._sessions.get(session.chat_identity)
        if previous is not None:
            logger.info(
                f"Replacing abandoned transfer session in state {previous.state.value}",
                extra={"chat_identity": session.chat_identity}
            )
        self._sessions[session.chat_identity] = session

    def remove(self, chat_identity: str) -> Optional[TransferSession]:
        return self._sessions.pop(str(chat_identity), None)

    def __len__(self) -> int:
        return len(self._sessions)


def parse_amount(text: str, chain: Chain) -> Decimal:
    """
    Parse a user-supplied amount in the chain's human-readable unit.

    Raises:
        ValidationFailed: If the text is not a finite number > 0, is
            smaller than one smallest unit of the chain, or exceeds the
            largest amount the chain can transfer
    """
    spec = get_chain_spec(chain)
    error = ValidationFailed(
        f"🚨 Invalid amount. Please provide a valid amount of {spec.symbol} to send."
    )

    try:
        amount = Decimal((text or "").strip())
    except InvalidOperation:
        raise error

    if not amount.is_finite() or amount <= 0 or amount > spec.max_amount:
        raise error

    try:
        amount_smallest = spec.to_smallest(amount)
    except DecimalException:
        raise error

    if amount_smallest > spec.max_smallest:
        raise error

    if amount_smallest <= 0:
        raise ValidationFailed(
            f"🚨 Amount too small. The minimum transferable amount is "
            f"{spec.to_human(1):f} {spec.symbol}."
        )

    return amount


class TransferStateMachine:
    """
    Drives guided transfers.

    Collaborators:
        store: provides find_by_identity(chat_identity) -> Account or None
        executor: provides execute(account, chain, destination, amount) -> tx id
    """

    def __init__(self, store, executor, registry: Optional[TransferSessionRegistry] = None):
        self.store = store
        self.executor = executor
        self.registry = registry or TransferSessionRegistry()

    def get_session(self, chat_identity: str) -> Optional[TransferSession]:
        return self.registry.get(chat_identity)

    def start(self, chat_identity: str, chain: Chain) -> StepResult:
        """
        Begin a transfer on a chain.

        The session only starts if the account has a binding on that chain;
        otherwise the result is ABORTED and nothing is registered.
        """
        chain = Chain(chain)
        spec = get_chain_spec(chain)
        chat_identity = str(chat_identity)

        account = self.store.find_by_identity(chat_identity)
        if account is None:
            error = AccountMissing(f"No account for {chat_identity}")
            return StepResult(TransferState.ABORTED, error.user_message, error=error)

        if account.binding(chain) is None:
            error = AccountMissing(
                f"Account {chat_identity} has no {chain} binding",
                user_message=f"No {spec.name} wallet found for your account."
            )
            return StepResult(TransferState.ABORTED, error.user_message, error=error)

        session = TransferSession(chat_identity=chat_identity, chain=chain)
        self.registry.put(session)
        logger.info(
            "Transfer session started",
            extra={"chat_identity": chat_identity, "chain": str(chain)}
        )
        return StepResult(
            session.state,
            f"Kindly provide the wallet address where you'd like to send {spec.symbol}:",
            session=session
        )

    def resume(self, chat_identity: str, text: str) -> Optional[StepResult]:
        """
        Feed the next inbound message to the identity's active session.

        Returns:
            StepResult, or None if the identity has no session awaiting input
        """
        session = self.registry.get(chat_identity)
        if session is None:
            return None

        if session.state is TransferState.AWAITING_ADDRESS:
            return self._receive_address(session, text)
        if session.state is TransferState.AWAITING_AMOUNT:
            return self._receive_amount(session, text)

        # EXECUTING sessions do not take input
        return None

    def _receive_address(self, session: TransferSession, text: str) -> StepResult:
        spec = get_chain_spec(session.chain)
        try:
            session.destination_address = validate_address(session.chain, text)
        except ValidationFailed as e:
            return self._abort(session, e)

        session.state = TransferState.AWAITING_AMOUNT
        return StepResult(
            session.state,
            f"How much {spec.symbol} would you like to send?",
            session=session
        )

    def _receive_amount(self, session: TransferSession, text: str) -> StepResult:
        spec = get_chain_spec(session.chain)
        try:
            session.amount = parse_amount(text, session.chain)
        except ValidationFailed as e:
            return self._abort(session, e)

        session.state = TransferState.EXECUTING
        return StepResult(
            session.state,
            f"♻️ Sending {session.amount:f} {spec.symbol} to {session.destination_address}...",
            session=session
        )

    def execute(self, chat_identity: str) -> Optional[StepResult]:
        """
        Run the single transaction attempt of an EXECUTING session.

        The account is looked up again rather than reused from start.

        Returns:
            COMPLETED or ABORTED result, or None if no session is executing
        """
        session = self.registry.get(chat_identity)
        if session is None or session.state is not TransferState.EXECUTING:
            return None

        spec = get_chain_spec(session.chain)
        try:
            account = self.store.find_by_identity(session.chat_identity)
            if account is None:
                return self._abort(session, AccountMissing(f"Account {session.chat_identity} disappeared"))

            tx_id = self.executor.execute(
                account,
                session.chain,
                session.destination_address,
                session.amount
            )
        except TeleVaultError as e:
            return self._abort(session, e)
        except Exception as e:
            logger.error(f"Unexpected error executing transfer: {e}", exc_info=True)
            return self._abort(session, ExecutionFailed(str(e)))

        session.state = TransferState.COMPLETED
        self.registry.remove(session.chat_identity)
        logger.info(
            "Transfer completed",
            extra={
                "chat_identity": session.chat_identity,
                "chain": str(session.chain),
                "transaction_id": tx_id
            }
        )
        return StepResult(
            session.state,
            f"✅ Successfully sent {session.amount:f} {spec.symbol} to {session.destination_address}.\n\n"
            f"Transaction Hash: {tx_id}",
            session=session,
            transaction_id=tx_id
        )

    def cancel(self, chat_identity: str) -> bool:
        """
        Abandon the identity's session.

        Returns:
            True if a session was removed
        """
        session = self.registry.remove(chat_identity)
        if session is None:
            return False
        session.state = TransferState.ABORTED
        logger.info("Transfer session cancelled", extra={"chat_identity": session.chat_identity})
        return True

    def _abort(self, session: TransferSession, error: TeleVaultError) -> StepResult:
        session.state = TransferState.ABORTED
        self.registry.remove(session.chat_identity)
        logger.info(
            f"Transfer aborted: {error}",
            extra={"chat_identity": session.chat_identity, "chain": str(session.chain)}
        )
        return StepResult(session.state, error.user_message, session=session, error=error)

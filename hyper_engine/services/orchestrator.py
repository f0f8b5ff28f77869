"""Drives ledger writes from request validation through receipt confirmation."""
from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Awaitable, Callable, Iterator

from ..config import EngineConfig
from ..errors import (
    ConfirmationTimeoutError,
    LedgerReadError,
    LedgerWriteError,
    PredictionError,
    ValidationError,
)
from ..interfaces.ledger import LedgerClient
from ..models import (
    Confirmation,
    PendingTransaction,
    TransactionResult,
    TxKind,
    TxState,
)
from ..units import to_base_unit, to_decimal
from ..validation import (
    validate_address,
    validate_deposit_amount,
    validate_withdraw_amount,
)
from .position_reader import PositionReader
from .prediction import PredictionClient

logger = logging.getLogger(__name__)


class TransactionOrchestrator:
    """Drives deposit, withdraw and rebalance writes through their lifecycle.

    Invalid input is rejected before any ledger write is issued. Writes are
    never retried: resubmitting a ledger write is not idempotent. Concurrent
    writes for the same account are sequenced by the ledger, not here.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        reader: PositionReader,
        predictor: PredictionClient,
        config: EngineConfig,
    ) -> None:
        self._ledger = ledger
        self._reader = reader
        self._predictor = predictor
        self._decimals = config.asset_decimals
        self._min_deposit = config.min_deposit
        self._timeout = config.confirmation_timeout

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def deposit(self, wallet: Any, amount: Any) -> TransactionResult:
        pending = PendingTransaction(kind=TxKind.DEPOSIT, wallet=str(wallet))
        with self._validation(pending):
            address = validate_address(wallet, "walletAddress")
            requested = validate_deposit_amount(amount, self._min_deposit)
            base_amount = to_base_unit(requested, self._decimals)
        self._mark_validated(pending, address, base_amount)

        confirmation = await self._submit_and_confirm(
            pending, lambda: self._ledger.deposit(base_amount)
        )
        return self._result(pending, confirmation, amount=requested)

    async def withdraw(self, wallet: Any, amount: Any = None) -> TransactionResult:
        pending = PendingTransaction(kind=TxKind.WITHDRAW, wallet=str(wallet))
        with self._validation(pending):
            address = validate_address(wallet, "walletAddress")
            requested = validate_withdraw_amount(amount)
            base_amount = (
                to_base_unit(requested, self._decimals) if requested is not None else None
            )
        self._mark_validated(pending, address, base_amount)

        if base_amount is None:
            # Full withdrawal: principal is read right before submission.
            try:
                base_amount = await self._reader.read_principal(address)
            except LedgerReadError:
                self._move(pending, TxState.FAILED)
                raise
            pending.amount = base_amount
            logger.info("Full withdrawal for %s: principal=%d", address, base_amount)

        confirmation = await self._submit_and_confirm(
            pending, lambda: self._ledger.withdraw(base_amount)
        )
        return self._result(
            pending, confirmation, amount=to_decimal(base_amount, self._decimals)
        )

    async def rebalance(self, wallet: Any) -> TransactionResult:
        pending = PendingTransaction(kind=TxKind.REBALANCE, wallet=str(wallet))
        with self._validation(pending):
            address = validate_address(wallet, "walletAddress")
        self._mark_validated(pending, address, None)

        confirmation = await self._submit_and_confirm(pending, self._ledger.rebalance)

        try:
            new_apy = await self._predictor.optimized_yield(address)
        except PredictionError as exc:
            exc.details = f"rebalance {confirmation.tx_hash} confirmed; {exc.details}"
            raise
        return self._result(pending, confirmation, new_apy=new_apy)

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _validation(self, pending: PendingTransaction) -> Iterator[None]:
        """Move ``pending`` to Rejected if validation inside the block fails."""
        try:
            yield
        except ValidationError as exc:
            self._move(pending, TxState.REJECTED)
            logger.warning("%s rejected: %s (%s)", pending.kind.value, exc.message, exc.details)
            raise

    def _move(self, pending: PendingTransaction, state: TxState) -> None:
        pending.transition(state)
        logger.info(
            "%s %s -> %s (wallet=%s tx=%s)",
            pending.kind.value,
            pending.history[-1].value,
            state.value,
            pending.address or pending.wallet,
            pending.tx_hash,
        )

    def _mark_validated(
        self, pending: PendingTransaction, address: str, amount: int | None
    ) -> None:
        pending.address = address
        pending.amount = amount
        self._move(pending, TxState.VALIDATED)

    async def _submit_and_confirm(
        self,
        pending: PendingTransaction,
        submit: Callable[[], Awaitable[str]],
    ) -> Confirmation:
        action = pending.kind.value

        try:
            tx_hash = await submit()
        except Exception as exc:
            self._move(pending, TxState.FAILED)
            logger.error("%s submission failed for %s: %s", action, pending.address, exc)
            raise LedgerWriteError(f"Failed to {action}", details=str(exc)) from exc

        pending.tx_hash = tx_hash
        self._move(pending, TxState.SUBMITTED)

        try:
            confirmation = await asyncio.wait_for(
                self._ledger.wait_for_confirmation(tx_hash), timeout=self._timeout
            )
        except (asyncio.TimeoutError, TimeoutError) as exc:
            # Outcome unknown: the transaction may still be included later.
            logger.error(
                "%s %s not confirmed within %ss; outcome unknown", action, tx_hash, self._timeout
            )
            raise ConfirmationTimeoutError(
                f"Confirmation of {action} timed out",
                tx_hash=tx_hash,
                details=f"no receipt for {tx_hash} within {self._timeout}s",
            ) from exc
        except Exception as exc:
            self._move(pending, TxState.FAILED)
            logger.error("%s %s failed while awaiting receipt: %s", action, tx_hash, exc)
            raise LedgerWriteError(f"Failed to {action}", details=str(exc)) from exc

        if not confirmation.succeeded:
            self._move(pending, TxState.FAILED)
            logger.error("%s %s reverted in block %d", action, tx_hash, confirmation.block_number)
            raise LedgerWriteError(
                f"Failed to {action}",
                details=f"transaction {tx_hash} reverted in block {confirmation.block_number}",
            )

        self._move(pending, TxState.CONFIRMED)
        return confirmation

    @staticmethod
    def _result(
        pending: PendingTransaction,
        confirmation: Confirmation,
        amount: Decimal | None = None,
        new_apy: Decimal | None = None,
    ) -> TransactionResult:
        return TransactionResult(
            kind=pending.kind,
            tx_hash=confirmation.tx_hash,
            block_number=confirmation.block_number,
            gas_used=confirmation.gas_used,
            amount=amount,
            new_apy=new_apy,
        )


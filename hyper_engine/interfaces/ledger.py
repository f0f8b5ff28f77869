"""Ledger client protocol — Yield Engine and AI Optimizer contract calls."""
from typing import Protocol

from ..models import Confirmation, RawAIModel, RawPosition, RawStrategy, RawUserStats


class LedgerClient(Protocol):
    """Abstract interface for reading and writing the ledger contracts.

    Addresses are passed already validated and checksummed. Write methods
    return the submitted transaction hash; inclusion is awaited separately
    with ``wait_for_confirmation``.
    """

    async def get_user_stats(self, address: str) -> RawUserStats: ...

    async def get_position(self, address: str) -> RawPosition: ...

    async def get_average_yield(self) -> int: ...

    async def get_strategy(self, index: int) -> RawStrategy: ...

    async def get_ai_model(self, address: str) -> RawAIModel: ...

    async def predict_returns(self, address: str, horizon_seconds: int) -> int: ...

    async def optimize_yield(self, address: str) -> int: ...

    async def deposit(self, amount: int) -> str: ...

    async def withdraw(self, amount: int) -> str: ...

    async def rebalance(self) -> str: ...

    async def wait_for_confirmation(self, tx_hash: str) -> Confirmation: ...

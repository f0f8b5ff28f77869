"""Data models — ledger records are frozen; only the pending write is mutable."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal

# ---------------------------------------------------------------------------
# Raw ledger records (integers exactly as returned by the contracts)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawUserStats:
    principal: int
    current_rewards: int
    total_earned: int
    average_apy_bps: int
    hourly_rate: int
    daily_rate: int


@dataclass(frozen=True)
class RawPosition:
    principal: int
    aave: int
    uniswap: int
    compound: int
    curve: int
    yearn: int
    staking: int
    last_update: int
    total_rewards: int
    ai_opt_level: int


@dataclass(frozen=True)
class RawStrategy:
    name: str
    protocol: str
    base_apy_bps: int
    boosted_apy_bps: int
    active: bool
    tvl: int


@dataclass(frozen=True)
class RawAIModel:
    prediction_accuracy: int
    last_update: int
    active: bool


@dataclass(frozen=True)
class Confirmation:
    """Inclusion record for a submitted write."""

    tx_hash: str
    block_number: int
    gas_used: int
    succeeded: bool = True


# ---------------------------------------------------------------------------
# Normalized snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PositionBreakdown:
    """Per-protocol allocation of a user's principal."""

    principal: Decimal
    aave: Decimal
    uniswap: Decimal
    compound: Decimal
    curve: Decimal
    yearn: Decimal
    staking: Decimal
    last_update: int
    total_rewards: Decimal
    ai_opt_level: int


@dataclass(frozen=True)
class StrategyInfo:
    id: int
    name: str
    protocol: str
    base_apy: Decimal
    boosted_apy: Decimal
    active: bool
    tvl: Decimal


@dataclass(frozen=True)
class AIModelInfo:
    accuracy: int
    last_update: int
    active: bool


@dataclass(frozen=True)
class UserSnapshot:
    """One consistent read of a user's state, every amount normalized."""

    address: str
    principal: Decimal
    current_rewards: Decimal
    total_earned: Decimal
    user_apy: Decimal
    average_apy: Decimal
    hourly_rate: Decimal
    daily_rate: Decimal
    position: PositionBreakdown
    ai_model: AIModelInfo
    strategies: tuple[StrategyInfo, ...] = ()


# ---------------------------------------------------------------------------
# Derived metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrategyPerformance:
    strategy: StrategyInfo
    boost: Decimal
    tvl_share: Decimal


@dataclass(frozen=True)
class RewardSnapshot:
    """Reward figures derived from a snapshot.

    Weekly and monthly projections are linear extrapolations of the current
    daily rate (``daily * 7`` and ``daily * 30``); nothing is compounded.
    """

    principal: Decimal
    current_rewards: Decimal
    total_earned: Decimal
    average_apy: Decimal
    hourly_rate: Decimal
    daily_rate: Decimal
    weekly_projection: Decimal
    monthly_projection: Decimal
    position: PositionBreakdown
    ai_model: AIModelInfo
    strategies: tuple[StrategyPerformance, ...] = ()


@dataclass(frozen=True)
class Prediction:
    address: str
    horizon_days: int
    horizon_seconds: int
    predicted_returns: Decimal
    ai_model: AIModelInfo


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


class TxKind(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    REBALANCE = "rebalance"


class TxState(str, enum.Enum):
    INITIAL = "initial"
    VALIDATED = "validated"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    REJECTED = "rejected"


_TRANSITIONS: dict[TxState, frozenset[TxState]] = {
    TxState.INITIAL: frozenset({TxState.VALIDATED, TxState.REJECTED}),
    TxState.VALIDATED: frozenset({TxState.SUBMITTED, TxState.FAILED}),
    TxState.SUBMITTED: frozenset({TxState.CONFIRMED, TxState.FAILED}),
    TxState.CONFIRMED: frozenset(),
    TxState.FAILED: frozenset(),
    TxState.REJECTED: frozenset(),
}


@dataclass
class PendingTransaction:
    """An in-flight write; lives only for the duration of one request."""

    kind: TxKind
    wallet: str
    address: str = ""
    amount: int | None = None
    state: TxState = TxState.INITIAL
    tx_hash: str | None = None
    history: list[TxState] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def transition(self, new_state: TxState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise ValueError(
                f"Illegal {self.kind.value} transition {self.state.value} -> {new_state.value}"
            )
        self.history.append(self.state)
        self.state = new_state


@dataclass(frozen=True)
class TransactionResult:
    kind: TxKind
    tx_hash: str
    block_number: int
    gas_used: int
    amount: Decimal | None = None
    new_apy: Decimal | None = None

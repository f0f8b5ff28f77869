"""Pure metric calculations over a normalized snapshot."""
from __future__ import annotations

from decimal import Decimal

from ..models import RewardSnapshot, StrategyInfo, StrategyPerformance, UserSnapshot

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30


def project(daily_rate: Decimal, days: int) -> Decimal:
    """Linear projection of a daily accrual rate; no compounding."""
    return daily_rate * days


def strategy_performance(strategies: tuple[StrategyInfo, ...]) -> tuple[StrategyPerformance, ...]:
    """Boost over base yield and share of catalog TVL for each strategy."""
    total_tvl = sum((s.tvl for s in strategies), Decimal(0))
    out: list[StrategyPerformance] = []
    for s in strategies:
        share = (s.tvl / total_tvl * 100) if total_tvl > 0 else Decimal(0)
        out.append(
            StrategyPerformance(
                strategy=s,
                boost=s.boosted_apy - s.base_apy,
                tvl_share=share,
            )
        )
    return tuple(out)


def compute_metrics(snapshot: UserSnapshot) -> RewardSnapshot:
    """Derive reward projections and strategy performance from a snapshot.

    The ledger's daily rate is already time-weighted, so weekly and monthly
    figures are simple multiples of it.
    """
    return RewardSnapshot(
        principal=snapshot.principal,
        current_rewards=snapshot.current_rewards,
        total_earned=snapshot.total_earned,
        average_apy=snapshot.average_apy,
        hourly_rate=snapshot.hourly_rate,
        daily_rate=snapshot.daily_rate,
        weekly_projection=project(snapshot.daily_rate, DAYS_PER_WEEK),
        monthly_projection=project(snapshot.daily_rate, DAYS_PER_MONTH),
        position=snapshot.position,
        ai_model=snapshot.ai_model,
        strategies=strategy_performance(snapshot.strategies),
    )

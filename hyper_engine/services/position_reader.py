"""Position reader — one consistent, normalized snapshot of a user's state."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from ..config import EngineConfig
from ..errors import LedgerReadError
from ..interfaces.ledger import LedgerClient
from ..models import (
    AIModelInfo,
    PositionBreakdown,
    RawAIModel,
    RawPosition,
    RawStrategy,
    RawUserStats,
    StrategyInfo,
    UserSnapshot,
)
from ..units import bps_to_percent, to_decimal
from ..validation import validate_address

logger = logging.getLogger(__name__)


class PositionReader:
    """Reads user stats, position, yield, AI model and the strategy catalog.

    Nothing is cached: every call refetches everything, and a failure in any
    sub-read fails the whole snapshot.
    """

    def __init__(self, ledger: LedgerClient, config: EngineConfig) -> None:
        self._ledger = ledger
        self._decimals = config.asset_decimals
        self._strategy_count = config.strategy_count
        self._read_timeout = config.read_timeout

    async def read_snapshot(self, address: str) -> UserSnapshot:
        user = validate_address(address, "userAddress")

        reads = [
            self._ledger.get_user_stats(user),
            self._ledger.get_position(user),
            self._ledger.get_average_yield(),
            self._ledger.get_ai_model(user),
            *(self._ledger.get_strategy(i) for i in range(self._strategy_count)),
        ]
        results = await self._gather(reads, f"snapshot for {user}", "Failed to fetch metrics")

        stats, position, average_apy, ai_model, *strategies = results
        return self._normalize(user, stats, position, average_apy, ai_model, strategies)

    async def read_principal(self, address: str) -> int:
        """Fresh raw principal (base units) for ``address``."""
        user = validate_address(address, "walletAddress")
        (position,) = await self._gather(
            [self._ledger.get_position(user)], f"principal for {user}", "Failed to read principal"
        )
        return position.principal

    async def _gather(self, reads: list, what: str, message: str) -> list:
        try:
            results = await asyncio.wait_for(
                asyncio.gather(*reads, return_exceptions=True),
                timeout=self._read_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Ledger read timed out after %ss: %s", self._read_timeout, what)
            raise LedgerReadError(
                message,
                details=f"ledger read timed out after {self._read_timeout}s",
            ) from exc

        for result in results:
            if isinstance(result, BaseException):
                logger.error("Ledger read failed (%s): %s", what, result)
                raise LedgerReadError(message, details=str(result)) from result
        return results

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _amount(self, raw: int) -> Decimal:
        return to_decimal(raw, self._decimals)

    def _normalize(
        self,
        address: str,
        stats: RawUserStats,
        position: RawPosition,
        average_apy: int,
        ai_model: RawAIModel,
        strategies: list[RawStrategy],
    ) -> UserSnapshot:
        return UserSnapshot(
            address=address,
            principal=self._amount(stats.principal),
            current_rewards=self._amount(stats.current_rewards),
            total_earned=self._amount(stats.total_earned),
            user_apy=bps_to_percent(stats.average_apy_bps),
            average_apy=bps_to_percent(average_apy),
            hourly_rate=self._amount(stats.hourly_rate),
            daily_rate=self._amount(stats.daily_rate),
            position=PositionBreakdown(
                principal=self._amount(position.principal),
                aave=self._amount(position.aave),
                uniswap=self._amount(position.uniswap),
                compound=self._amount(position.compound),
                curve=self._amount(position.curve),
                yearn=self._amount(position.yearn),
                staking=self._amount(position.staking),
                last_update=position.last_update,
                total_rewards=self._amount(position.total_rewards),
                ai_opt_level=position.ai_opt_level,
            ),
            ai_model=AIModelInfo(
                accuracy=ai_model.prediction_accuracy,
                last_update=ai_model.last_update,
                active=ai_model.active,
            ),
            strategies=tuple(
                StrategyInfo(
                    id=index,
                    name=s.name,
                    protocol=s.protocol,
                    base_apy=bps_to_percent(s.base_apy_bps),
                    boosted_apy=bps_to_percent(s.boosted_apy_bps),
                    active=s.active,
                    tvl=self._amount(s.tvl),
                )
                for index, s in enumerate(strategies)
            ),
        )

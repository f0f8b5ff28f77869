"""AI Optimizer adapter — return predictions and post-rebalance yield."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any

from ..config import EngineConfig
from ..errors import PredictionError
from ..interfaces.ledger import LedgerClient
from ..models import AIModelInfo, Prediction
from ..units import MAX_UINT256, bps_to_percent, to_decimal
from ..validation import validate_address

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
# predictReturns takes the horizon as a uint256 of seconds.
MAX_HORIZON_DAYS = MAX_UINT256 // SECONDS_PER_DAY


def resolve_horizon(days: Any, default: int = 30) -> int:
    """Parse a horizon in days.

    Absent, non-numeric, non-positive or out-of-range values fall back to
    ``default``; the applied horizon is echoed to the caller.
    """
    if days is None or isinstance(days, bool):
        return default
    try:
        value = int(str(days).strip())
    except ValueError:
        return default
    return value if 0 < value <= MAX_HORIZON_DAYS else default


class PredictionClient:
    """Thin adapter over the AI Optimizer contract calls."""

    def __init__(self, ledger: LedgerClient, config: EngineConfig) -> None:
        self._ledger = ledger
        self._decimals = config.asset_decimals
        self._default_days = config.default_horizon_days

    async def predict(self, address: str, days: Any = None) -> Prediction:
        """Predicted returns over the horizon plus the user's AI model record.

        Both optimizer reads are required: a failing ``userModels`` read fails
        the prediction just as a failing ``predictReturns`` does.
        """
        user = validate_address(address, "userAddress")
        horizon_days = resolve_horizon(days, self._default_days)
        horizon_seconds = horizon_days * SECONDS_PER_DAY

        try:
            raw_returns, model = await asyncio.gather(
                self._ledger.predict_returns(user, horizon_seconds),
                self._ledger.get_ai_model(user),
            )
        except Exception as exc:
            logger.error("Prediction failed for %s (%d days): %s", user, horizon_days, exc)
            raise PredictionError("Failed to predict", details=str(exc)) from exc

        return Prediction(
            address=user,
            horizon_days=horizon_days,
            horizon_seconds=horizon_seconds,
            predicted_returns=to_decimal(raw_returns, self._decimals),
            ai_model=AIModelInfo(
                accuracy=model.prediction_accuracy,
                last_update=model.last_update,
                active=model.active,
            ),
        )

    async def optimized_yield(self, address: str) -> Decimal:
        """Yield (percent) the optimizer reports for ``address``."""
        user = validate_address(address, "walletAddress")
        try:
            bps = await self._ledger.optimize_yield(user)
        except Exception as exc:
            logger.error("optimizeYield failed for %s: %s", user, exc)
            raise PredictionError("Failed to query optimized yield", details=str(exc)) from exc
        return bps_to_percent(bps)

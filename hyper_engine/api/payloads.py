"""JSON payload builders shared by the HTTP handlers and the CLI."""
from __future__ import annotations

import json
from decimal import Decimal
from functools import partial
from typing import Any

from ..models import Prediction, RewardSnapshot, TransactionResult


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


dumps = partial(json.dumps, default=_json_default)


def metrics_payload(rewards: RewardSnapshot) -> dict[str, Any]:
    position = rewards.position
    model = rewards.ai_model
    return {
        "success": True,
        "principal": rewards.principal,
        "currentRewards": rewards.current_rewards,
        "totalEarned": rewards.total_earned,
        "averageAPY": rewards.average_apy,
        "hourlyRate": rewards.hourly_rate,
        "dailyRate": rewards.daily_rate,
        "weeklyProjection": rewards.weekly_projection,
        "monthlyProjection": rewards.monthly_projection,
        "position": {
            "aave": position.aave,
            "uniswap": position.uniswap,
            "compound": position.compound,
            "curve": position.curve,
            "yearn": position.yearn,
            "staking": position.staking,
            "aiOptLevel": position.ai_opt_level,
        },
        "aiModel": {
            "accuracy": model.accuracy,
            "lastUpdate": model.last_update,
            "active": model.active,
        },
        "strategies": [
            {
                "id": perf.strategy.id,
                "name": perf.strategy.name,
                "protocol": perf.strategy.protocol,
                "baseAPY": perf.strategy.base_apy,
                "boostedAPY": perf.strategy.boosted_apy,
                "active": perf.strategy.active,
                "tvl": perf.strategy.tvl,
                "boost": perf.boost,
                "tvlShare": perf.tvl_share,
            }
            for perf in rewards.strategies
        ],
    }


def deposit_payload(result: TransactionResult) -> dict[str, Any]:
    return {
        "success": True,
        "transactionHash": result.tx_hash,
        "blockNumber": result.block_number,
        "amount": result.amount,
        "gasUsed": str(result.gas_used),
    }


def withdraw_payload(result: TransactionResult) -> dict[str, Any]:
    return {
        "success": True,
        "transactionHash": result.tx_hash,
        "blockNumber": result.block_number,
        "gasUsed": str(result.gas_used),
    }


def rebalance_payload(result: TransactionResult) -> dict[str, Any]:
    return {
        "success": True,
        "transactionHash": result.tx_hash,
        "newAPY": result.new_apy,
        "optimization": "Rebalanced across active strategies",
    }


def prediction_payload(prediction: Prediction) -> dict[str, Any]:
    model = prediction.ai_model
    return {
        "success": True,
        "predictedReturns": prediction.predicted_returns,
        "timeHorizon": prediction.horizon_days,
        "accuracy": model.accuracy,
        "aiModel": {
            "accuracy": model.accuracy,
            "lastUpdate": model.last_update,
            "active": model.active,
        },
    }

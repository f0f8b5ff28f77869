"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from hyper_engine.config import AppConfig, EngineConfig, LedgerConfig, ServerConfig
from hyper_engine.context import EngineContext
from hyper_engine.models import (
    Confirmation,
    RawAIModel,
    RawPosition,
    RawStrategy,
    RawUserStats,
)

# EIP-55 test vectors (valid checksummed addresses).
USER_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
ENGINE_ADDRESS = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
OPTIMIZER_ADDRESS = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
# Same as USER_ADDRESS with one letter's case flipped: checksum fails.
BAD_CHECKSUM_ADDRESS = "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

TX_HASH = "0x" + "ab" * 32
TEST_PRIVATE_KEY = "0x" + "11" * 32


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_ledger_config() -> LedgerConfig:
    return LedgerConfig(
        rpc_url="https://rpc.example.com",
        rpc_timeout=10,
        private_key=TEST_PRIVATE_KEY,
        hyper_engine_address=ENGINE_ADDRESS,
        ai_optimizer_address=OPTIMIZER_ADDRESS,
        receipt_poll_interval=0.1,
    )


@pytest.fixture()
def sample_engine_config() -> EngineConfig:
    return EngineConfig(
        asset_decimals=6,
        min_deposit=50,
        strategy_count=8,
        confirmation_timeout=5.0,
        read_timeout=5.0,
        default_horizon_days=30,
    )


@pytest.fixture()
def sample_app_config(
    sample_ledger_config: LedgerConfig, sample_engine_config: EngineConfig
) -> AppConfig:
    return AppConfig(
        ledger=sample_ledger_config,
        engine=sample_engine_config,
        server=ServerConfig(host="127.0.0.1", port=3000, cors_origin="*"),
    )


# ---------------------------------------------------------------------------
# Ledger fixtures
# ---------------------------------------------------------------------------


def sample_strategy(index: int) -> RawStrategy:
    return RawStrategy(
        name=f"Strategy {index}",
        protocol=f"0x{index + 1:040x}",
        base_apy_bps=500 + 100 * index,
        boosted_apy_bps=750 + 150 * index,
        active=index != 7,
        tvl=(index + 1) * 1_000_000 * 10**6,  # (index + 1) million USDC
    )


@pytest.fixture()
def raw_user_stats() -> RawUserStats:
    return RawUserStats(
        principal=1_000_000_000,  # 1000 USDC
        current_rewards=12_500_000,  # 12.5
        total_earned=40_000_000,  # 40
        average_apy_bps=1850,
        hourly_rate=500_000,  # 0.5
        daily_rate=12_000_000,  # 12
    )


@pytest.fixture()
def raw_position() -> RawPosition:
    return RawPosition(
        principal=1_000_000_000,
        aave=300_000_000,
        uniswap=200_000_000,
        compound=150_000_000,
        curve=150_000_000,
        yearn=100_000_000,
        staking=100_000_000,
        last_update=1_700_000_000,
        total_rewards=40_000_000,
        ai_opt_level=3,
    )


@pytest.fixture()
def raw_ai_model() -> RawAIModel:
    return RawAIModel(prediction_accuracy=95, last_update=1_700_000_100, active=True)


@pytest.fixture()
def sample_confirmation() -> Confirmation:
    return Confirmation(tx_hash=TX_HASH, block_number=123456, gas_used=87000, succeeded=True)


@pytest.fixture()
def mock_ledger(
    raw_user_stats: RawUserStats,
    raw_position: RawPosition,
    raw_ai_model: RawAIModel,
    sample_confirmation: Confirmation,
) -> AsyncMock:
    ledger = AsyncMock()
    ledger.get_user_stats.return_value = raw_user_stats
    ledger.get_position.return_value = raw_position
    ledger.get_average_yield.return_value = 2100
    ledger.get_strategy.side_effect = sample_strategy
    ledger.get_ai_model.return_value = raw_ai_model
    ledger.predict_returns.return_value = 36_000_000  # 36 USDC
    ledger.optimize_yield.return_value = 2450
    ledger.deposit.return_value = TX_HASH
    ledger.withdraw.return_value = TX_HASH
    ledger.rebalance.return_value = TX_HASH
    ledger.wait_for_confirmation.return_value = sample_confirmation
    return ledger


@pytest.fixture()
def engine_context(sample_app_config: AppConfig, mock_ledger: AsyncMock) -> EngineContext:
    return EngineContext.from_config(sample_app_config, ledger=mock_ledger)


WRITE_METHODS = ("deposit", "withdraw", "rebalance")
READ_METHODS = (
    "get_user_stats",
    "get_position",
    "get_average_yield",
    "get_strategy",
    "get_ai_model",
    "predict_returns",
    "optimize_yield",
)


def assert_no_ledger_calls(ledger: AsyncMock) -> None:
    for name in WRITE_METHODS + READ_METHODS + ("wait_for_confirmation",):
        getattr(ledger, name).assert_not_called()


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    ledger:
      rpc_url: "https://rpc.example.com"
      rpc_timeout: 15
      private_key: "{TEST_PRIVATE_KEY}"
      hyper_engine_address: "{ENGINE_ADDRESS}"
      ai_optimizer_address: "{OPTIMIZER_ADDRESS}"
    engine:
      asset_decimals: 6
      min_deposit: 50
      strategy_count: 8
      confirmation_timeout: 60
    server:
      port: 8080
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file

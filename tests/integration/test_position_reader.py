"""Integration tests for PositionReader against a mocked ledger."""
from __future__ import annotations

import asyncio
import dataclasses
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from conftest import USER_ADDRESS, assert_no_ledger_calls, sample_strategy
from hyper_engine.config import EngineConfig
from hyper_engine.errors import LedgerReadError, ValidationError
from hyper_engine.models import RawPosition
from hyper_engine.services.position_reader import PositionReader


@pytest.fixture()
def reader(mock_ledger: AsyncMock, sample_engine_config: EngineConfig) -> PositionReader:
    return PositionReader(mock_ledger, sample_engine_config)


class TestReadSnapshot:
    @pytest.mark.asyncio
    async def test_normalizes_amounts_and_rates(self, reader: PositionReader) -> None:
        snap = await reader.read_snapshot(USER_ADDRESS)

        assert snap.address == USER_ADDRESS
        assert snap.principal == Decimal(1000)
        assert snap.current_rewards == Decimal("12.5")
        assert snap.total_earned == Decimal(40)
        assert snap.user_apy == Decimal("18.5")
        assert snap.average_apy == Decimal(21)
        assert snap.hourly_rate == Decimal("0.5")
        assert snap.daily_rate == Decimal(12)

    @pytest.mark.asyncio
    async def test_position_breakdown(self, reader: PositionReader) -> None:
        snap = await reader.read_snapshot(USER_ADDRESS)
        pos = snap.position
        assert pos.aave == Decimal(300)
        assert pos.uniswap == Decimal(200)
        assert pos.staking == Decimal(100)
        assert pos.ai_opt_level == 3
        assert pos.last_update == 1_700_000_000

    @pytest.mark.asyncio
    async def test_reads_full_strategy_catalog(
        self, reader: PositionReader, mock_ledger: AsyncMock
    ) -> None:
        snap = await reader.read_snapshot(USER_ADDRESS)

        assert mock_ledger.get_strategy.await_count == 8
        assert [s.id for s in snap.strategies] == list(range(8))
        first = snap.strategies[0]
        assert first.base_apy == Decimal(5)
        assert first.boosted_apy == Decimal("7.5")
        assert first.tvl == Decimal(1_000_000)
        assert snap.strategies[7].active is False

    @pytest.mark.asyncio
    async def test_lowercase_address_is_checksummed(
        self, reader: PositionReader, mock_ledger: AsyncMock
    ) -> None:
        await reader.read_snapshot(USER_ADDRESS.lower())
        mock_ledger.get_user_stats.assert_awaited_once_with(USER_ADDRESS)

    @pytest.mark.asyncio
    async def test_invalid_address_makes_no_calls(
        self, reader: PositionReader, mock_ledger: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError, match="userAddress"):
            await reader.read_snapshot("0x1234")
        assert_no_ledger_calls(mock_ledger)

    @pytest.mark.asyncio
    async def test_single_failing_read_fails_whole_snapshot(
        self, reader: PositionReader, mock_ledger: AsyncMock
    ) -> None:
        def flaky(index: int):
            if index == 4:
                raise ConnectionError("strategy 4 unavailable")
            return sample_strategy(index)

        mock_ledger.get_strategy.side_effect = flaky
        with pytest.raises(LedgerReadError) as exc_info:
            await reader.read_snapshot(USER_ADDRESS)
        assert exc_info.value.message == "Failed to fetch metrics"
        assert "strategy 4 unavailable" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_read_timeout(
        self, mock_ledger: AsyncMock, sample_engine_config: EngineConfig
    ) -> None:
        async def slow(_address: str) -> None:
            await asyncio.sleep(5)

        mock_ledger.get_ai_model.side_effect = slow
        reader = PositionReader(
            mock_ledger, dataclasses.replace(sample_engine_config, read_timeout=0.05)
        )
        with pytest.raises(LedgerReadError, match="Failed to fetch metrics") as exc_info:
            await reader.read_snapshot(USER_ADDRESS)
        assert "timed out" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_no_caching_between_calls(
        self, reader: PositionReader, mock_ledger: AsyncMock, raw_position: RawPosition
    ) -> None:
        first = await reader.read_snapshot(USER_ADDRESS)
        mock_ledger.get_position.return_value = dataclasses.replace(
            raw_position, aave=0, ai_opt_level=5
        )
        second = await reader.read_snapshot(USER_ADDRESS)

        assert mock_ledger.get_user_stats.await_count == 2
        assert first.position.aave == Decimal(300)
        assert second.position.aave == Decimal(0)
        assert second.position.ai_opt_level == 5


class TestReadPrincipal:
    @pytest.mark.asyncio
    async def test_returns_raw_principal(self, reader: PositionReader) -> None:
        assert await reader.read_principal(USER_ADDRESS) == 1_000_000_000

    @pytest.mark.asyncio
    async def test_failure(self, reader: PositionReader, mock_ledger: AsyncMock) -> None:
        mock_ledger.get_position.side_effect = ConnectionError("rpc down")
        with pytest.raises(LedgerReadError, match="Failed to read principal"):
            await reader.read_principal(USER_ADDRESS)

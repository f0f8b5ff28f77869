"""EVM ledger client — Hyper Engine / AI Optimizer contracts via web3.py."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TimeExhausted
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ...config import LedgerConfig
from ...models import Confirmation, RawAIModel, RawPosition, RawStrategy, RawUserStats
from .abi import AI_OPTIMIZER_ABI, HYPER_ENGINE_ABI

logger = logging.getLogger(__name__)


class EvmLedgerClient:
    """Contract handles bound once at startup and shared across requests."""

    def __init__(self, config: LedgerConfig, receipt_timeout: float = 120.0) -> None:
        self.rpc_url = config.rpc_url
        self._receipt_timeout = receipt_timeout
        self._poll_interval = config.receipt_poll_interval

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        provider = AsyncHTTPProvider(
            config.rpc_url,
            request_kwargs={
                "timeout": aiohttp.ClientTimeout(total=config.rpc_timeout),
                "ssl": ssl_context,
            },
        )
        self._w3 = AsyncWeb3(provider)

        self._account = Account.from_key(config.private_key) if config.private_key else None
        if self._account is not None:
            self._w3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(self._account))
            self._w3.eth.default_account = self._account.address

        self._engine = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(config.hyper_engine_address),
            abi=HYPER_ENGINE_ABI,
        )
        self._optimizer = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(config.ai_optimizer_address),
            abi=AI_OPTIMIZER_ABI,
        )

    @property
    def signer_address(self) -> str | None:
        return self._account.address if self._account is not None else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_user_stats(self, address: str) -> RawUserStats:
        result = await self._engine.functions.getUserStats(address).call()
        return RawUserStats(*(int(v) for v in result))

    async def get_position(self, address: str) -> RawPosition:
        result = await self._engine.functions.positions(address).call()
        return RawPosition(*(int(v) for v in result))

    async def get_average_yield(self) -> int:
        return int(await self._engine.functions.getAverageAPY().call())

    async def get_strategy(self, index: int) -> RawStrategy:
        name, protocol, base_apy, boosted_apy, active, tvl = (
            await self._engine.functions.strategies(index).call()
        )
        return RawStrategy(
            name=str(name),
            protocol=str(protocol),
            base_apy_bps=int(base_apy),
            boosted_apy_bps=int(boosted_apy),
            active=bool(active),
            tvl=int(tvl),
        )

    async def get_ai_model(self, address: str) -> RawAIModel:
        accuracy, last_update, active = (
            await self._optimizer.functions.userModels(address).call()
        )
        return RawAIModel(
            prediction_accuracy=int(accuracy),
            last_update=int(last_update),
            active=bool(active),
        )

    async def predict_returns(self, address: str, horizon_seconds: int) -> int:
        return int(
            await self._optimizer.functions.predictReturns(address, horizon_seconds).call()
        )

    async def optimize_yield(self, address: str) -> int:
        # Evaluated with eth_call: the optimizer's return value is what we need.
        return int(await self._optimizer.functions.optimizeYield(address).call())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _require_signer(self) -> None:
        if self._account is None:
            raise RuntimeError("No signing key configured for ledger writes")

    async def _transact(self, function: Any, action: str) -> str:
        self._require_signer()
        tx_hash = await function.transact()
        tx_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info("Transaction sent for action=%s hash=%s", action, tx_hex)
        return tx_hex

    async def deposit(self, amount: int) -> str:
        return await self._transact(self._engine.functions.deposit(amount), "deposit")

    async def withdraw(self, amount: int) -> str:
        return await self._transact(self._engine.functions.withdraw(amount), "withdraw")

    async def rebalance(self) -> str:
        return await self._transact(self._engine.functions.autoRebalance(), "rebalance")

    async def wait_for_confirmation(self, tx_hash: str) -> Confirmation:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._receipt_timeout,
                poll_latency=self._poll_interval,
            )
        except TimeExhausted as exc:
            raise TimeoutError(f"Transaction {tx_hash} not included in time") from exc
        return receipt_to_confirmation(receipt)


def receipt_to_confirmation(receipt: Any) -> Confirmation:
    """Convert a web3 transaction receipt into a ``Confirmation``."""
    return Confirmation(
        tx_hash=AsyncWeb3.to_hex(receipt["transactionHash"]),
        block_number=int(receipt["blockNumber"]),
        gas_used=int(receipt["gasUsed"]),
        succeeded=int(receipt.get("status", 1)) == 1,
    )

"""Process-wide component graph, built once and passed to request handlers."""
from __future__ import annotations

from dataclasses import dataclass

from .chains.evm import EvmLedgerClient
from .config import AppConfig
from .interfaces.ledger import LedgerClient
from .services import PositionReader, PredictionClient, TransactionOrchestrator


@dataclass(frozen=True)
class EngineContext:
    config: AppConfig
    ledger: LedgerClient
    reader: PositionReader
    predictor: PredictionClient
    orchestrator: TransactionOrchestrator

    @classmethod
    def from_config(cls, config: AppConfig, ledger: LedgerClient | None = None) -> "EngineContext":
        """Wire the components; ``ledger`` overrides the web3-backed client."""
        if ledger is None:
            ledger = EvmLedgerClient(
                config.ledger, receipt_timeout=config.engine.confirmation_timeout
            )
        reader = PositionReader(ledger, config.engine)
        predictor = PredictionClient(ledger, config.engine)
        orchestrator = TransactionOrchestrator(ledger, reader, predictor, config.engine)
        return cls(
            config=config,
            ledger=ledger,
            reader=reader,
            predictor=predictor,
            orchestrator=orchestrator,
        )

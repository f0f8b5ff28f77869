"""Error taxonomy shared by the read path, the write path and the HTTP layer."""
from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for errors surfaced to callers.

    ``kind`` is a stable machine-readable identifier; ``message`` is the short
    human summary and ``details`` carries the underlying cause, if any.
    """

    kind = "engine_error"

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "kind": self.kind,
            "details": self.details if self.details is not None else self.message,
        }


class ValidationError(EngineError):
    """Malformed client input; no collaborator call was made."""

    kind = "validation_error"


class InvalidAmountError(ValidationError):
    """An amount that cannot be represented in base units without loss."""

    kind = "invalid_amount"


class LedgerReadError(EngineError):
    """A read against the ledger failed."""

    kind = "ledger_read_error"


class LedgerWriteError(EngineError):
    """A state-changing ledger call was rejected or failed."""

    kind = "ledger_write_error"


class ConfirmationTimeoutError(EngineError):
    """The confirmation wait expired; the transaction outcome is unknown."""

    kind = "confirmation_timeout"

    def __init__(self, message: str, tx_hash: str, details: str | None = None) -> None:
        super().__init__(message, details)
        self.tx_hash = tx_hash

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["transactionHash"] = self.tx_hash
        return payload


class PredictionError(EngineError):
    """The AI Optimizer collaborator call failed."""

    kind = "prediction_error"

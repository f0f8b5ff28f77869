"""EVM ledger client built on web3.py."""
from .client import EvmLedgerClient

__all__ = ["EvmLedgerClient"]

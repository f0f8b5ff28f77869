"""Protocol interfaces for the Hyper Engine backend."""
from .ledger import LedgerClient

__all__ = ["LedgerClient"]

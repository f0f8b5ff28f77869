"""Hyper Engine backend: yield position aggregation and ledger write orchestration."""

__version__ = "3.0.0"

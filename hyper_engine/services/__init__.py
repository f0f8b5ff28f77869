"""Service modules"""
from .metrics import compute_metrics
from .orchestrator import TransactionOrchestrator
from .position_reader import PositionReader
from .prediction import PredictionClient

__all__ = ["compute_metrics", "PositionReader", "PredictionClient", "TransactionOrchestrator"]

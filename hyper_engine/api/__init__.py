"""HTTP surface."""
from .app import CONTEXT_KEY, create_app

__all__ = ["CONTEXT_KEY", "create_app"]

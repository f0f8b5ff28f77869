"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from web3 import Web3

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    rpc_url: str = ""
    rpc_timeout: int = 30
    private_key: str = ""
    hyper_engine_address: str = ""
    ai_optimizer_address: str = ""
    receipt_poll_interval: float = 1.0


@dataclass(frozen=True)
class EngineConfig:
    asset_decimals: int = 6
    min_deposit: int = 50
    strategy_count: int = 8
    confirmation_timeout: float = 120.0
    read_timeout: float = 30.0
    default_horizon_days: int = 30


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origin: str = "*"


@dataclass(frozen=True)
class AppConfig:
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_ledger(raw: dict[str, Any]) -> LedgerConfig:
    return LedgerConfig(
        rpc_url=raw.get("rpc_url", ""),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
        private_key=raw.get("private_key", ""),
        hyper_engine_address=raw.get("hyper_engine_address", ""),
        ai_optimizer_address=raw.get("ai_optimizer_address", ""),
        receipt_poll_interval=float(raw.get("receipt_poll_interval", 1.0)),
    )


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        asset_decimals=int(raw.get("asset_decimals", 6)),
        min_deposit=int(raw.get("min_deposit", 50)),
        strategy_count=int(raw.get("strategy_count", 8)),
        confirmation_timeout=float(raw.get("confirmation_timeout", 120.0)),
        read_timeout=float(raw.get("read_timeout", 30.0)),
        default_horizon_days=int(raw.get("default_horizon_days", 30)),
    )


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=raw.get("host", "0.0.0.0"),
        port=int(raw.get("port", 3000)),
        cors_origin=raw.get("cors_origin", "*"),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        ledger=_build_ledger(raw.get("ledger") or {}),
        engine=_build_engine(raw.get("engine") or {}),
        server=_build_server(raw.get("server") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    ledger = cfg.ledger
    if not ledger.rpc_url:
        raise ValueError("ledger.rpc_url must be configured")

    for name in ("hyper_engine_address", "ai_optimizer_address"):
        value = getattr(ledger, name)
        if not Web3.is_address(value):
            raise ValueError(f"ledger.{name} is not a valid address: '{value}'")

    if ledger.rpc_timeout <= 0:
        raise ValueError("ledger.rpc_timeout must be positive")

    engine = cfg.engine
    if engine.asset_decimals < 0:
        raise ValueError("engine.asset_decimals must not be negative")
    if engine.min_deposit < 0:
        raise ValueError("engine.min_deposit must not be negative")
    if engine.strategy_count <= 0:
        raise ValueError("engine.strategy_count must be positive")
    if engine.confirmation_timeout <= 0 or engine.read_timeout <= 0:
        raise ValueError("engine timeouts must be positive")
    if engine.default_horizon_days <= 0:
        raise ValueError("engine.default_horizon_days must be positive")

    if not ledger.private_key:
        logger.warning("No ledger.private_key configured; write endpoints will fail")

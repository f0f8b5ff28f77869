"""Command-line interface for the Hyper Engine backend."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from aiohttp import web

from .api import create_app, payloads
from .config import load_config
from .context import EngineContext
from .errors import EngineError
from .logging_setup import configure_logging
from .services import compute_metrics

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="hyper-engine",
        description="Hyper Engine yield position backend",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Run the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind host (overrides config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")

    metrics_parser = sub.add_parser("metrics", help="Print reward metrics for an address")
    metrics_parser.add_argument("address", help="User address")

    predict_parser = sub.add_parser("predict", help="Print predicted returns for an address")
    predict_parser.add_argument("address", help="User address")
    predict_parser.add_argument(
        "--days", type=int, default=None, help="Prediction horizon in days (default: 30)"
    )

    return parser


async def _serve(context: EngineContext, host: str, port: int) -> None:
    runner = web.AppRunner(create_app(context))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("Hyper Engine backend listening on %s:%d", host, port)
    logger.info("Hyper Engine contract: %s", context.config.ledger.hyper_engine_address)
    logger.info("AI Optimizer contract: %s", context.config.ledger.ai_optimizer_address)
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    context = EngineContext.from_config(config)

    if args.command == "serve":
        await _serve(
            context,
            args.host or config.server.host,
            args.port or config.server.port,
        )
        return 0

    try:
        if args.command == "metrics":
            snapshot = await context.reader.read_snapshot(args.address)
            payload = payloads.metrics_payload(compute_metrics(snapshot))
        elif args.command == "predict":
            prediction = await context.predictor.predict(args.address, args.days)
            payload = payloads.prediction_payload(prediction)
        else:
            build_parser().print_help()
            return 1
    except EngineError as exc:
        print(payloads.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 2

    print(payloads.dumps(payload, indent=2))
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))

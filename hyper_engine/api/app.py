"""aiohttp application with routes, error mapping and CORS."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from aiohttp import web

from .. import __version__
from ..context import EngineContext
from ..errors import ConfirmationTimeoutError, EngineError, ValidationError
from ..services import compute_metrics
from . import payloads

logger = logging.getLogger(__name__)

CONTEXT_KEY = web.AppKey("context", EngineContext)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def json_response(data: Any, status: int = 200) -> web.Response:
    return web.json_response(data, status=status, dumps=payloads.dumps)


def _status_for(exc: EngineError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, ConfirmationTimeoutError):
        return 504
    return 500


# ---------------------------------------------------------------------------
# Middlewares
# ---------------------------------------------------------------------------


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Render engine errors as JSON; one request's failure stays in its response."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except EngineError as exc:
        status = _status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.path, exc.message, exc.details)
        return json_response(exc.to_dict(), status=status)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_response(
            {"error": "Internal server error", "kind": "internal_error", "details": str(exc)},
            status=500,
        )


def cors_middleware(origin: str):
    def add_headers(headers) -> None:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        headers["Access-Control-Allow-Headers"] = "Content-Type"

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        if request.method == "OPTIONS":
            response: web.StreamResponse = web.Response(status=204)
        else:
            try:
                response = await handler(request)
            except web.HTTPException as exc:
                # 404/405 from the router
                add_headers(exc.headers)
                raise
        add_headers(response.headers)
        return response

    return middleware


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _json_body(request: web.Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Request body must be a JSON object", details=str(exc)) from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


async def health(request: web.Request) -> web.Response:
    ledger_cfg = request.app[CONTEXT_KEY].config.ledger
    return json_response(
        {
            "status": "online",
            "message": "Hyper Engine backend",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "contracts": {
                "hyperEngine": ledger_cfg.hyper_engine_address,
                "aiOptimizer": ledger_cfg.ai_optimizer_address,
            },
        }
    )


async def get_metrics(request: web.Request) -> web.Response:
    ctx = request.app[CONTEXT_KEY]
    snapshot = await ctx.reader.read_snapshot(request.query.get("userAddress"))
    return json_response(payloads.metrics_payload(compute_metrics(snapshot)))


async def post_deposit(request: web.Request) -> web.Response:
    body = await _json_body(request)
    result = await request.app[CONTEXT_KEY].orchestrator.deposit(
        body.get("walletAddress"), body.get("amount")
    )
    return json_response(payloads.deposit_payload(result))


async def post_withdraw(request: web.Request) -> web.Response:
    body = await _json_body(request)
    result = await request.app[CONTEXT_KEY].orchestrator.withdraw(
        body.get("walletAddress"), body.get("amount")
    )
    return json_response(payloads.withdraw_payload(result))


async def post_rebalance(request: web.Request) -> web.Response:
    body = await _json_body(request)
    result = await request.app[CONTEXT_KEY].orchestrator.rebalance(body.get("walletAddress"))
    return json_response(payloads.rebalance_payload(result))


async def get_prediction(request: web.Request) -> web.Response:
    prediction = await request.app[CONTEXT_KEY].predictor.predict(
        request.query.get("userAddress"), request.query.get("days")
    )
    return json_response(payloads.prediction_payload(prediction))


def create_app(context: EngineContext) -> web.Application:
    app = web.Application(
        middlewares=[cors_middleware(context.config.server.cors_origin), error_middleware]
    )
    app[CONTEXT_KEY] = context
    app.router.add_get("/", health)
    app.router.add_get("/api/hyper/metrics", get_metrics)
    app.router.add_post("/api/hyper/deposit", post_deposit)
    app.router.add_post("/api/hyper/withdraw", post_withdraw)
    app.router.add_post("/api/hyper/rebalance", post_rebalance)
    app.router.add_get("/api/hyper/predict", get_prediction)
    return app

"""aiohttp application exposing the collateral calculation over HTTP."""
from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from aiohttp import web

from ..config import AppConfig
from ..services import CollateralCalculator, build_calculator
from ..interfaces import EligibilitySource, PositionSource, PriceSource
from . import serializers

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "Collateral Service is running"
CORS_METHODS = "GET, POST, PUT, DELETE, OPTIONS"

CALCULATOR_KEY = web.AppKey("calculator", CollateralCalculator)
CORS_ORIGINS_KEY = web.AppKey("cors_origins", frozenset)
POSITION_SOURCE_KEY = web.AppKey("position_source", PositionSource)
ELIGIBILITY_SOURCE_KEY = web.AppKey("eligibility_source", EligibilitySource)
PRICE_SOURCE_KEY = web.AppKey("price_source", PriceSource)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def _read_json(request: web.Request) -> Any:
    """Decode the request body, mapping malformed JSON or text to 400."""
    try:
        return await request.json()
    except ValueError:  # JSONDecodeError and UnicodeDecodeError
        raise web.HTTPBadRequest(
            text=json.dumps({"error": "Request body must be valid JSON"}),
            content_type="application/json",
        )


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Allow configured browser origins to call ``/api/*``."""
    origin = request.headers.get("Origin")
    allowed = (
        origin is not None
        and request.path.startswith("/api/")
        and origin in request.app[CORS_ORIGINS_KEY]
    )

    if (
        allowed
        and request.method == "OPTIONS"
        and "Access-Control-Request-Method" in request.headers
    ):
        response: web.StreamResponse = web.Response(status=204)
        response.headers["Access-Control-Allow-Methods"] = CORS_METHODS
        response.headers["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", "*"
        )
        response.headers["Access-Control-Max-Age"] = "3600"
    else:
        response = await handler(request)

    if allowed:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"
    return response


# ---------------------------------------------------------------------------
# Collateral endpoints
# ---------------------------------------------------------------------------


async def calculate_collateral(request: web.Request) -> web.Response:
    """POST /api/collateral/calculate: body is a JSON array of account ids."""
    payload = await _read_json(request)
    try:
        account_ids = serializers.parse_id_list(payload, "accountIds")
    except ValueError as e:
        logger.warning("Rejected calculation request: %s", e)
        return _error(str(e), status=400)

    try:
        results = request.app[CALCULATOR_KEY].calculate_collateral(account_ids)
    except Exception:
        logger.exception("Error calculating collateral for %s", account_ids)
        return _error("Collateral calculation failed", status=500)

    return web.json_response([serializers.result_to_dict(r) for r in results])


async def health(request: web.Request) -> web.Response:
    """GET /api/collateral/health: liveness only, no downstream calls."""
    return web.Response(text=HEALTH_MESSAGE)


# ---------------------------------------------------------------------------
# Mock upstream endpoints
# ---------------------------------------------------------------------------


async def mock_positions(request: web.Request) -> web.Response:
    try:
        account_ids = serializers.parse_id_list(
            await _read_json(request), "accountIds", allow_empty=True
        )
    except ValueError as e:
        return _error(str(e), status=400)
    accounts = request.app[POSITION_SOURCE_KEY].get_positions(account_ids)
    return web.json_response([serializers.account_position_to_dict(a) for a in accounts])


async def mock_eligibility(request: web.Request) -> web.Response:
    try:
        account_ids, asset_ids = serializers.parse_eligibility_request(
            await _read_json(request)
        )
    except ValueError as e:
        return _error(str(e), status=400)
    rules = request.app[ELIGIBILITY_SOURCE_KEY].get_eligibility(account_ids, asset_ids)
    return web.json_response([serializers.rule_to_dict(r) for r in rules])


async def mock_prices(request: web.Request) -> web.Response:
    try:
        asset_ids = serializers.parse_id_list(
            await _read_json(request), "assetIds", allow_empty=True
        )
    except ValueError as e:
        return _error(str(e), status=400)
    prices = request.app[PRICE_SOURCE_KEY].get_prices(asset_ids)
    return web.json_response([serializers.price_to_dict(p) for p in prices])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_app(calculator: CollateralCalculator, config: AppConfig) -> web.Application:
    """Build the aiohttp application around ``calculator``.

    The mock upstream endpoints serve the calculator's own sources, so they
    always show the data a calculation reads.
    """
    app = web.Application(middlewares=[cors_middleware])
    app[CALCULATOR_KEY] = calculator
    app[CORS_ORIGINS_KEY] = frozenset(config.server.cors_origins)
    app[POSITION_SOURCE_KEY] = calculator.position_source
    app[ELIGIBILITY_SOURCE_KEY] = calculator.eligibility_source
    app[PRICE_SOURCE_KEY] = calculator.price_source

    app.router.add_post("/api/collateral/calculate", calculate_collateral)
    app.router.add_get("/api/collateral/health", health)
    app.router.add_post("/api/mock/positions", mock_positions)
    app.router.add_post("/api/mock/eligibility", mock_eligibility)
    app.router.add_post("/api/mock/prices", mock_prices)
    return app


def run_server(config: AppConfig) -> None:
    """Serve the API until interrupted."""
    app = create_app(build_calculator(config.dataset), config)
    logger.info(
        "Starting collateral service on http://%s:%d", config.server.host, config.server.port
    )
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)

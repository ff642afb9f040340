"""JSON API endpoints: OHLCV candles, current price, collector status, health."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pricefeed.exceptions import InvalidParameterError, NoDataError

log = structlog.get_logger(__name__)

router = APIRouter()

SERVICE_NAME = "Pool Price API"


def _iso_from_ms(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        content={"success": False, "error": message}, status_code=status_code
    )


def _parse_limit(raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        limit = int(raw)
    except ValueError as e:
        raise InvalidParameterError(f"limit must be an integer, got {raw!r}") from e
    if limit < 1:
        raise InvalidParameterError(f"limit must be at least 1, got {limit}")
    return limit


@router.get("/api/ohlcv/{token}")
async def get_ohlcv(
    request: Request,
    token: str,
    interval: str | None = None,
    limit: str | None = None,
) -> JSONResponse:
    """OHLCV candles for a token. Unknown intervals fall back to hourly."""
    api_settings = request.app.state.api_settings
    query_service = request.app.state.query_service
    interval = interval or api_settings.default_interval

    try:
        candle_limit = _parse_limit(limit, api_settings.default_limit)
        candles = await query_service.get_candles(token, interval, candle_limit)
    except InvalidParameterError as e:
        return _error(str(e), 400)
    except Exception as e:
        log.error("api_error", endpoint="ohlcv", token=token, error=str(e), exc_info=True)
        return _error(str(e), 500)

    return JSONResponse(content={
        "success": True,
        "token": token,
        "interval": interval,
        "candles": [c.to_dict() for c in candles],
    })


@router.get("/api/price/{token}")
async def get_price(request: Request, token: str) -> JSONResponse:
    """Latest price and 24h percentage change for a token."""
    query_service = request.app.state.query_service

    try:
        current = await query_service.get_current_price(token)
    except NoDataError:
        return _error("No data found for token", 404)
    except Exception as e:
        log.error("api_error", endpoint="price", token=token, error=str(e), exc_info=True)
        return _error(str(e), 500)

    return JSONResponse(content={
        "success": True,
        "token": token,
        "price": float(current.price),
        "priceChange24hPercent": float(current.price_change_24h_percent),
        "timestamp": _iso_from_ms(current.timestamp_ms),
    })


@router.get("/api/collector/status")
async def get_collector_status(request: Request) -> JSONResponse:
    """Collector loop state and the outcome of its last round."""
    collector = getattr(request.app.state, "collector", None)
    if collector is None:
        return JSONResponse(content={"enabled": False})
    return JSONResponse(content={"enabled": True, **collector.status()})


@router.get("/health")
async def health() -> JSONResponse:
    """Liveness only; does not touch the store or the collector."""
    return JSONResponse(content={
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    })

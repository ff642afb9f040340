"""Entry point for the pool price feed.

Runs the price collector and the HTTP API in a single asyncio event loop.
When the API is enabled (default) uvicorn owns the loop and the FastAPI
lifespan starts and stops the collector; otherwise the collector runs on its
own until SIGINT/SIGTERM.

Component wiring order (in _build_components):
1. PriceDatabase (SQLite connection manager)
2. SqliteSampleStore (sample reads/writes)
3. SuiClient (pool object reader)
4. PriceCollector (periodic sampling)
5. QueryService (candles and current price)
"""

import asyncio
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from pricefeed import __version__
from pricefeed.chain.sui_client import SuiClient
from pricefeed.collector import PriceCollector
from pricefeed.config import AppSettings
from pricefeed.data.database import PriceDatabase
from pricefeed.data.sqlite_store import SqliteSampleStore
from pricefeed.logging import get_logger, setup_logging
from pricefeed.query import QueryService


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Create the component graph. Nothing is connected yet."""
    database = PriceDatabase(settings.store.db_path)
    store = SqliteSampleStore(database)
    chain_client = SuiClient(settings.sui)
    collector = PriceCollector(
        chain_client=chain_client,
        store=store,
        pools=settings.pools,
        settings=settings.collector,
    )
    query_service = QueryService(store)

    return {
        "database": database,
        "store": store,
        "chain_client": chain_client,
        "collector": collector,
        "query_service": query_service,
    }


@asynccontextmanager
async def _running(settings: AppSettings, components: dict[str, Any]) -> AsyncIterator[None]:
    """Connect resources and start the collector; undo both on exit."""
    logger = get_logger("pricefeed.main")

    await components["database"].connect()
    await components["chain_client"].connect()

    collector: PriceCollector = components["collector"]
    if settings.collector.enabled:
        await collector.start()
    else:
        logger.info("price_collector_disabled")

    try:
        yield
    finally:
        await collector.stop()
        await components["chain_client"].close()
        await components["database"].close()
        logger.info("pricefeed_stopped")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire components onto app.state for the lifetime of the API server."""
    settings: AppSettings = app.state.settings
    components = app.state.components

    async with _running(settings, components):
        app.state.query_service = components["query_service"]
        if settings.collector.enabled:
            app.state.collector = components["collector"]
        get_logger("pricefeed.main").info("lifespan_started")
        yield


async def _run_collector_only(settings: AppSettings, components: dict[str, Any]) -> None:
    """Run the collector without a web server until SIGINT/SIGTERM."""
    logger = get_logger("pricefeed.main")
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)

    async with _running(settings, components):
        await stop_event.wait()


async def run() -> None:
    """Run the price feed according to AppSettings."""
    settings = AppSettings()

    setup_logging(
        settings.log_level,
        service="pricefeed",
        version=__version__,
        pools=[p.name for p in settings.pools],
    )
    logger = get_logger("pricefeed.main")

    components = _build_components(settings)

    logger.info(
        "pricefeed_starting",
        api_enabled=settings.api.enabled,
        collector_enabled=settings.collector.enabled,
    )

    if settings.api.enabled:
        from pricefeed.api.app import create_app

        app = create_app(settings.api, lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
    elif settings.collector.enabled:
        await _run_collector_only(settings, components)
    else:
        logger.error("nothing_to_run", note="Both API_ENABLED and COLLECTOR_ENABLED are false")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()

from __future__ import annotations

import asyncio

import uvicorn
from loguru import logger

from api.server import build_app
from services.config_service import ConfigService, TraderSettings
from services.log_config import configure_logging
from services.orchestrator import TraderOrchestrator


async def main() -> None:
    settings = TraderSettings()
    configure_logging(settings.LOG_LEVEL)
    config = ConfigService(settings).load()

    orchestrator = TraderOrchestrator(config)
    app = build_app(orchestrator.engine, orchestrator.bus, orchestrator.relays)
    server = uvicorn.Server(
        uvicorn.Config(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
    )

    logger.info("Starting {} paper trader on {}:{}", config.symbol, settings.HOST, settings.PORT)
    await orchestrator.start()
    try:
        await server.serve()
    finally:
        await orchestrator.stop()


if __name__ == "__main__":
    asyncio.run(main())

from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from adapters.base import MarketStream
from adapters.binance_stream import BinanceTradeStream
from adapters.paper import PaperBroker
from engine.core import TradingEngine
from engine.fsm import TradingStateMachine
from engine.ledger import PnlLedger
from engine.signal_bus import SignalBus
from services.config_service import RuntimeConfig, build_anchor_policy
from services.relays import RelayRegistry


class TraderOrchestrator:
    """Owns every long-lived component and ties their tasks to one start/stop."""

    def __init__(self, config: RuntimeConfig, stream: Optional[MarketStream] = None) -> None:
        self.config = config
        self.bus = SignalBus()
        self.ledger = PnlLedger(config.symbol)
        self.broker = PaperBroker(config.symbol, self.ledger)
        self.fsm = TradingStateMachine(
            symbol=config.symbol,
            broker=self.broker,
            ledger=self.ledger,
            policy=build_anchor_policy(config),
            order_qty=config.order_qty,
        )
        self.engine = TradingEngine(self.fsm, self.ledger, self.bus, queue_size=config.event_queue_size)
        self.relays = RelayRegistry(config.relay_urls, timeout_s=config.relay_timeout_s)
        if stream is None and config.stream_enabled:
            stream = BinanceTradeStream(config.symbol, reconnect_max_s=config.stream_reconnect_max_s)
        self.stream = stream
        self._tasks: list[asyncio.Task] = []

    async def start(self) -> None:
        if self._tasks:
            return
        await self.relays.start()
        self._tasks.append(asyncio.create_task(self.engine.run_forever()))
        if self.stream is not None:
            self._tasks.append(asyncio.create_task(self._pump_ticks(self.stream)))
        logger.info("Trader started for {}", self.config.symbol)

    async def _pump_ticks(self, stream: MarketStream) -> None:
        async for tick in stream.ticks():
            await self.engine.submit_tick(tick)

    async def stop(self) -> None:
        if self.stream is not None:
            await self.stream.close()
        self.engine.close()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        await self.relays.stop()
        logger.info("Trader stopped for {}", self.config.symbol)

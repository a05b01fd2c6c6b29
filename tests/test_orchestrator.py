import asyncio
from decimal import Decimal

from adapters.base import MarketStream
from engine.models import Tick
from services.config_service import ConfigService, TraderSettings
from services.orchestrator import TraderOrchestrator


class ListStream(MarketStream):
    def __init__(self, prices):
        self.prices = prices
        self.closed = False

    async def ticks(self):
        for i, price in enumerate(self.prices):
            yield Tick(price=Decimal(price), ts=i)

    async def close(self):
        self.closed = True


def test_orchestrator_pumps_stream_into_engine():
    config = ConfigService(TraderSettings(_env_file=None, STREAM_ENABLED=False)).load()
    stream = ListStream(["100", "100.5", "99.9"])
    orchestrator = TraderOrchestrator(config, stream=stream)

    async def _run():
        await orchestrator.start()
        await asyncio.sleep(0.05)
        await orchestrator.engine.queue.join()
        status = orchestrator.engine.status()
        await orchestrator.stop()
        return status

    status = asyncio.run(_run())
    assert status["running"] is True
    assert status["pnl"].last_price == Decimal("99.9")
    assert stream.closed
    assert orchestrator.engine.running is False


def test_orchestrator_without_stream():
    config = ConfigService(TraderSettings(_env_file=None, STREAM_ENABLED=False)).load()
    orchestrator = TraderOrchestrator(config)
    assert orchestrator.stream is None
    assert orchestrator.fsm.get_state() == "FLAT"


def test_stop_detaches_engine_from_bus():
    config = ConfigService(TraderSettings(_env_file=None, STREAM_ENABLED=False)).load()
    orchestrator = TraderOrchestrator(config)

    async def _run():
        await orchestrator.start()
        await orchestrator.stop()

    asyncio.run(_run())
    while not orchestrator.engine.queue.empty():
        orchestrator.engine.queue.get_nowait()
    orchestrator.bus.emit_buy()
    assert orchestrator.engine.queue.empty()

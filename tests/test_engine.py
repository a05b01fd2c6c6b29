import asyncio
from decimal import Decimal

from adapters.paper import PaperBroker
from engine.core import TradingEngine
from engine.fsm import TradingStateMachine
from engine.ledger import PnlLedger
from engine.models import Signal, Tick
from engine.signal_bus import SignalBus
from strategies.offsets import FixedOffsetPolicy


def _engine(queue_size=100):
    ledger = PnlLedger("BTCUSDT")
    policy = FixedOffsetPolicy(Decimal("1"), Decimal("2"), Decimal("5"), Decimal("3"))
    fsm = TradingStateMachine("BTCUSDT", PaperBroker("BTCUSDT", ledger), ledger, policy, Decimal("1"))
    bus = SignalBus()
    return TradingEngine(fsm, ledger, bus, queue_size=queue_size), bus


def _tick(price):
    return Tick(price=Decimal(str(price)), ts=0)


def test_events_are_applied_in_arrival_order():
    engine, bus = _engine()

    async def _run():
        task = asyncio.create_task(engine.run_forever())
        await engine.submit_tick(_tick(100))
        bus.emit_buy()
        await engine.submit_tick(_tick(101))
        await engine.submit_tick(_tick(107))
        await engine.queue.join()
        engine.stop()
        await asyncio.wait_for(task, timeout=1)

    asyncio.run(_run())
    status = engine.status()
    assert status["state"] == "FLAT"
    assert status["pnl"].realized_pnl == Decimal("5")
    assert status["pnl"].trade_count == 2
    assert status["running"] is False


def test_signals_are_queued_not_applied_inline():
    engine, bus = _engine()
    engine.handle(_tick(100))
    bus.emit_buy()
    assert engine.fsm.get_state() == "FLAT"
    assert engine.queue.get_nowait() is Signal.BUY


def test_full_queue_drops_signal_without_raising():
    engine, bus = _engine(queue_size=1)
    bus.emit_buy()
    bus.emit_sell()
    assert engine.queue.qsize() == 1
    assert engine.queue.get_nowait() is Signal.BUY


def test_handler_error_does_not_stop_consumer():
    engine, bus = _engine()

    async def _run():
        task = asyncio.create_task(engine.run_forever())
        await engine.queue.put("not-an-event")
        await engine.submit_tick(_tick(100))
        await engine.queue.join()
        engine.stop()
        await asyncio.wait_for(task, timeout=1)

    asyncio.run(_run())
    assert engine.ledger.get_snapshot().last_price == Decimal("100")


def test_close_unsubscribes_from_bus():
    engine, bus = _engine()
    engine.close()
    while not engine.queue.empty():
        engine.queue.get_nowait()
    bus.emit_buy()
    assert engine.queue.empty()

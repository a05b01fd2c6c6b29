from __future__ import annotations

import asyncio
from typing import Any, Union

from loguru import logger

from engine.fsm import TradingStateMachine
from engine.ledger import PnlLedger
from engine.models import Signal, Tick
from engine.signal_bus import SignalBus


class _Wakeup:
    pass


Event = Union[Tick, Signal, _Wakeup]


class TradingEngine:
    """Serializes ticks and bus signals into one consumer that drives the FSM."""

    def __init__(
        self,
        fsm: TradingStateMachine,
        ledger: PnlLedger,
        bus: SignalBus,
        queue_size: int = 1000,
    ) -> None:
        self.fsm = fsm
        self.ledger = ledger
        self.bus = bus
        self.queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=queue_size)
        self._running = False
        self._unsubscribe = bus.subscribe(self._enqueue_signal)

    @property
    def running(self) -> bool:
        return self._running

    async def submit_tick(self, tick: Tick) -> None:
        await self.queue.put(tick)

    def _enqueue_signal(self, signal: Signal) -> None:
        try:
            self.queue.put_nowait(signal)
        except asyncio.QueueFull:
            logger.error("Event queue full, dropping {} signal", signal.value)

    async def run_forever(self) -> None:
        self._running = True
        logger.info("Engine started for {}", self.fsm.symbol)
        while self._running:
            event = await self.queue.get()
            try:
                self.handle(event)
            except Exception as exc:
                logger.exception("Engine error on {}: {}", event, exc)
            finally:
                self.queue.task_done()
        logger.info("Engine stopped for {}", self.fsm.symbol)

    def handle(self, event: Event) -> None:
        if isinstance(event, Tick):
            self.fsm.on_tick(event)
        elif isinstance(event, Signal):
            logger.info("Signal {} received in state {}", event.value, self.fsm.get_state())
            self.fsm.on_signal(event)
        elif isinstance(event, _Wakeup):
            return
        else:
            raise TypeError(f"Unsupported event: {event!r}")

    def stop(self) -> None:
        self._running = False
        # wake the consumer if it is parked on an empty queue
        try:
            self.queue.put_nowait(_Wakeup())
        except asyncio.QueueFull:
            pass

    def close(self) -> None:
        self.stop()
        self._unsubscribe()

    def status(self) -> dict[str, Any]:
        return {
            "state": self.fsm.get_state(),
            "position": self.fsm.get_position(),
            "anchors": self.fsm.get_anchors(),
            "pnl": self.ledger.get_snapshot(),
            "running": self._running,
        }

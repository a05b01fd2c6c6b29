from __future__ import annotations

from typing import Callable

from loguru import logger

from engine.models import Signal

SignalHandler = Callable[[Signal], None]


class SignalBus:
    """Synchronous BUY/SELL fan-out to subscribers in registration order."""

    def __init__(self) -> None:
        self._handlers: list[SignalHandler] = []

    def subscribe(self, handler: SignalHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def emit_buy(self) -> None:
        self.emit(Signal.BUY)

    def emit_sell(self) -> None:
        self.emit(Signal.SELL)

    def emit(self, signal: Signal) -> None:
        # snapshot so a handler that (un)subscribes does not alter this delivery
        for handler in list(self._handlers):
            try:
                handler(signal)
            except Exception as exc:
                logger.exception("Signal handler {} failed on {}: {}", handler, signal.value, exc)

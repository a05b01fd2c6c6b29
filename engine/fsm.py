from __future__ import annotations

from decimal import Decimal
from typing import Optional

from loguru import logger

from adapters.base import BrokerAdapter
from engine.ledger import PnlLedger
from engine.models import Anchors, FsmState, Position, Signal, Tick
from strategies.base import AnchorPolicy


class TradingStateMachine:
    """FLAT -> ARMED_LONG -> LONG -> FLAT breakout state machine.

    Not thread-safe: ticks and signals must reach it from a single consumer
    (see ``engine.core.TradingEngine``). Reads return immutable copies.
    """

    def __init__(
        self,
        symbol: str,
        broker: BrokerAdapter,
        ledger: PnlLedger,
        policy: AnchorPolicy,
        order_qty: Decimal,
    ) -> None:
        if order_qty <= 0:
            raise ValueError(f"order_qty must be positive, got {order_qty}")
        self.symbol = symbol
        self.broker = broker
        self.ledger = ledger
        self.policy = policy
        self.order_qty = order_qty
        self._state = FsmState.FLAT
        self._anchors = Anchors()
        self._last_price: Optional[Decimal] = None

    def get_state(self) -> str:
        return self._state.value

    def get_position(self) -> Optional[Position]:
        position = self.ledger.get_position()
        if position.side == "FLAT":
            return None
        return position

    def get_anchors(self) -> Optional[Anchors]:
        if self._anchors.is_empty():
            return None
        return self._anchors

    def on_tick(self, tick: Tick) -> None:
        price = tick.price
        self.ledger.update_mark_price(price)
        self._last_price = price

        if self._state is FsmState.ARMED_LONG:
            trigger = self._anchors.buy_entry_trigger
            stop = self._anchors.buy_stop
            if trigger is not None and price >= trigger:
                self._enter_long(trigger)
            elif stop is not None and price <= stop:
                logger.info("{} arm invalidated: price {} crossed buy stop {}", self.symbol, price, stop)
                self._transition(FsmState.FLAT, Anchors())
        elif self._state is FsmState.LONG:
            stop = self._anchors.sell_stop
            take_profit = self._anchors.sell_entry_trigger
            if stop is not None and price <= stop:
                self._exit_long(stop, "stop")
            elif take_profit is not None and price >= take_profit:
                self._exit_long(take_profit, "take_profit")

    def on_signal(self, signal: Signal) -> None:
        if signal is Signal.BUY:
            self._on_buy()
        elif signal is Signal.SELL:
            self._on_sell()

    def _on_buy(self) -> None:
        if self._state is not FsmState.FLAT:
            logger.info("{} BUY ignored in state {}", self.symbol, self._state.value)
            return
        if self._last_price is None:
            logger.warning("{} BUY ignored: no tick received yet", self.symbol)
            return
        trigger, stop = self.policy.entry_anchors(self._last_price)
        self._transition(FsmState.ARMED_LONG, Anchors(buy_entry_trigger=trigger, buy_stop=stop))

    def _on_sell(self) -> None:
        if self._state is FsmState.FLAT:
            logger.info("{} SELL ignored while flat", self.symbol)
        elif self._state is FsmState.ARMED_LONG:
            logger.info("{} arm cancelled by SELL signal", self.symbol)
            self._transition(FsmState.FLAT, Anchors())
        else:
            self._exit_long(self._last_price, "signal")

    def _enter_long(self, price: Decimal) -> None:
        self.broker.place_limit_buy(self.order_qty, price, {"reason": "entry_trigger"})
        take_profit, stop = self.policy.exit_anchors(price)
        self._transition(FsmState.LONG, Anchors(sell_entry_trigger=take_profit, sell_stop=stop))

    def _exit_long(self, price: Optional[Decimal], reason: str) -> None:
        qty = self.broker.get_open_qty()
        if qty > 0 and price is not None:
            self.broker.place_limit_sell(qty, price, {"reason": reason})
        self._transition(FsmState.FLAT, Anchors())

    def _transition(self, state: FsmState, anchors: Anchors) -> None:
        logger.info("{} {} -> {} anchors={}", self.symbol, self._state.value, state.value, anchors)
        self._state = state
        self._anchors = anchors

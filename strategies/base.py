from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Optional


class AnchorPolicy(ABC):
    """Places breakout entry and exit levels around a reference price."""

    def __init__(self, price_tick: Optional[Decimal] = None) -> None:
        self.price_tick = price_tick

    @abstractmethod
    def entry_anchors(self, price: Decimal) -> tuple[Decimal, Decimal]:
        """Return (buy_entry_trigger, buy_stop) for arming at ``price``."""
        raise NotImplementedError

    @abstractmethod
    def exit_anchors(self, entry_price: Decimal) -> tuple[Decimal, Decimal]:
        """Return (take_profit, protective_stop) for a long filled at ``entry_price``."""
        raise NotImplementedError

    def _round_up(self, price: Decimal) -> Decimal:
        return self._quantize(price, ROUND_CEILING)

    def _round_down(self, price: Decimal) -> Decimal:
        return self._quantize(price, ROUND_FLOOR)

    def _quantize(self, price: Decimal, rounding: str) -> Decimal:
        if not self.price_tick:
            return price
        steps = (price / self.price_tick).to_integral_value(rounding=rounding)
        return steps * self.price_tick

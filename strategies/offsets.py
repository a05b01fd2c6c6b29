from __future__ import annotations

from decimal import Decimal
from typing import Optional

from strategies.base import AnchorPolicy

_HUNDRED = Decimal("100")


class PercentOffsetPolicy(AnchorPolicy):
    """Anchors at fixed percentages of the reference price."""

    def __init__(
        self,
        entry_offset_pct: Decimal = Decimal("0.1"),
        entry_stop_pct: Decimal = Decimal("0.2"),
        take_profit_pct: Decimal = Decimal("0.5"),
        stop_loss_pct: Decimal = Decimal("0.3"),
        price_tick: Optional[Decimal] = None,
    ) -> None:
        super().__init__(price_tick)
        for name, value in (
            ("entry_offset_pct", entry_offset_pct),
            ("entry_stop_pct", entry_stop_pct),
            ("take_profit_pct", take_profit_pct),
            ("stop_loss_pct", stop_loss_pct),
        ):
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        self.entry_offset_pct = entry_offset_pct
        self.entry_stop_pct = entry_stop_pct
        self.take_profit_pct = take_profit_pct
        self.stop_loss_pct = stop_loss_pct

    def entry_anchors(self, price: Decimal) -> tuple[Decimal, Decimal]:
        trigger = price * (1 + self.entry_offset_pct / _HUNDRED)
        stop = price * (1 - self.entry_stop_pct / _HUNDRED)
        return self._round_up(trigger), self._round_down(stop)

    def exit_anchors(self, entry_price: Decimal) -> tuple[Decimal, Decimal]:
        take_profit = entry_price * (1 + self.take_profit_pct / _HUNDRED)
        stop = entry_price * (1 - self.stop_loss_pct / _HUNDRED)
        return self._round_up(take_profit), self._round_down(stop)


class FixedOffsetPolicy(AnchorPolicy):
    """Anchors at fixed absolute price distances."""

    def __init__(
        self,
        entry_offset: Decimal,
        entry_stop: Decimal,
        take_profit: Decimal,
        stop_loss: Decimal,
        price_tick: Optional[Decimal] = None,
    ) -> None:
        super().__init__(price_tick)
        for name, value in (
            ("entry_offset", entry_offset),
            ("entry_stop", entry_stop),
            ("take_profit", take_profit),
            ("stop_loss", stop_loss),
        ):
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        self.entry_offset = entry_offset
        self.entry_stop = entry_stop
        self.take_profit = take_profit
        self.stop_loss = stop_loss

    def entry_anchors(self, price: Decimal) -> tuple[Decimal, Decimal]:
        return self._round_up(price + self.entry_offset), self._round_down(price - self.entry_stop)

    def exit_anchors(self, entry_price: Decimal) -> tuple[Decimal, Decimal]:
        return self._round_up(entry_price + self.take_profit), self._round_down(entry_price - self.stop_loss)

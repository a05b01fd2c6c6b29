from __future__ import annotations

import time
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Optional

from loguru import logger

from engine.models import PnlSnapshot, Position, Signal, TradeRecord, to_decimal

_ZERO = Decimal("0")


class LedgerInvariantError(RuntimeError):
    """Raised when a ledger mutation would leave the position in an impossible state."""


def _now_ms() -> int:
    return int(time.time() * 1000)


class PnlLedger:
    """In-memory long-only position and PnL book for a single symbol.

    Every mutation returns a fresh snapshot. Trade records are frozen and the
    history is handed out as a tuple, so readers never hold live state.
    """

    def __init__(self, symbol: str, clock: Optional[Callable[[], int]] = None) -> None:
        self.symbol = symbol
        self._clock = clock or _now_ms
        self._position_qty = _ZERO
        self._avg_price = _ZERO
        self._last_price: Optional[Decimal] = None
        self._realized_pnl = _ZERO
        self._trades: list[TradeRecord] = []

    def get_open_qty(self) -> Decimal:
        return self._position_qty

    def get_position(self) -> Position:
        if self._position_qty == 0:
            return Position.flat()
        return Position(side="LONG", qty=self._position_qty, avg_price=self._avg_price)

    def update_mark_price(self, price: Any) -> PnlSnapshot:
        self._last_price = to_decimal(price)
        return self.get_snapshot()

    def get_snapshot(self) -> PnlSnapshot:
        unrealized = self._unrealized_pnl()
        return PnlSnapshot(
            symbol=self.symbol,
            position_qty=self._position_qty,
            avg_price=self._avg_price,
            last_price=self._last_price,
            realized_pnl=self._realized_pnl,
            unrealized_pnl=unrealized,
            total_pnl=self._realized_pnl + unrealized,
            trade_count=len(self._trades),
            trades=tuple(self._trades),
        )

    def open_position(self, side: Signal | str, qty: Any, price: Any, meta: Optional[dict] = None) -> PnlSnapshot:
        if side != Signal.BUY:
            logger.warning("Ignoring open_position with side {} (long-only)", side)
            return self.get_snapshot()
        qty = to_decimal(qty)
        price = to_decimal(price)
        if qty <= 0:
            logger.warning("Ignoring open_position with non-positive qty {}", qty)
            return self.get_snapshot()

        total_cost = self._avg_price * self._position_qty + price * qty
        new_qty = self._position_qty + qty
        self._avg_price = total_cost / new_qty if new_qty > 0 else _ZERO
        self._position_qty = new_qty
        self._trades.append(
            TradeRecord(
                ts=self._clock(),
                type="OPEN",
                side="BUY",
                qty=qty,
                price=price,
                meta=MappingProxyType(dict(meta or {})),
            )
        )
        return self.get_snapshot()

    def close_position(self, side: Signal | str, qty: Any, price: Any, meta: Optional[dict] = None) -> PnlSnapshot:
        if side != Signal.SELL:
            logger.warning("Ignoring close_position with side {} (long-only)", side)
            return self.get_snapshot()
        qty = to_decimal(qty)
        price = to_decimal(price)
        if qty <= 0:
            logger.warning("Ignoring close_position with non-positive qty {}", qty)
            return self.get_snapshot()
        if qty > self._position_qty:
            logger.warning("Clamping close qty {} to held qty {}", qty, self._position_qty)
            qty = self._position_qty
        if qty == 0:
            logger.warning("Ignoring close_position while flat")
            return self.get_snapshot()

        remaining = self._position_qty - qty
        if remaining < 0:
            raise LedgerInvariantError(f"negative position after close: {remaining}")

        pnl = (price - self._avg_price) * qty
        self._realized_pnl += pnl
        self._position_qty = remaining
        if self._position_qty <= 0:
            self._position_qty = _ZERO
            self._avg_price = _ZERO
        self._trades.append(
            TradeRecord(
                ts=self._clock(),
                type="CLOSE",
                side="SELL",
                qty=qty,
                price=price,
                pnl=pnl,
                meta=MappingProxyType(dict(meta or {})),
            )
        )
        return self.get_snapshot()

    def _unrealized_pnl(self) -> Decimal:
        if self._last_price is None or self._position_qty == 0:
            return _ZERO
        return (self._last_price - self._avg_price) * self._position_qty

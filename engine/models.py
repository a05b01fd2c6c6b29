from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Mapping, Optional


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        # str() keeps float inputs at their shortest repr instead of the binary expansion
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class FsmState(str, Enum):
    FLAT = "FLAT"
    ARMED_LONG = "ARMED_LONG"
    LONG = "LONG"


@dataclass(frozen=True)
class Tick:
    price: Decimal
    ts: int


@dataclass(frozen=True)
class Position:
    side: Literal["LONG", "FLAT"]
    qty: Decimal
    avg_price: Decimal

    @classmethod
    def flat(cls) -> "Position":
        return cls(side="FLAT", qty=Decimal("0"), avg_price=Decimal("0"))


@dataclass(frozen=True)
class Anchors:
    buy_entry_trigger: Optional[Decimal] = None
    buy_stop: Optional[Decimal] = None
    sell_entry_trigger: Optional[Decimal] = None
    sell_stop: Optional[Decimal] = None

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.buy_entry_trigger, self.buy_stop, self.sell_entry_trigger, self.sell_stop)
        )


@dataclass(frozen=True)
class TradeRecord:
    ts: int
    type: Literal["OPEN", "CLOSE"]
    side: Literal["BUY", "SELL"]
    qty: Decimal
    price: Decimal
    pnl: Optional[Decimal] = None
    meta: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class PnlSnapshot:
    symbol: str
    position_qty: Decimal
    avg_price: Decimal
    last_price: Optional[Decimal]
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    trade_count: int
    trades: tuple[TradeRecord, ...]

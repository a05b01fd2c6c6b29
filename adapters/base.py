from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, AsyncIterator, Optional

from engine.models import PnlSnapshot, Tick


class BrokerAdapter(ABC):
    @abstractmethod
    def place_limit_buy(self, qty: Any, price: Any, meta: Optional[dict] = None) -> PnlSnapshot:
        raise NotImplementedError

    @abstractmethod
    def place_limit_sell(self, qty: Any, price: Any, meta: Optional[dict] = None) -> PnlSnapshot:
        raise NotImplementedError

    @abstractmethod
    def get_open_qty(self) -> Decimal:
        raise NotImplementedError


class MarketStream(ABC):
    @abstractmethod
    def ticks(self) -> AsyncIterator[Tick]:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from loguru import logger

from adapters.base import BrokerAdapter
from engine.ledger import PnlLedger
from engine.models import PnlSnapshot, Signal


class PaperBroker(BrokerAdapter):
    """Fills every order immediately and completely at the requested price."""

    def __init__(self, symbol: str, ledger: PnlLedger) -> None:
        self.symbol = symbol
        self.ledger = ledger

    def place_limit_buy(self, qty: Any, price: Any, meta: Optional[dict] = None) -> PnlSnapshot:
        meta = meta or {}
        logger.info("Paper LIMIT BUY {} qty={} price={} meta={}", self.symbol, qty, price, meta)
        return self.ledger.open_position(Signal.BUY, qty, price, meta)

    def place_limit_sell(self, qty: Any, price: Any, meta: Optional[dict] = None) -> PnlSnapshot:
        meta = meta or {}
        logger.info("Paper LIMIT SELL {} qty={} price={} meta={}", self.symbol, qty, price, meta)
        return self.ledger.close_position(Signal.SELL, qty, price, meta)

    def get_open_qty(self) -> Decimal:
        return self.ledger.get_open_qty()

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from engine.models import Anchors, PnlSnapshot, Position, TradeRecord


def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def position_json(position: Optional[Position]) -> Optional[dict[str, Any]]:
    if position is None:
        return None
    return {"side": position.side, "qty": _num(position.qty), "entryPrice": _num(position.avg_price)}


def anchors_json(anchors: Optional[Anchors]) -> Optional[dict[str, Any]]:
    if anchors is None:
        return None
    return {
        "buyEntryTrigger": _num(anchors.buy_entry_trigger),
        "buyStop": _num(anchors.buy_stop),
        "sellEntryTrigger": _num(anchors.sell_entry_trigger),
        "sellStop": _num(anchors.sell_stop),
    }


def trade_json(trade: TradeRecord) -> dict[str, Any]:
    return {
        "ts": trade.ts,
        "type": trade.type,
        "side": trade.side,
        "qty": _num(trade.qty),
        "price": _num(trade.price),
        "pnl": _num(trade.pnl),
        "meta": dict(trade.meta),
    }


def pnl_json(snapshot: PnlSnapshot) -> dict[str, Any]:
    return {
        "symbol": snapshot.symbol,
        "positionQty": _num(snapshot.position_qty),
        "avgPrice": _num(snapshot.avg_price),
        "lastPrice": _num(snapshot.last_price),
        "realizedPnl": _num(snapshot.realized_pnl),
        "unrealizedPnl": _num(snapshot.unrealized_pnl),
        "totalPnl": _num(snapshot.total_pnl),
        "tradeCount": snapshot.trade_count,
        "trades": [trade_json(t) for t in snapshot.trades],
    }


def status_json(status: dict[str, Any]) -> dict[str, Any]:
    return {
        "state": status["state"],
        "position": position_json(status["position"]),
        "anchors": anchors_json(status["anchors"]),
        "pnl": pnl_json(status["pnl"]),
    }

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from engine.models import PnlSnapshot


@dataclass
class ReplayMetrics:
    total_trades: int
    round_trips: int
    wins: int
    losses: int
    realized_pnl: Decimal
    total_pnl: Decimal

    @property
    def win_rate(self) -> float:
        return self.wins / self.round_trips if self.round_trips else 0.0


def compute_metrics(snapshot: PnlSnapshot) -> ReplayMetrics:
    closes = [t for t in snapshot.trades if t.type == "CLOSE"]
    return ReplayMetrics(
        total_trades=snapshot.trade_count,
        round_trips=len(closes),
        wins=sum(1 for t in closes if t.pnl is not None and t.pnl > 0),
        losses=sum(1 for t in closes if t.pnl is not None and t.pnl < 0),
        realized_pnl=snapshot.realized_pnl,
        total_pnl=snapshot.total_pnl,
    )

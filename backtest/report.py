from __future__ import annotations

from backtest.metrics import ReplayMetrics


def render_report(metrics: ReplayMetrics) -> str:
    return (
        f"Total trades: {metrics.total_trades}\n"
        f"Round trips: {metrics.round_trips} (win rate {metrics.win_rate:.0%})\n"
        f"Realized PnL: {metrics.realized_pnl}\n"
        f"Total PnL: {metrics.total_pnl}"
    )

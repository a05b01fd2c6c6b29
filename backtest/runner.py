from __future__ import annotations

from dataclasses import dataclass

import pandas as pd
from loguru import logger

from adapters.paper import PaperBroker
from engine.fsm import TradingStateMachine
from engine.ledger import PnlLedger
from engine.models import PnlSnapshot, Signal, Tick, to_decimal
from services.config_service import RuntimeConfig, build_anchor_policy


@dataclass
class ReplayResult:
    state: str
    snapshot: PnlSnapshot
    ticks: int
    signals: int


def run_replay(csv_path: str, config: RuntimeConfig) -> ReplayResult:
    """Replay recorded ticks through a fresh FSM and ledger.

    The CSV needs ``timestamp`` (ms) and ``price`` columns. An optional
    ``signal`` column carrying BUY/SELL is applied after that row's tick.
    """
    df = pd.read_csv(csv_path)
    missing = {"timestamp", "price"} - set(df.columns)
    if missing:
        raise ValueError(f"Replay CSV missing columns: {sorted(missing)}")

    clock = _ReplayClock()
    ledger = PnlLedger(config.symbol, clock=clock)
    broker = PaperBroker(config.symbol, ledger)
    fsm = TradingStateMachine(
        symbol=config.symbol,
        broker=broker,
        ledger=ledger,
        policy=build_anchor_policy(config),
        order_qty=config.order_qty,
    )
    ticks = 0
    signals = 0
    for _, row in df.iterrows():
        ts = int(row["timestamp"])
        if pd.isna(row["price"]):
            logger.warning("Skipping replay row at {} with blank price", ts)
            continue
        clock.now = ts
        fsm.on_tick(Tick(price=to_decimal(row["price"]), ts=ts))
        ticks += 1
        raw_signal = row.get("signal")
        if isinstance(raw_signal, str) and raw_signal.strip():
            try:
                signal = Signal(raw_signal.strip().upper())
            except ValueError:
                logger.warning("Skipping unknown replay signal {!r} at {}", raw_signal, ts)
                continue
            fsm.on_signal(signal)
            signals += 1
    logger.info("Replayed {} ticks and {} signals from {}", ticks, signals, csv_path)
    return ReplayResult(state=fsm.get_state(), snapshot=ledger.get_snapshot(), ticks=ticks, signals=signals)


class _ReplayClock:
    """Stamps trades with the replayed tick time instead of wall-clock time."""

    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now

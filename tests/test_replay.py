from decimal import Decimal

from backtest.metrics import compute_metrics
from backtest.report import render_report
from backtest.runner import run_replay
from services.config_service import ConfigService, TraderSettings


def _config():
    settings = TraderSettings(
        _env_file=None,
        ANCHOR_POLICY="fixed",
        ORDER_QTY="1",
        ENTRY_OFFSET="1",
        ENTRY_STOP="2",
        TAKE_PROFIT="5",
        STOP_LOSS="3",
        STREAM_ENABLED=False,
    )
    return ConfigService(settings).load()


def test_replay_round_trip(tmp_path):
    csv_path = tmp_path / "ticks.csv"
    csv_path.write_text(
        "timestamp,price,signal\n"
        "1000,100,BUY\n"
        "2000,100.5,\n"
        "3000,101,\n"
        "4000,104,\n"
        "5000,106,\n"
        "6000,100,BUY\n"
        "7000,98,\n"
    )
    result = run_replay(str(csv_path), _config())
    assert result.ticks == 7
    assert result.signals == 2
    assert result.state == "FLAT"
    assert result.snapshot.realized_pnl == Decimal("5")
    assert [t.ts for t in result.snapshot.trades] == [3000, 5000]

    metrics = compute_metrics(result.snapshot)
    assert metrics.round_trips == 1
    assert metrics.wins == 1
    assert metrics.win_rate == 1.0
    assert "Round trips: 1" in render_report(metrics)


def test_replay_without_signal_column(tmp_path):
    csv_path = tmp_path / "ticks.csv"
    csv_path.write_text("timestamp,price\n1000,100\n2000,101\n")
    result = run_replay(str(csv_path), _config())
    assert result.state == "FLAT"
    assert result.snapshot.trade_count == 0
    assert result.snapshot.last_price == Decimal("101")


def test_replay_skips_rows_with_blank_price(tmp_path):
    csv_path = tmp_path / "ticks.csv"
    csv_path.write_text("timestamp,price,signal\n1000,100,BUY\n2000,,\n3000,101,\n")
    result = run_replay(str(csv_path), _config())
    assert result.ticks == 2
    assert result.state == "LONG"
    assert result.snapshot.last_price == Decimal("101")
    assert result.snapshot.position_qty == Decimal("1")

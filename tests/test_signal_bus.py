from engine.models import Signal
from engine.signal_bus import SignalBus


def test_delivery_in_registration_order():
    bus = SignalBus()
    seen = []
    bus.subscribe(lambda s: seen.append(("a", s)))
    bus.subscribe(lambda s: seen.append(("b", s)))
    bus.emit_buy()
    bus.emit_sell()
    assert seen == [("a", Signal.BUY), ("b", Signal.BUY), ("a", Signal.SELL), ("b", Signal.SELL)]


def test_failing_handler_is_isolated():
    bus = SignalBus()
    seen = []

    def broken(signal):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    bus.emit_buy()
    bus.emit_buy()
    assert seen == [Signal.BUY, Signal.BUY]


def test_no_replay_for_late_subscribers():
    bus = SignalBus()
    bus.emit_buy()
    seen = []
    bus.subscribe(seen.append)
    assert seen == []
    bus.emit_sell()
    assert seen == [Signal.SELL]


def test_unsubscribe():
    bus = SignalBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    bus.emit_buy()
    assert seen == []

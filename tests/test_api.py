from decimal import Decimal

from fastapi.testclient import TestClient

from adapters.paper import PaperBroker
from api.server import build_app
from engine.core import TradingEngine
from engine.fsm import TradingStateMachine
from engine.ledger import PnlLedger
from engine.models import Signal, Tick
from engine.signal_bus import SignalBus
from services.relays import RelayRegistry
from strategies.offsets import FixedOffsetPolicy


def _setup():
    ledger = PnlLedger("BTCUSDT", clock=lambda: 1_700_000_000_000)
    policy = FixedOffsetPolicy(Decimal("1"), Decimal("2"), Decimal("5"), Decimal("3"))
    fsm = TradingStateMachine("BTCUSDT", PaperBroker("BTCUSDT", ledger), ledger, policy, Decimal("0.5"))
    bus = SignalBus()
    engine = TradingEngine(fsm, ledger, bus)
    relays = RelayRegistry()
    client = TestClient(build_app(engine, bus, relays))
    return client, engine, relays


def test_status_when_flat():
    client, _, _ = _setup()
    body = client.get("/status").json()
    assert body["state"] == "FLAT"
    assert body["position"] is None
    assert body["anchors"] is None
    assert body["pnl"]["tradeCount"] == 0
    assert body["pnl"]["lastPrice"] is None
    assert body["pnl"]["trades"] == []


def test_status_when_long():
    client, engine, _ = _setup()
    engine.handle(Tick(price=Decimal("100"), ts=1))
    engine.handle(Signal.BUY)
    engine.handle(Tick(price=Decimal("102"), ts=2))
    body = client.get("/status").json()
    assert body["state"] == "LONG"
    assert body["position"] == {"side": "LONG", "qty": 0.5, "entryPrice": 101.0}
    assert body["anchors"] == {
        "buyEntryTrigger": None,
        "buyStop": None,
        "sellEntryTrigger": 106.0,
        "sellStop": 98.0,
    }
    pnl = body["pnl"]
    assert pnl["lastPrice"] == 102.0
    assert pnl["unrealizedPnl"] == 0.5
    assert pnl["totalPnl"] == pnl["realizedPnl"] + pnl["unrealizedPnl"]
    assert pnl["trades"] == [
        {
            "ts": 1_700_000_000_000,
            "type": "OPEN",
            "side": "BUY",
            "qty": 0.5,
            "price": 101.0,
            "pnl": None,
            "meta": {"reason": "entry_trigger"},
        }
    ]


def test_webhook_emits_signal_and_queues_relay_event():
    client, engine, relays = _setup()
    resp = client.post("/webhook", json={"message": "Accepted Entry"})
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert engine.queue.get_nowait() is Signal.BUY
    event = relays.queue.get_nowait()
    assert event["type"] == "tradingview-signal"
    assert event["side"] == "BUY"
    assert event["rawMessage"] == "Accepted Entry"


def test_webhook_accepts_plain_text_and_alternate_keys():
    client, engine, _ = _setup()
    assert client.post("/webhook", content="Accepted Exit", headers={"Content-Type": "text/plain"}).status_code == 200
    assert client.post("/webhook", json={"text": "order buy filled"}).status_code == 200
    assert engine.queue.get_nowait() is Signal.SELL
    assert engine.queue.get_nowait() is Signal.BUY


def test_webhook_rejects_missing_or_unknown_message():
    client, engine, _ = _setup()
    assert client.post("/webhook", json={}).status_code == 400
    resp = client.post("/webhook", json={"message": "hello"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown message format"}
    assert engine.queue.empty()


def test_relay_management():
    client, _, _ = _setup()
    assert client.get("/relays").json() == {"relays": []}
    resp = client.post("/relays", json={"url": "https://a.example/hook"})
    assert resp.json() == {"ok": True, "relays": ["https://a.example/hook"]}
    assert client.post("/relays", json={}).status_code == 400
    resp = client.request("DELETE", "/relays", json={"url": "https://a.example/hook"})
    assert resp.json() == {"ok": True, "relays": []}
    assert client.request("DELETE", "/relays", json={"url": ""}).status_code == 400


def test_dashboard_and_health():
    client, _, _ = _setup()
    page = client.get("/")
    assert page.status_code == 200
    assert "BTCUSDT Paper Trader" in page.text
    assert client.get("/health").json() == {"status": "healthy", "running": False}

from __future__ import annotations

import json
import time
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from loguru import logger
from pydantic import BaseModel

from api.dashboard import render_dashboard
from api.schemas import status_json
from engine.core import TradingEngine
from engine.signal_bus import SignalBus
from services.relays import RelayRegistry
from services.signal_parser import parse_signal_message


class RelayRequest(BaseModel):
    url: Optional[str] = None


def _extract_message(body: Any) -> Optional[str]:
    if isinstance(body, str):
        return body
    if isinstance(body, dict):
        for key in ("message", "text", "signal"):
            value = body.get(key)
            if isinstance(value, str):
                return value
    return None


def build_app(engine: TradingEngine, bus: SignalBus, relays: RelayRegistry) -> FastAPI:
    app = FastAPI(title=f"{engine.fsm.symbol} Paper Trader")

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        raw = await request.body()
        try:
            body: Any = json.loads(raw) if raw else None
        except ValueError:
            body = raw.decode("utf-8", errors="replace")

        message = _extract_message(body)
        if not message or not message.strip():
            logger.warning("Webhook without usable message text: {}", body)
            return JSONResponse({"error": "Missing message text"}, status_code=400)

        signal = parse_signal_message(message)
        if signal is None:
            logger.warning("Unknown TradingView message format: {}", message)
            return JSONResponse({"error": "Unknown message format"}, status_code=400)

        logger.info("Received TradingView signal {} from {!r}", signal.value, message)
        bus.emit(signal)
        await relays.publish(
            {
                "type": "tradingview-signal",
                "side": signal.value,
                "rawMessage": message,
                "ts": int(time.time() * 1000),
            }
        )
        return JSONResponse({"status": "ok"})

    @app.get("/status")
    async def status() -> dict[str, Any]:
        return status_json(engine.status())

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "healthy", "running": engine.running}

    @app.get("/", response_class=HTMLResponse)
    async def dashboard() -> str:
        return render_dashboard(engine.fsm.symbol)

    @app.get("/relays")
    async def list_relays() -> dict[str, Any]:
        return {"relays": relays.urls()}

    @app.post("/relays")
    async def add_relay(payload: RelayRequest) -> JSONResponse:
        if not payload.url or not payload.url.strip():
            return JSONResponse({"error": "url is required"}, status_code=400)
        return JSONResponse({"ok": True, "relays": relays.add(payload.url)})

    @app.delete("/relays")
    async def remove_relay(payload: RelayRequest) -> JSONResponse:
        if not payload.url or not payload.url.strip():
            return JSONResponse({"error": "url is required"}, status_code=400)
        return JSONResponse({"ok": True, "relays": relays.remove(payload.url)})

    return app

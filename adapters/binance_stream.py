from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Optional

from binance import AsyncClient, BinanceSocketManager
from binance.exceptions import BinanceAPIException
from loguru import logger

from adapters.base import MarketStream
from engine.models import Tick, to_decimal


def parse_trade_message(msg: dict[str, Any]) -> Optional[Tick]:
    """Convert a ``<symbol>@trade`` payload to a Tick; other payloads give None."""
    if not isinstance(msg, dict):
        return None
    # combined-stream envelopes wrap the payload in "data"
    if "data" in msg and isinstance(msg["data"], dict):
        msg = msg["data"]
    if msg.get("e") == "error":
        logger.warning("Binance stream error message: {}", msg.get("m"))
        return None
    if msg.get("e") != "trade" or "p" not in msg:
        return None
    ts = msg.get("T") or msg.get("E") or 0
    try:
        price = to_decimal(msg["p"])
    except ValueError:
        logger.warning("Ignoring trade with unusable price {!r}", msg["p"])
        return None
    return Tick(price=price, ts=int(ts))


class BinanceTradeStream(MarketStream):
    """Public Binance spot trade stream, reconnecting with exponential backoff."""

    def __init__(self, symbol: str, reconnect_max_s: float = 30.0, testnet: bool = False) -> None:
        self.symbol = symbol.upper()
        self.reconnect_max_s = reconnect_max_s
        self.testnet = testnet
        self._running = False
        self._client: Optional[AsyncClient] = None

    async def ticks(self) -> AsyncIterator[Tick]:
        self._running = True
        backoff = 1.0
        while self._running:
            try:
                self._client = await AsyncClient.create(testnet=self.testnet)
                socket = BinanceSocketManager(self._client).trade_socket(self.symbol)
                async with socket as stream:
                    logger.info("Connected to Binance trade stream for {}", self.symbol)
                    backoff = 1.0
                    while self._running:
                        tick = parse_trade_message(await stream.recv())
                        if tick is not None:
                            yield tick
            except asyncio.CancelledError:
                raise
            except (BinanceAPIException, OSError, asyncio.TimeoutError) as exc:
                logger.error("Binance stream for {} failed: {}", self.symbol, exc)
            except Exception as exc:
                logger.exception("Unexpected Binance stream error for {}: {}", self.symbol, exc)
            finally:
                await self._close_client()
            if self._running:
                logger.warning("Reconnecting Binance stream in {:.1f}s", backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self.reconnect_max_s)

    async def close(self) -> None:
        self._running = False
        await self._close_client()

    async def _close_client(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.close_connection()

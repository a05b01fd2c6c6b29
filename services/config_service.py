from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from strategies.base import AnchorPolicy
from strategies.offsets import FixedOffsetPolicy, PercentOffsetPolicy


class TraderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SYMBOL: str = "BTCUSDT"
    ORDER_QTY: str = "0.001"
    ANCHOR_POLICY: str = "percent"
    ENTRY_OFFSET_PCT: str = "0.1"
    ENTRY_STOP_PCT: str = "0.2"
    TAKE_PROFIT_PCT: str = "0.5"
    STOP_LOSS_PCT: str = "0.3"
    ENTRY_OFFSET: str = "50"
    ENTRY_STOP: str = "100"
    TAKE_PROFIT: str = "250"
    STOP_LOSS: str = "150"
    PRICE_TICK: str = "0.01"
    EVENT_QUEUE_SIZE: int = 1000
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    RELAY_URLS: str = ""
    RELAY_TIMEOUT_S: float = 5.0
    STREAM_ENABLED: bool = True
    STREAM_RECONNECT_MAX_S: float = 30.0


class RuntimeConfig(BaseModel):
    symbol: str
    order_qty: Decimal
    anchor_policy: str
    entry_offset_pct: Decimal
    entry_stop_pct: Decimal
    take_profit_pct: Decimal
    stop_loss_pct: Decimal
    entry_offset: Decimal
    entry_stop: Decimal
    take_profit: Decimal
    stop_loss: Decimal
    price_tick: Decimal
    event_queue_size: int
    relay_urls: list[str]
    relay_timeout_s: float
    stream_enabled: bool
    stream_reconnect_max_s: float


class ConfigService:
    def __init__(self, base: TraderSettings) -> None:
        self.base = base

    def load(self) -> RuntimeConfig:
        b = self.base
        return RuntimeConfig(
            symbol=b.SYMBOL.strip().upper(),
            order_qty=Decimal(b.ORDER_QTY),
            anchor_policy=b.ANCHOR_POLICY.strip().lower(),
            entry_offset_pct=Decimal(b.ENTRY_OFFSET_PCT),
            entry_stop_pct=Decimal(b.ENTRY_STOP_PCT),
            take_profit_pct=Decimal(b.TAKE_PROFIT_PCT),
            stop_loss_pct=Decimal(b.STOP_LOSS_PCT),
            entry_offset=Decimal(b.ENTRY_OFFSET),
            entry_stop=Decimal(b.ENTRY_STOP),
            take_profit=Decimal(b.TAKE_PROFIT),
            stop_loss=Decimal(b.STOP_LOSS),
            price_tick=Decimal(b.PRICE_TICK),
            event_queue_size=b.EVENT_QUEUE_SIZE,
            relay_urls=[u.strip() for u in b.RELAY_URLS.split(",") if u.strip()],
            relay_timeout_s=b.RELAY_TIMEOUT_S,
            stream_enabled=b.STREAM_ENABLED,
            stream_reconnect_max_s=b.STREAM_RECONNECT_MAX_S,
        )


def build_anchor_policy(config: RuntimeConfig) -> AnchorPolicy:
    tick = config.price_tick if config.price_tick > 0 else None
    if config.anchor_policy == "percent":
        return PercentOffsetPolicy(
            entry_offset_pct=config.entry_offset_pct,
            entry_stop_pct=config.entry_stop_pct,
            take_profit_pct=config.take_profit_pct,
            stop_loss_pct=config.stop_loss_pct,
            price_tick=tick,
        )
    if config.anchor_policy == "fixed":
        return FixedOffsetPolicy(
            entry_offset=config.entry_offset,
            entry_stop=config.entry_stop,
            take_profit=config.take_profit,
            stop_loss=config.stop_loss,
            price_tick=tick,
        )
    raise ValueError(f"Unknown anchor policy: {config.anchor_policy}")

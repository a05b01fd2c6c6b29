from __future__ import annotations

import re
from typing import Optional

from engine.models import Signal

# explicit order verbs win over entry/exit wording
_ACTION_RE = re.compile(r"\b(buy|sell)\b", re.IGNORECASE)
_ENTRY_RE = re.compile(r"\b(entry|enter|long)\b", re.IGNORECASE)
_EXIT_RE = re.compile(r"\b(exit|close|flat)\b", re.IGNORECASE)


def parse_signal_message(message: str) -> Optional[Signal]:
    """Map a TradingView alert text such as ``"Accepted Entry"`` to BUY or SELL."""
    if not message:
        return None
    action = _ACTION_RE.search(message)
    if action:
        return Signal(action.group(1).upper())
    if _EXIT_RE.search(message):
        return Signal.SELL
    if _ENTRY_RE.search(message):
        return Signal.BUY
    return None

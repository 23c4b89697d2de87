"""
Block duration parsing.

Accepts "<integer><unit>" where unit is s, m, h or d, up to roughly a
century. Anything else means the site is blocked permanently, so parsing
never raises.
"""

from __future__ import annotations

import re
import time
from typing import Optional

UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
# Longer blocks are treated as permanent; the expiry must stay a valid local time.
MAX_DURATION_SECONDS = 100 * 365 * 86400

_DURATION_RE = re.compile(r"(\d+)([smhd])")


def parse_duration_seconds(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = _DURATION_RE.fullmatch(text.strip().lower())
    if not match:
        return None
    seconds = int(match.group(1)) * UNIT_SECONDS[match.group(2)]
    if seconds > MAX_DURATION_SECONDS:
        return None
    return seconds


def parse_duration(text: Optional[str], now: Optional[float] = None) -> Optional[float]:
    """Return the absolute expiry (seconds since epoch) for `text`, or None."""
    seconds = parse_duration_seconds(text)
    if seconds is None:
        return None
    if now is None:
        now = time.time()
    return now + seconds


def format_remaining(expiry: float, now: Optional[float] = None) -> str:
    if now is None:
        now = time.time()
    remaining = int(expiry - now)
    if remaining <= 0:
        return "Expired"
    return f"Expires in {remaining} seconds"

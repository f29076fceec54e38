"""Lenient conversion of manifest text values.

Every helper returns ``None`` for values it cannot read instead of raising.
"""

from __future__ import annotations

import math


def parse_finite_float(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_int(raw: str | None) -> int | None:
    value = parse_finite_float(raw)
    if value is None or value != int(value):
        return None
    return int(value)


def parse_bool(raw: str | None) -> bool | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    return None

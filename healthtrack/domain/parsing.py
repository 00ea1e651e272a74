"""Explicit numeric coercion shared by the wire models and the validators."""

import math
from typing import Any


def parse_number(raw: Any) -> float | None:
    """
    Explicit numeric coercion for raw input.

    Returns None (absent) for blank, non-numeric, boolean and non-finite input,
    so a missing measurement is never mistaken for zero.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    elif not isinstance(raw, int | float):
        return None

    try:
        value = float(raw)
    except (ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None

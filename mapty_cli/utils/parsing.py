"""Parsing helpers for raw form and command-line input."""

from __future__ import annotations

import math
from typing import Optional


def parse_finite(value: Optional[str]) -> Optional[float]:
    """Parse ``value`` as a finite float, or return ``None``."""
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        number = float(raw)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


from __future__ import annotations

import math
import re
from typing import Any, Optional


_SHORTHAND_RE = re.compile(r"^([0-9]+(?:\.[0-9]+)?)([KMB]?)$")
_FACTORS = {"": 1, "K": 1000, "M": 1000000, "B": 1000000000}


def _finite_int(number: float) -> Optional[int]:
    return int(round(number)) if math.isfinite(number) and number >= 0 else None


def parse_count(value: Any) -> Optional[int]:
    """Parse counts like 500, '1.2K', '3M', '4,500', '500+' into an integer.

    Returns None for unparsable inputs (including booleans, negative numbers
    and digit strings too long to represent).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return _finite_int(value)
    if not isinstance(value, str):
        return None
    s = value.strip().upper().replace(",", "")
    if not s:
        return None
    if s.endswith("+"):
        s = s[:-1]
    m = _SHORTHAND_RE.match(s)
    if m:
        return _finite_int(float(m.group(1)) * _FACTORS[m.group(2)])
    parts = s.split()
    if not parts:
        return None
    # e.g. "500 connections"
    digits = "".join(ch for ch in parts[0] if ch.isdigit())
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError:
        # beyond the interpreter's int/str conversion limit
        return None

from __future__ import annotations

import math
import numbers
import re
from typing import Any, Dict, List, Optional, Sequence

# Only the leading numeric prefix counts: "12 kg" reads as 12, "10%" as 10.
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)")


def is_number(value: Any) -> bool:
    # bool is an int subclass but is not numeric data here
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def parse_float(value: Any) -> Optional[float]:
    """Float value of the leading numeric prefix; None when there is none."""
    if value is None or isinstance(value, bool):
        return None
    if is_number(value):
        try:
            f = float(value)
        except (TypeError, ValueError):
            return None
        return None if math.isnan(f) else f
    m = _FLOAT_PREFIX_RE.match(str(value))
    if not m:
        return None
    return float(m.group(1))


def looks_numeric(value: Any) -> bool:
    return is_number(value) or parse_float(value) is not None


def is_date_like_name(column: str) -> bool:
    name = str(column).lower()
    return "date" in name or "time" in name


def first_row_columns(rows: Sequence[Dict[str, Any]]) -> List[str]:
    return list(rows[0].keys()) if rows else []


def numeric_columns(rows: Sequence[Dict[str, Any]], columns: Sequence[str]) -> List[str]:
    # Representative value is the first row's; heterogeneous columns are not scanned.
    if not rows:
        return []
    first = rows[0]
    return [c for c in columns if looks_numeric(first.get(c))]


def date_columns(columns: Sequence[str]) -> List[str]:
    return [c for c in columns if is_date_like_name(c)]

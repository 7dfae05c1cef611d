from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence

PREVIEW_ROWS = 10
MAX_SCHEMA_ENTRIES = 50

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_column_name(name: str) -> str:
    return _UNSAFE_CHARS.sub("", str(name))


def bounded_preview(rows: Sequence[Dict[str, Any]], limit: int = PREVIEW_ROWS) -> List[Dict[str, Any]]:
    # Only the preview leaves the process with raw values
    return [dict(r) for r in rows[:limit]]


def limit_schema(schema: Sequence[Any], limit: int = MAX_SCHEMA_ENTRIES) -> List[Any]:
    return list(schema[:limit])

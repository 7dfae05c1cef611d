"""
Pattern-matched evaluation of a small SQL subset over a ``Table``.

There is no parser. The statement is checked against a handful of shapes in a
fixed order and the first match decides the result:

1. ``SELECT *``                -> every row, untouched
2. ``SELECT <cols> FROM ...``  -> projection onto the listed columns
3. ``LIMIT <n>``               -> first n rows of the table
4. anything else               -> every row

Shapes do not compose: a projection with a LIMIT is only projected. WHERE,
ORDER BY, GROUP BY and JOIN text is accepted and ignored. Unrecognized or
malformed statements fall through to the full table instead of raising.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from sqlassist.store.tabular import Row, Table

logger = logging.getLogger(__name__)

_SELECT_LIST_RE = re.compile(r"SELECT\s+(.+?)\s+FROM", re.IGNORECASE | re.DOTALL)
_LIMIT_RE = re.compile(r"LIMIT\s+(\d+)", re.IGNORECASE)


def select_list(statement: str) -> Optional[List[str]]:
    m = _SELECT_LIST_RE.search(statement)
    if not m:
        return None
    return [tok.strip() for tok in m.group(1).split(",")]


def limit_count(statement: str) -> Optional[int]:
    m = _LIMIT_RE.search(statement)
    return int(m.group(1)) if m else None


def project(rows: Sequence[Row], columns: Sequence[str]) -> List[Row]:
    out: List[Row] = []
    for row in rows:
        new_row: Row = {}
        for col in columns:
            if col == "*":
                new_row.update(row)
            else:
                new_row[col] = row.get(col)
        out.append(new_row)
    return out


def execute(statement: str, table: Table) -> List[Row]:
    rows = table.rows
    try:
        upper = (statement or "").upper()

        if "SELECT *" in upper:
            return list(rows)

        if "SELECT" in upper and "FROM" in upper:
            columns = select_list(statement)
            if columns is not None:
                return project(rows, columns)

        if "LIMIT" in upper:
            n = limit_count(statement)
            if n is not None:
                return list(rows[:n])

        return list(rows)
    except Exception:
        logger.exception("Mini-SQL evaluation failed; returning the full table")
        return list(rows)

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlassist.store.tabular import LOCAL_TABLE_NAME, ColumnDescriptor


@dataclass
class RulePlan:
    columns: List[str] = field(default_factory=list)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None


def escape_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _find_column(names: Sequence[str], token: str) -> Optional[str]:
    # best-effort match by case-insensitive exact name
    lc = {n.lower(): n for n in names}
    return lc.get(token.lower())


def _mentioned_columns(ql: str, names: Sequence[str]) -> List[str]:
    found: List[str] = []
    for n in names:
        variants = {n.lower(), n.lower().replace("_", " ")}
        if any(re.search(r"\b" + re.escape(v) + r"\b", ql) for v in variants):
            found.append(n)
    return found


def parse_question(question: str, names: Sequence[str]) -> RulePlan:
    ql = question.strip().lower()
    plan = RulePlan()

    m = re.search(r"\b(?:first|top|limit)\s+(\d+)\b", ql)
    if m:
        plan.limit = int(m.group(1))

    m = re.search(r"\b(?:sort(?:ed)?|order(?:ed)?)\s+by\s+([a-z0-9_ ]+?)(\s+desc\w*|\s+asc\w*)?$", ql)
    if m:
        col = _find_column(names, m.group(1).strip().replace(" ", "_")) or _find_column(names, m.group(1).strip())
        if col:
            plan.order_by = col
            plan.descending = bool(m.group(2) and m.group(2).strip().startswith("desc"))

    if not re.search(r"\b(everything|all)\b", ql):
        plan.columns = _mentioned_columns(ql, names)
    return plan


def plan_sql(question: str, schema: Sequence[ColumnDescriptor]) -> str:
    """Deterministic translation used when no language model is available."""
    names = [c.column_name for c in schema]
    table_name = schema[0].table_name if schema else LOCAL_TABLE_NAME
    plan = parse_question(question, names)

    projection = ", ".join(plan.columns) if plan.columns else "*"
    sql = f"SELECT {projection} FROM {table_name}"
    if plan.order_by:
        sql += f" ORDER BY {escape_ident(plan.order_by)}" + (" DESC" if plan.descending else "")
    if plan.limit is not None:
        sql += f" LIMIT {plan.limit}"
    return sql

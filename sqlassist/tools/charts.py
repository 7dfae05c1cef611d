from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from sqlassist.utils.privacy import sanitize_column_name
from sqlassist.utils.values import date_columns, first_row_columns, numeric_columns, parse_float

CHART_LINE = "line"
CHART_BAR = "bar"
CHART_PIE = "pie"
CHART_TABLE = "table"


@dataclass(frozen=True)
class Summary:
    total_rows: int
    column_count: int
    column_names: List[str]
    has_numeric_data: bool
    has_date_data: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "total_columns": self.column_count,
            "columns": list(self.column_names),
            "data_types": {"numeric": self.has_numeric_data, "date": self.has_date_data},
        }


@dataclass(frozen=True)
class ChartRecommendation:
    category: str
    statistics: Dict[str, Dict[str, float]] = field(default_factory=dict)
    # 'aggregated' when some column looked numeric, otherwise 'summary'
    kind: str = "summary"
    message: Optional[str] = None

    @property
    def numeric_columns(self) -> List[str]:
        return list(self.statistics.keys())

    def to_dict(self) -> Dict[str, Any]:
        if self.kind == "summary":
            return {"type": "summary", "message": self.message}
        return {
            "type": "aggregated",
            "numericColumns": self.numeric_columns,
            "statistics": {k: dict(v) for k, v in self.statistics.items()},
        }


def summarize(rows: Sequence[Dict[str, Any]]) -> Summary:
    columns = first_row_columns(rows)
    return Summary(
        total_rows=len(rows),
        column_count=len(columns),
        column_names=[sanitize_column_name(c) for c in columns],
        has_numeric_data=bool(numeric_columns(rows, columns)),
        has_date_data=bool(date_columns(columns)),
    )


def choose_category(rows: Sequence[Dict[str, Any]], columns: Sequence[str]) -> str:
    if not rows:
        return CHART_TABLE
    numeric = numeric_columns(rows, columns)
    dates = date_columns(columns)
    if dates and numeric:
        return CHART_LINE
    if len(numeric) > 1:
        return CHART_BAR
    if len(rows) <= 10:
        return CHART_PIE
    return CHART_TABLE


def aggregate_statistics(rows: Sequence[Dict[str, Any]], columns: Sequence[str]) -> Dict[str, Dict[str, float]]:
    stats: Dict[str, Dict[str, float]] = {}
    for col in columns:
        parsed = [parse_float(row.get(col)) for row in rows]
        values = np.asarray([v for v in parsed if v is not None], dtype=float)
        if values.size == 0:
            # classified numeric from the first row, but nothing parses
            continue
        stats[col] = {
            "min": float(values.min()),
            "max": float(values.max()),
            "avg": float(values.mean()),
            "count": int(values.size),
        }
    return stats


def recommend(rows: Sequence[Dict[str, Any]], columns: Optional[Sequence[str]] = None) -> ChartRecommendation:
    cols = list(columns) if columns is not None else first_row_columns(rows)
    category = choose_category(rows, cols)
    numeric = numeric_columns(rows, cols)
    if not numeric:
        return ChartRecommendation(
            category=category,
            kind="summary",
            message=f"Found {len(rows)} records with {len(cols)} columns",
        )
    return ChartRecommendation(category=category, statistics=aggregate_statistics(rows, numeric), kind="aggregated")

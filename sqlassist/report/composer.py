from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time as dtime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import pyarrow as pa

from sqlassist.tools.charts import ChartRecommendation, Summary
from sqlassist.tools.profile import Insights
from sqlassist.utils.privacy import PREVIEW_ROWS, bounded_preview

SOURCE_LOCAL = "csv/excel"
SOURCE_REMOTE = "snowflake"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def assess_query_complexity(statement: str) -> Dict[str, Any]:
    upper = (statement or "").upper()
    level = "simple"
    features: List[str] = []
    if "GROUP BY" in upper:
        level = "medium"
        features.append("aggregation")
    if "WHERE" in upper:
        features.append("filtering")
    if "ORDER BY" in upper:
        features.append("sorting")
    if "JOIN" in upper:
        level = "complex"
        features.append("joining")
    return {"level": level, "features": features}


def build_chart_config(chart: ChartRecommendation) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "type": chart.category,
        "options": {"responsive": True, "maintainAspectRatio": False},
    }
    if chart.kind == "aggregated":
        labels = chart.numeric_columns
        config["data"] = {
            "labels": labels,
            "datasets": [{"label": "Data Values", "data": [chart.statistics[c].get("avg", 0) for c in labels]}],
        }
    return config


def to_jsonable(obj: Any):
    if obj is None or isinstance(obj, (str, bool, int)):
        return obj
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, (date, datetime, dtime, pd.Timestamp)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, np.generic):
        return to_jsonable(obj.item())
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, pa.Scalar):
        return to_jsonable(obj.as_py())
    if isinstance(obj, pd.DataFrame):
        return to_jsonable(obj.head(PREVIEW_ROWS).to_dict(orient="records"))
    if isinstance(obj, bytes):
        return obj.hex()
    try:
        json.dumps(obj)
        return obj
    except (TypeError, ValueError):
        return str(obj)


@dataclass(frozen=True)
class ResponseEnvelope:
    query: str
    generated_sql: str
    timestamp: str
    summary: Summary
    insights: Insights
    chart: ChartRecommendation
    chart_config: Dict[str, Any]
    preview: Tuple[Dict[str, Any], ...]
    full_count: int
    complexity: Dict[str, Any]
    data_source: str = SOURCE_LOCAL
    processing_time: str = field(default_factory=_now_iso)

    @property
    def sample_size(self) -> int:
        return len(self.preview)

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable({
            "query": {
                "original": self.query,
                "generated_sql": self.generated_sql,
                "timestamp": self.timestamp,
            },
            "data_summary": self.summary.to_dict(),
            "insights": self.insights.to_dict(),
            "visualization": {
                "suggested_chart_type": self.chart.category,
                "chart_data": self.chart.to_dict(),
                "chart_config": self.chart_config,
            },
            "results": {
                "preview": list(self.preview),
                "full_count": self.full_count,
                "sample_size": self.sample_size,
            },
            "metadata": {
                "processing_time": self.processing_time,
                "data_source": self.data_source,
                "query_complexity": self.complexity,
            },
        })

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def compose(
    query: str,
    statement: str,
    rows: Sequence[Dict[str, Any]],
    summary: Summary,
    insights: Insights,
    chart: ChartRecommendation,
    data_source: str = SOURCE_LOCAL,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        query=query,
        generated_sql=statement,
        timestamp=_now_iso(),
        summary=summary,
        insights=insights,
        chart=chart,
        chart_config=build_chart_config(chart),
        preview=tuple(bounded_preview(rows, PREVIEW_ROWS)),
        full_count=len(rows),
        complexity=assess_query_complexity(statement),
        data_source=data_source,
    )
